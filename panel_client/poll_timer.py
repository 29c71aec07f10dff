from __future__ import annotations

from typing import Callable, Optional

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]
LoggerFn = Callable[..., None]


def _noop_log(message: str, *args: object) -> None:
    return None


class PollTimer:
    """Repeating timer built on one-shot ``after`` scheduling.

    The next tick is scheduled only once the current callback returns, so a
    slow tick delays the following one instead of queueing behind it.
    """

    def __init__(
        self,
        interval_ms: int,
        *,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        logger: Optional[LoggerFn] = None,
    ) -> None:
        self.interval_ms = max(1, int(interval_ms))
        self._after = after
        self._after_cancel = after_cancel
        self._logger = logger or _noop_log
        self._handle: object | None = None
        self._callback: Callable[[], None] | None = None
        self._running = False

    @property
    def active(self) -> bool:
        return self._running

    @property
    def handle(self) -> object | None:
        return self._handle

    def start(self, callback: Callable[[], None], *, initial_delay_ms: int = 0) -> object | None:
        if self._running:
            self._log("Poll timer already running; start ignored")
            return self._handle
        self._callback = callback
        self._running = True
        self._handle = self._after(max(0, int(initial_delay_ms)), self._run)
        self._log("Poll timer started: interval=%dms first=%dms", self.interval_ms, initial_delay_ms)
        return self._handle

    def stop(self) -> None:
        was_running = self._running
        self._running = False
        self._callback = None
        handle = self._handle
        self._handle = None
        if handle is not None:
            self._after_cancel(handle)
        if was_running:
            self._log("Poll timer stopped")

    def _run(self) -> None:
        self._handle = None
        try:
            if self._running and self._callback is not None:
                self._callback()
        finally:
            # The callback may have stopped the timer.
            if self._running:
                self._handle = self._after(self.interval_ms, self._run)

    def _log(self, message: str, *args: object) -> None:
        try:
            self._logger(message, *args)
        except TypeError:
            self._logger(message % args if args else message)
