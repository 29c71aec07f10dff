"""Applies the configured player key bindings to the host."""

from __future__ import annotations

import inspect
import logging
from typing import Callable, Dict, List, Optional, Tuple

from panel_plugin.preferences import KeyBindings

LOGGER = logging.getLogger("PlayerPanel.Bindings")

BindFn = Callable[[str, Callable[[], None]], object]
UnbindFn = Callable[[object], None]


class BindingManager:
    """Binds key sequences from ``KeyBindings`` to registered action handlers."""

    def __init__(self, bind: BindFn, unbind: UnbindFn, bindings: KeyBindings) -> None:
        self._bind = bind
        self._unbind = unbind
        self.bindings = bindings
        self._handlers: Dict[str, Callable] = {}
        self._bound: List[Tuple[str, object]] = []

    @property
    def bound_sequences(self) -> List[str]:
        return [sequence for sequence, _handle in self._bound]

    def register_action(self, action_name: str, handler: Callable) -> None:
        """Associate an action identifier with a callable."""

        self._handlers[action_name] = handler

    def activate(self) -> int:
        """Bind every configured action that has a handler; returns the count bound."""

        self.deactivate()
        if not self.bindings.enabled:
            LOGGER.debug("Key bindings disabled; nothing bound")
            return 0
        for action, sequence in self.bindings.actions().items():
            handler = self._handlers.get(action)
            if handler is None:
                continue
            try:
                normalized = self._normalize_sequence(sequence)
            except ValueError:
                LOGGER.warning("Skipping empty key binding for %s", action)
                continue
            handle = self._bind(normalized, self._wrap(handler))
            self._bound.append((normalized, handle))
            LOGGER.debug("Bound %s -> %s", normalized, action)
        return len(self._bound)

    def deactivate(self) -> None:
        bound, self._bound = self._bound, []
        for sequence, handle in bound:
            try:
                self._unbind(handle)
            except Exception as exc:
                # The host may already have destroyed the binding target.
                LOGGER.debug("Unbinding %s failed: %s", sequence, exc)

    @staticmethod
    def _wrap(handler: Callable) -> Callable[[], None]:
        if not BindingManager._handler_accepts_event(handler):
            return handler

        def _callback() -> None:
            handler(None)

        return _callback

    @staticmethod
    def _handler_accepts_event(handler: Callable) -> bool:
        try:
            signature = inspect.signature(handler)
        except (TypeError, ValueError):
            return False
        params = [
            param
            for param in signature.parameters.values()
            if param.default is inspect.Parameter.empty
            and param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        ]
        return len(params) >= 1

    @staticmethod
    def _normalize_sequence(sequence: Optional[str]) -> str:
        seq = (sequence or "").strip()
        if seq.startswith("<") and seq.endswith(">") and len(seq) > 2:
            seq = seq[1:-1].strip()
        if not seq:
            raise ValueError("Binding sequence cannot be empty")
        return seq
