"""User transport commands forwarded to the player gateway."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .gateway import CommandFailedError, PlayerGateway, ToolMissingError
from .player_status import RepeatMode, next_repeat_mode, parse_repeat_mode

LOGGER = logging.getLogger("PlayerPanel.Commands")

NOTIFY_TITLE = "Player control"
PLAY_PAUSE = "play-pause"
ACTIONS = ("next", "previous", "volume_up", "volume_down", "toggle_shuffle", "toggle_repeat")

_REPEAT_LABELS = {
    RepeatMode.OFF: "Off",
    RepeatMode.PLAYLIST: "Playlist",
    RepeatMode.TRACK: "Track",
}

NotifyFn = Callable[[str, int, Optional[str]], None]


class CommandHandler:
    """Maps action names to utility subcommands and refreshes the panel afterwards."""

    def __init__(
        self,
        gateway: PlayerGateway,
        *,
        notify: NotifyFn,
        refresh: Callable[[], object],
        is_visible: Callable[[], bool],
        show_notifications: bool = True,
        volume_step: float = 0.05,
    ) -> None:
        self._gateway = gateway
        self._notify = notify
        self._refresh = refresh
        self._is_visible = is_visible
        self._show_notifications = show_notifications
        self._volume_step = volume_step

    @staticmethod
    def completions(prefix: str = "") -> List[str]:
        return [name for name in ACTIONS if name.startswith(prefix or "")]

    def handle(self, action: Optional[str] = None) -> bool:
        """Run one action; returns True when the utility accepted the command."""
        name = (action or "").strip()
        try:
            resolved = self._resolve(name)
        except ToolMissingError as exc:
            self._notify(str(exc), logging.ERROR, NOTIFY_TITLE)
            return False
        if resolved is None:
            LOGGER.warning("Unknown player command %r", name)
            self._notify(f"Unknown command '{name}'", logging.WARNING, NOTIFY_TITLE)
            return False
        args, message = resolved
        return self._run(args, message)

    def _resolve(self, name: str) -> Optional[Tuple[Sequence[str], str]]:
        step = f"{self._volume_step:g}"
        if not name:
            return (PLAY_PAUSE,), "Toggled play/pause"
        if name == "next":
            return ("next",), "Next track"
        if name == "previous":
            return ("previous",), "Previous track"
        if name == "volume_up":
            return ("volume", f"{step}+"), "Volume +"
        if name == "volume_down":
            return ("volume", f"{step}-"), "Volume -"
        if name == "toggle_shuffle":
            return ("shuffle", "Toggle"), "Toggled shuffle"
        if name == "toggle_repeat":
            target = next_repeat_mode(parse_repeat_mode(self._gateway.query_loop()))
            return ("loop", target.value), f"Repeat: {_REPEAT_LABELS[target]}"
        return None

    def _run(self, args: Sequence[str], message: str) -> bool:
        try:
            self._gateway.send_command(*args)
        except ToolMissingError as exc:
            self._notify(str(exc), logging.ERROR, NOTIFY_TITLE)
            return False
        except CommandFailedError as exc:
            LOGGER.warning("%s", exc)
            self._notify(str(exc), logging.WARNING, NOTIFY_TITLE)
            return False
        LOGGER.debug("Player command accepted: %s", " ".join(args))
        if self._show_notifications:
            self._notify(message, logging.INFO, NOTIFY_TITLE)
        if self._is_visible():
            self._refresh()
        return True
