from __future__ import annotations

import logging
from typing import List

from panel_client.formatter import format_message, format_panel
from panel_client.poll_timer import PollTimer
from panel_client.surface import DisplaySurfaceManager
from panel_plugin.gateway import GatewayError, PlayerGateway, PlayerInactiveError, ToolMissingError
from panel_plugin.preferences import Preferences

LOGGER = logging.getLogger("PlayerPanel.Poller")


class StatusPoller:
    """Queries the player on every tick and writes the rendered panel."""

    def __init__(
        self,
        *,
        gateway: PlayerGateway,
        surface: DisplaySurfaceManager,
        preferences: Preferences,
        timer: PollTimer,
    ) -> None:
        self._gateway = gateway
        self._surface = surface
        self._preferences = preferences
        self._timer = timer
        self._last_error: str | None = None

    @property
    def polling(self) -> bool:
        return self._timer.active

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def start(self) -> None:
        if self._timer.active:
            return
        self._timer.start(self.refresh, initial_delay_ms=0)

    def stop(self) -> None:
        self._timer.stop()

    def refresh(self) -> bool:
        """Run one tick; returns True when lines were written."""
        if not self._surface.visible:
            if self._timer.active:
                LOGGER.debug("Panel no longer visible; stopping poller")
                self.stop()
            self._surface.hide()
            return False
        return self._surface.write_lines(self.render())

    def render(self) -> List[str]:
        try:
            status = self._gateway.query_status()
        except ToolMissingError as exc:
            self._note_error(str(exc), logging.ERROR)
            return format_message(str(exc), self._preferences)
        except PlayerInactiveError as exc:
            self._note_error(str(exc), logging.INFO)
            return format_message(str(exc), self._preferences)
        except GatewayError as exc:
            self._note_error(str(exc), logging.WARNING)
            return format_message(str(exc), self._preferences)
        if self._last_error is not None:
            LOGGER.info("Player status available again")
            self._last_error = None
        return format_panel(status, self._preferences)

    def _note_error(self, message: str, level: int) -> None:
        # Log transitions only; the panel shows the message on every tick.
        if message != self._last_error:
            LOGGER.log(level, "Status unavailable: %s", message)
        self._last_error = message
