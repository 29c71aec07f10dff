"""Lifecycle and placement of the floating panel."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from panel_plugin.host import PanelGeometry, PanelHost
from panel_plugin.preferences import Preferences

LOGGER = logging.getLogger("PlayerPanel.Surface")

DISMISS_KEYS = ("Q", "Escape")


def compute_geometry(preferences: Preferences, columns: int, rows: int) -> PanelGeometry:
    """Clamp the configured size to the canvas and anchor it bottom-right."""
    width = max(1, min(preferences.width, columns - 2))
    height = max(1, min(preferences.height, rows - 2))
    return PanelGeometry(
        width=width,
        height=height,
        row=max(0, rows - height - preferences.row_offset),
        col=max(0, columns - width - preferences.col_offset),
        border=preferences.border,
    )


@dataclass(frozen=True)
class DisplayPanelHandle:
    surface: object
    buffer: object


class DisplaySurfaceManager:
    """Owns the single panel surface and its content buffer."""

    def __init__(
        self,
        host: PanelHost,
        preferences: Preferences,
        *,
        on_dismiss: Optional[Callable[[], None]] = None,
    ) -> None:
        self._host = host
        self._preferences = preferences
        self._on_dismiss = on_dismiss
        self._handle: Optional[DisplayPanelHandle] = None

    @property
    def handle(self) -> Optional[DisplayPanelHandle]:
        return self._handle

    @property
    def visible(self) -> bool:
        handle = self._handle
        if handle is None:
            return False
        return self._host.surface_valid(handle.surface) and self._host.buffer_valid(handle.buffer)

    def set_dismiss_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_dismiss = callback

    def show(self) -> bool:
        """Open the panel; returns False when it was already visible."""
        if self.visible:
            return False
        if self._handle is not None:
            # Surface closed behind our back; drop the stale pair first.
            self.hide()
        columns, rows = self._host.canvas_size()
        geometry = compute_geometry(self._preferences, columns, rows)
        buffer = self._host.create_buffer()
        self._host.set_read_only(buffer, True)
        try:
            surface = self._host.open_surface(buffer, geometry)
        except Exception:
            self._host.delete_buffer(buffer)
            raise
        self._host.bind_surface_keys(surface, DISMISS_KEYS, self._dismiss)
        self._handle = DisplayPanelHandle(surface=surface, buffer=buffer)
        LOGGER.debug(
            "Panel opened: %dx%d at row=%d col=%d border=%s (canvas %dx%d)",
            geometry.width,
            geometry.height,
            geometry.row,
            geometry.col,
            geometry.border,
            columns,
            rows,
        )
        return True

    def hide(self) -> bool:
        """Close the panel; returns False when nothing was open."""
        handle = self._handle
        if handle is None:
            return False
        self._handle = None
        try:
            if self._host.surface_valid(handle.surface):
                self._host.close_surface(handle.surface)
        finally:
            if self._host.buffer_valid(handle.buffer):
                self._host.delete_buffer(handle.buffer)
        LOGGER.debug("Panel closed")
        return True

    def write_lines(self, lines: Sequence[str]) -> bool:
        if not self.visible:
            return False
        buffer = self._handle.buffer  # type: ignore[union-attr]
        self._host.set_read_only(buffer, False)
        try:
            self._host.set_lines(buffer, list(lines))
        finally:
            self._host.set_read_only(buffer, True)
        return True

    def _dismiss(self) -> None:
        if self._on_dismiss is not None:
            self._on_dismiss()
        else:
            self.hide()
