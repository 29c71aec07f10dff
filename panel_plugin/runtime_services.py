from __future__ import annotations

import logging
from typing import Protocol


class _SurfaceLike(Protocol):
    @property
    def visible(self) -> bool: ...
    @property
    def handle(self) -> object: ...
    def show(self) -> bool: ...
    def hide(self) -> bool: ...


class _PollerLike(Protocol):
    @property
    def polling(self) -> bool: ...
    def start(self) -> None: ...
    def stop(self) -> None: ...


class _TrackerLike(Protocol):
    def track_handle(self, label: str, handle: object) -> None: ...
    def untrack_handle(self, label: str) -> None: ...


PANEL_HANDLE = "panel"
POLL_HANDLE = "poll_timer"


def start_panel_services(surface: _SurfaceLike, poller: _PollerLike, tracker: _TrackerLike, logger: logging.Logger) -> bool:
    """Show the panel, then start polling. Returns False when already running."""
    if surface.visible and poller.polling:
        return False
    try:
        surface.show()
    except Exception:
        logger.exception("Failed to open player panel")
        poller.stop()
        return False
    tracker.track_handle(PANEL_HANDLE, surface.handle)
    poller.start()
    tracker.track_handle(POLL_HANDLE, poller)
    logger.debug("Player panel shown; polling started")
    return True


def stop_panel_services(surface: _SurfaceLike, poller: _PollerLike, tracker: _TrackerLike, logger: logging.Logger) -> bool:
    """Stop polling before closing the panel. Returns False when nothing was running."""
    was_running = poller.polling or surface.handle is not None
    try:
        poller.stop()
    finally:
        tracker.untrack_handle(POLL_HANDLE)
        try:
            surface.hide()
        finally:
            tracker.untrack_handle(PANEL_HANDLE)
    if was_running:
        logger.debug("Player panel hidden; polling stopped")
    return was_running
