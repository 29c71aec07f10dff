from __future__ import annotations

import itertools
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from panel_plugin.host import PanelGeometry
from panel_plugin.preferences import Preferences


class FakeHost:
    """In-memory ``PanelHost`` recording every call for assertions."""

    def __init__(self, columns: int = 120, rows: int = 40) -> None:
        self.columns = columns
        self.rows = rows
        self._ids = itertools.count(1)
        self.buffers: Dict[int, List[str]] = {}
        self.read_only: Dict[int, bool] = {}
        self.read_only_during_write: List[bool] = []
        self.surfaces: Dict[int, Tuple[int, PanelGeometry]] = {}
        self.surface_keys: Dict[int, Tuple[Sequence[str], Callable[[], None]]] = {}
        self.global_bindings: Dict[int, Tuple[str, Callable[[], None]]] = {}
        self.notifications: List[Tuple[str, int, Optional[str]]] = []
        self.pending: Dict[int, Tuple[int, Callable[[], None]]] = {}
        self.cancelled: List[int] = []
        self.fail_open = False

    # Canvas and buffers
    def canvas_size(self) -> Tuple[int, int]:
        return self.columns, self.rows

    def create_buffer(self) -> int:
        buffer = next(self._ids)
        self.buffers[buffer] = []
        self.read_only[buffer] = False
        return buffer

    def buffer_valid(self, buffer: object) -> bool:
        return buffer in self.buffers

    def delete_buffer(self, buffer: object) -> None:
        self.buffers.pop(buffer, None)  # type: ignore[call-overload]
        self.read_only.pop(buffer, None)  # type: ignore[call-overload]

    def set_lines(self, buffer: object, lines: Sequence[str]) -> None:
        self.read_only_during_write.append(self.read_only[buffer])  # type: ignore[index]
        self.buffers[buffer] = list(lines)  # type: ignore[index]

    def set_read_only(self, buffer: object, read_only: bool) -> None:
        self.read_only[buffer] = read_only  # type: ignore[index]

    # Surfaces
    def open_surface(self, buffer: object, geometry: PanelGeometry) -> int:
        if self.fail_open:
            raise RuntimeError("surface refused")
        surface = next(self._ids)
        self.surfaces[surface] = (buffer, geometry)  # type: ignore[assignment]
        return surface

    def surface_valid(self, surface: object) -> bool:
        return surface in self.surfaces

    def close_surface(self, surface: object) -> None:
        self.surfaces.pop(surface, None)  # type: ignore[call-overload]
        self.surface_keys.pop(surface, None)  # type: ignore[call-overload]

    def bind_surface_keys(self, surface: object, keys: Sequence[str], callback: Callable[[], None]) -> None:
        self.surface_keys[surface] = (tuple(keys), callback)  # type: ignore[index]

    def press(self, key: str) -> None:
        for keys, callback in list(self.surface_keys.values()):
            if key in keys:
                callback()

    # Global bindings
    def bind_global(self, sequence: str, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self.global_bindings[handle] = (sequence, callback)
        return handle

    def unbind_global(self, handle: object) -> None:
        self.global_bindings.pop(handle, None)  # type: ignore[call-overload]

    def trigger(self, sequence: str) -> None:
        for bound, callback in list(self.global_bindings.values()):
            if bound == sequence:
                callback()

    # Notifications
    def notify(self, message: str, level: int = logging.INFO, title: Optional[str] = None) -> None:
        self.notifications.append((message, level, title))

    # Scheduling
    def after(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self.pending[handle] = (delay_ms, callback)
        return handle

    def after_cancel(self, handle: object) -> None:
        if self.pending.pop(handle, None) is not None:  # type: ignore[call-overload]
            self.cancelled.append(handle)  # type: ignore[arg-type]

    def run_pending(self) -> int:
        """Fire every callback scheduled so far; returns how many ran."""
        ready = list(self.pending.items())
        self.pending.clear()
        for _handle, (_delay, callback) in ready:
            callback()
        return len(ready)

    @property
    def open_surfaces(self) -> int:
        return len(self.surfaces)


@pytest.fixture(autouse=True)
def _propagate_panel_logs(monkeypatch):
    # configure_logger() disables propagation, which hides records from caplog.
    monkeypatch.setenv("PLAYER_PANEL_PROPAGATE_LOGS", "1")
    logger = logging.getLogger("PlayerPanel")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def make_prefs(tmp_path):
    def _make(**overrides) -> Preferences:
        return Preferences(tmp_path, overrides=overrides or None)

    return _make


@pytest.fixture
def make_host():
    return FakeHost
