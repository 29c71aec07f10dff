"""Protocol implemented by applications that embed the player panel."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple


@dataclass(frozen=True)
class PanelGeometry:
    """Panel placement in canvas cells (columns and rows)."""

    width: int
    height: int
    row: int
    col: int
    border: str = "rounded"


class PanelHost(Protocol):
    """Windowing, notification and scheduling services supplied by the host."""

    def canvas_size(self) -> Tuple[int, int]:
        """Return the drawable area as (columns, rows)."""
        ...

    def create_buffer(self) -> object: ...
    def buffer_valid(self, buffer: object) -> bool: ...
    def delete_buffer(self, buffer: object) -> None: ...
    def set_lines(self, buffer: object, lines: Sequence[str]) -> None: ...
    def set_read_only(self, buffer: object, read_only: bool) -> None: ...

    def open_surface(self, buffer: object, geometry: PanelGeometry) -> object: ...
    def surface_valid(self, surface: object) -> bool: ...
    def close_surface(self, surface: object) -> None: ...
    def bind_surface_keys(self, surface: object, keys: Sequence[str], callback: Callable[[], None]) -> None: ...

    def bind_global(self, sequence: str, callback: Callable[[], None]) -> object: ...
    def unbind_global(self, handle: object) -> None: ...

    def notify(self, message: str, level: int = logging.INFO, title: Optional[str] = None) -> None: ...

    def after(self, delay_ms: int, callback: Callable[[], None]) -> object: ...
    def after_cancel(self, handle: object) -> None: ...
