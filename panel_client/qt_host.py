"""PyQt6 implementation of the panel host: floating panel, tray notifications, timers."""
from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from PyQt6.QtCore import QObject, Qt, QTimer
from PyQt6.QtGui import QFont, QFontDatabase, QFontMetrics, QGuiApplication, QKeySequence, QShortcut
from PyQt6.QtWidgets import QApplication, QPlainTextEdit, QSystemTrayIcon, QVBoxLayout, QWidget

from panel_plugin.host import PanelGeometry

_CLIENT_LOGGER = logging.getLogger("PlayerPanel.Client")

_BORDER_STYLES: Dict[str, str] = {
    "none": "border: none;",
    "single": "border: 1px solid #808080;",
    "solid": "border: 2px solid #808080;",
    "double": "border: 3px double #808080;",
    "rounded": "border: 1px solid #808080; border-radius: 8px;",
    "shadow": "border: 1px solid #303030; border-right: 3px solid #101010; border-bottom: 3px solid #101010;",
}

_TRAY_ICONS = {
    logging.ERROR: QSystemTrayIcon.MessageIcon.Critical,
    logging.WARNING: QSystemTrayIcon.MessageIcon.Warning,
}


def border_stylesheet(border: str) -> str:
    return _BORDER_STYLES.get((border or "").lower(), _BORDER_STYLES["single"])


class GlobalBinding:
    """One key sequence attached to every open panel window."""

    def __init__(self, sequence: str, callback: Callable[[], None]) -> None:
        self.sequence = sequence
        self.callback = callback
        self.shortcuts: List[QShortcut] = []


class PanelWindow(QWidget):
    """Frameless, always-on-top window hosting the panel text buffer."""

    def __init__(self, buffer: QPlainTextEdit, border: str) -> None:
        super().__init__()
        self.setObjectName("PlayerPanelWindow")
        window_flags = (
            Qt.WindowType.FramelessWindowHint
            | Qt.WindowType.WindowStaysOnTopHint
            | Qt.WindowType.Tool
        )
        self.setWindowFlags(window_flags)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, False)
        self.setStyleSheet(
            "#PlayerPanelWindow { background: #1e1e2e; %s }" % border_stylesheet(border)
        )
        layout = QVBoxLayout(self)
        margin = 0 if (border or "").lower() == "none" else 4
        layout.setContentsMargins(margin, margin, margin, margin)
        layout.addWidget(buffer)
        self.buffer = buffer
        self.closed = False

    def closeEvent(self, event) -> None:  # noqa: N802 - Qt override
        self.closed = True
        super().closeEvent(event)


class QtPanelHost(QObject):
    """Desktop ``PanelHost`` backed by Qt widgets on the primary screen."""

    def __init__(self, app: Optional[QApplication] = None, *, font_point_size: float = 11.0) -> None:
        super().__init__()
        self._app = app or QApplication.instance()
        self._font = QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont)
        self._font.setPointSizeF(font_point_size)
        self._font.setStyleHint(QFont.StyleHint.Monospace)
        metrics = QFontMetrics(self._font)
        self._cell_width = max(1, metrics.horizontalAdvance("M"))
        self._cell_height = max(1, metrics.lineSpacing())
        self._timers: Set[QTimer] = set()
        self._buffers: Set[QPlainTextEdit] = set()
        self._surfaces: Set[PanelWindow] = set()
        self._bindings: List[GlobalBinding] = []
        self._tray: Optional[QSystemTrayIcon] = None

    @property
    def cell_size(self) -> Tuple[int, int]:
        return self._cell_width, self._cell_height

    def set_tray_icon(self, tray: Optional[QSystemTrayIcon]) -> None:
        self._tray = tray

    # Canvas ---------------------------------------------------------------

    def _available_geometry(self):
        screen = QGuiApplication.primaryScreen()
        if screen is None:
            return None
        return screen.availableGeometry()

    def canvas_size(self) -> Tuple[int, int]:
        geometry = self._available_geometry()
        if geometry is None:
            return 80, 24
        return geometry.width() // self._cell_width, geometry.height() // self._cell_height

    # Buffers --------------------------------------------------------------

    def create_buffer(self) -> QPlainTextEdit:
        buffer = QPlainTextEdit()
        buffer.setFont(self._font)
        buffer.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        buffer.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        buffer.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        buffer.setFocusPolicy(Qt.FocusPolicy.ClickFocus)
        buffer.setStyleSheet("QPlainTextEdit { background: transparent; color: #cdd6f4; border: none; }")
        self._buffers.add(buffer)
        return buffer

    def buffer_valid(self, buffer: object) -> bool:
        return buffer in self._buffers

    def delete_buffer(self, buffer: object) -> None:
        if buffer not in self._buffers:
            return
        self._buffers.discard(buffer)  # type: ignore[arg-type]
        buffer.setParent(None)  # type: ignore[union-attr]
        buffer.deleteLater()  # type: ignore[union-attr]

    def set_lines(self, buffer: object, lines: Sequence[str]) -> None:
        if buffer in self._buffers:
            buffer.setPlainText("\n".join(lines))  # type: ignore[union-attr]

    def set_read_only(self, buffer: object, read_only: bool) -> None:
        if buffer in self._buffers:
            buffer.setReadOnly(read_only)  # type: ignore[union-attr]

    # Surfaces -------------------------------------------------------------

    def geometry_to_pixels(self, geometry: PanelGeometry) -> Tuple[int, int, int, int]:
        origin = self._available_geometry()
        left = origin.x() if origin is not None else 0
        top = origin.y() if origin is not None else 0
        return (
            left + geometry.col * self._cell_width,
            top + geometry.row * self._cell_height,
            geometry.width * self._cell_width,
            geometry.height * self._cell_height,
        )

    def open_surface(self, buffer: object, geometry: PanelGeometry) -> PanelWindow:
        window = PanelWindow(buffer, geometry.border)  # type: ignore[arg-type]
        x_pos, y_pos, width, height = self.geometry_to_pixels(geometry)
        window.setGeometry(x_pos, y_pos, width, height)
        window.show()
        self._surfaces.add(window)
        for binding in self._bindings:
            self._attach(binding, window)
        _CLIENT_LOGGER.debug("Panel window at %dx%d+%d+%d", width, height, x_pos, y_pos)
        return window

    def surface_valid(self, surface: object) -> bool:
        return surface in self._surfaces and not surface.closed  # type: ignore[union-attr]

    def close_surface(self, surface: object) -> None:
        if surface not in self._surfaces:
            return
        self._surfaces.discard(surface)  # type: ignore[arg-type]
        for binding in self._bindings:
            binding.shortcuts = [shortcut for shortcut in binding.shortcuts if shortcut.parent() is not surface]
        buffer = getattr(surface, "buffer", None)
        if buffer is not None:
            buffer.setParent(None)
        surface.close()  # type: ignore[union-attr]
        surface.deleteLater()  # type: ignore[union-attr]

    def bind_surface_keys(self, surface: object, keys: Sequence[str], callback: Callable[[], None]) -> None:
        for key in keys:
            shortcut = QShortcut(QKeySequence(key), surface)
            shortcut.setContext(Qt.ShortcutContext.WindowShortcut)
            shortcut.activated.connect(self._guarded(callback, f"key {key}"))

    # Global bindings -----------------------------------------------------

    def bind_global(self, sequence: str, callback: Callable[[], None]) -> GlobalBinding:
        # Qt only fires shortcuts whose parent is visible, so bindings live on the panel windows.
        binding = GlobalBinding(sequence, self._guarded(callback, f"binding {sequence}"))
        self._bindings.append(binding)
        for surface in self._surfaces:
            self._attach(binding, surface)
        return binding

    def unbind_global(self, handle: object) -> None:
        if handle not in self._bindings:
            return
        self._bindings.remove(handle)  # type: ignore[arg-type]
        for shortcut in handle.shortcuts:  # type: ignore[union-attr]
            shortcut.setEnabled(False)
            shortcut.deleteLater()
        handle.shortcuts = []  # type: ignore[union-attr]

    @staticmethod
    def _attach(binding: GlobalBinding, surface: QWidget) -> None:
        shortcut = QShortcut(QKeySequence(binding.sequence), surface)
        shortcut.setContext(Qt.ShortcutContext.ApplicationShortcut)
        shortcut.activated.connect(binding.callback)
        binding.shortcuts.append(shortcut)

    # Notifications --------------------------------------------------------

    def notify(self, message: str, level: int = logging.INFO, title: Optional[str] = None) -> None:
        _CLIENT_LOGGER.log(level, "%s%s", f"{title}: " if title else "", message)
        tray = self._tray
        if tray is None or not QSystemTrayIcon.supportsMessages():
            return
        icon = _TRAY_ICONS.get(level, QSystemTrayIcon.MessageIcon.Information)
        tray.showMessage(title or "Player Panel", message, icon, 3000)

    # Scheduling -----------------------------------------------------------

    def after(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)
        guarded = self._guarded(callback, "timer")

        def _fire() -> None:
            self._timers.discard(timer)
            timer.deleteLater()
            guarded()

        timer.timeout.connect(_fire)
        self._timers.add(timer)
        timer.start(max(0, int(delay_ms)))
        return timer

    def after_cancel(self, handle: object) -> None:
        if handle not in self._timers:
            return
        self._timers.discard(handle)  # type: ignore[arg-type]
        handle.stop()  # type: ignore[union-attr]
        handle.deleteLater()  # type: ignore[union-attr]

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def shutdown(self) -> None:
        for timer in list(self._timers):
            self.after_cancel(timer)
        for surface in list(self._surfaces):
            self.close_surface(surface)
        for binding in list(self._bindings):
            self.unbind_global(binding)
        for buffer in list(self._buffers):
            self.delete_buffer(buffer)

    @staticmethod
    def _guarded(callback: Callable[[], None], label: str) -> Callable[[], None]:
        # Exceptions escaping a PyQt6 slot abort the process.
        def _invoke() -> None:
            try:
                callback()
            except Exception:
                _CLIENT_LOGGER.exception("Unhandled error in %s callback", label)

        return _invoke


def is_wayland() -> bool:
    platform_name = QGuiApplication.platformName() if QGuiApplication.instance() else ""
    return sys.platform.startswith("linux") and platform_name.startswith("wayland")
