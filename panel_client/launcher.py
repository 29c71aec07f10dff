from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from panel_plugin.commands import ACTIONS, CommandHandler
from panel_plugin.gateway import PlayerGateway
from panel_plugin.logging_utils import build_rotating_log_handler, configure_logger, resolve_logs_dir
from panel_plugin.preferences import Preferences

LOG_FILENAME = "player-panel.log"
_CLIENT_LOGGER = logging.getLogger("PlayerPanel.Client")


def resolve_plugin_dir(args_dir: Optional[str]) -> Path:
    if args_dir:
        return Path(args_dir).expanduser().resolve()
    env_override = os.getenv("PLAYER_PANEL_DIR")
    if env_override:
        return Path(env_override).expanduser().resolve()
    return Path(__file__).resolve().parent.parent


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.player:
        overrides["player"] = args.player
    if args.interval_ms is not None:
        overrides["interval_ms"] = args.interval_ms
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Player Panel desktop client")
    parser.add_argument("--plugin-dir", help="Directory holding player_panel_settings.json")
    parser.add_argument("--player", help="Player name passed to playerctl -p")
    parser.add_argument("--interval-ms", type=int, help="Refresh interval in milliseconds")
    parser.add_argument("--hidden", action="store_true", help="Start with the panel hidden")
    parser.add_argument("--log-level", help="Logger level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument(
        "--command",
        nargs="?",
        const="",
        metavar="ACTION",
        help="Send one command and exit. Empty toggles play/pause; otherwise one of: %s" % ", ".join(ACTIONS),
    )
    return parser


def _attach_file_log(logger: logging.Logger) -> None:
    try:
        handler = build_rotating_log_handler(
            resolve_logs_dir(),
            LOG_FILENAME,
            formatter=logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"),
        )
    except OSError as exc:
        logger.warning("File logging unavailable: %s", exc)
        return
    logger.addHandler(handler)


def run_single_command(prefs: Preferences, action: Optional[str]) -> int:
    """Send one player command without opening any window."""
    gateway = PlayerGateway(prefs.player, executable=prefs.executable, timeout=prefs.command_timeout)

    def _notify(message: str, level: int = logging.INFO, title: Optional[str] = None) -> None:
        _CLIENT_LOGGER.log(level, "%s%s", f"{title}: " if title else "", message)

    handler = CommandHandler(
        gateway,
        notify=_notify,
        refresh=lambda: False,
        is_visible=lambda: False,
        show_notifications=prefs.show_notifications,
        volume_step=prefs.volume_step,
    )
    return 0 if handler.handle(action or None) else 1


def _build_tray(app, host, runtime):
    from PyQt6.QtGui import QAction, QIcon
    from PyQt6.QtWidgets import QMenu, QStyle, QSystemTrayIcon

    if not QSystemTrayIcon.isSystemTrayAvailable():
        _CLIENT_LOGGER.info("System tray unavailable; notifications go to the log only")
        return None
    icon = QIcon.fromTheme("multimedia-player", app.style().standardIcon(QStyle.StandardPixmap.SP_MediaPlay))
    tray = QSystemTrayIcon(icon, app)
    tray.setToolTip("Player Panel")
    menu = QMenu()
    entries = [
        ("Toggle panel", runtime.toggle),
        ("Play / pause", lambda: runtime.handle_command(None)),
        ("Next", lambda: runtime.handle_command("next")),
        ("Previous", lambda: runtime.handle_command("previous")),
        ("Toggle shuffle", lambda: runtime.handle_command("toggle_shuffle")),
        ("Toggle repeat", lambda: runtime.handle_command("toggle_repeat")),
    ]
    for label, callback in entries:
        action = QAction(label, menu)
        action.triggered.connect(lambda _checked=False, cb=callback: cb())
        menu.addAction(action)
    menu.addSeparator()
    quit_action = QAction("Quit", menu)
    quit_action.triggered.connect(app.quit)
    menu.addAction(quit_action)
    tray.setContextMenu(menu)
    tray.activated.connect(
        lambda reason: runtime.toggle() if reason == QSystemTrayIcon.ActivationReason.Trigger else None
    )
    # The menu must outlive this function.
    tray._player_panel_menu = menu  # type: ignore[attr-defined]
    tray.show()
    host.set_tray_icon(tray)
    return tray


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = configure_logger(args.log_level)
    plugin_dir = resolve_plugin_dir(args.plugin_dir)
    overrides = build_overrides(args)

    if args.command is not None:
        prefs = Preferences(plugin_dir, overrides=overrides)
        return run_single_command(prefs, args.command)

    _attach_file_log(logger)

    from PyQt6.QtWidgets import QApplication

    from panel_client.qt_host import QtPanelHost, is_wayland
    from panel_plugin.app_context import build_app_context
    from panel_plugin.runtime import PanelRuntime

    app = QApplication(sys.argv if argv is None else [sys.argv[0], *argv])
    app.setQuitOnLastWindowClosed(False)
    host = QtPanelHost(app)
    context = build_app_context(plugin_dir=plugin_dir, host=host, overrides=overrides, logger=logger)
    runtime = PanelRuntime(context)
    runtime.start()
    _build_tray(app, host, runtime)

    logger.info("Starting player panel client (pid=%s)", os.getpid())
    logger.debug("Settings path %s; cell size %s", context.preferences.path, host.cell_size)
    if is_wayland() and context.preferences.keymaps.enabled:
        logger.info("Wayland session detected; key bindings only fire while the panel has focus")

    def _shutdown() -> None:
        runtime.stop()
        host.shutdown()

    app.aboutToQuit.connect(_shutdown)
    if not args.hidden:
        runtime.show_panel()

    exit_code = app.exec()
    logger.info("Player panel client exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":
    sys.exit(main())
