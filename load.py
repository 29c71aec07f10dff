"""Primary entry point for hosts embedding the Player Panel plugin."""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional

from panel_plugin.app_context import build_app_context
from panel_plugin.commands import CommandHandler
from panel_plugin.host import PanelHost
from panel_plugin.logging_utils import LOGGER_NAME, configure_logger
from panel_plugin.runtime import PLUGIN_NAME, PanelRuntime
from version import __version__ as PLAYER_PANEL_VERSION

PLUGIN_VERSION = PLAYER_PANEL_VERSION

LOGGER = configure_logger()


def _log(message: str) -> None:
    LOGGER.info(message)


_plugin: Optional[PanelRuntime] = None


def plugin_start3(plugin_dir: str, host: PanelHost, overrides: Optional[Mapping[str, Any]] = None) -> str:
    """Build the plugin for ``host``. A second call while running is a no-op."""
    global _plugin
    if _plugin is not None:
        LOGGER.debug("plugin_start3 called while already running; ignoring")
        return PLUGIN_NAME
    _log(f"Initialising Player Panel {PLUGIN_VERSION} from {plugin_dir}")
    context = build_app_context(plugin_dir=Path(plugin_dir), host=host, overrides=overrides, logger=LOGGER)
    runtime = PanelRuntime(context)
    _plugin = runtime
    return runtime.start()


def plugin_stop() -> None:
    """Host shutdown hook: stops the timer and closes the panel."""
    global _plugin
    if _plugin:
        try:
            _plugin.stop()
        finally:
            _plugin = None


def player_command(action: Optional[str] = None) -> bool:
    """Parameterised command: empty for play/pause, otherwise one of the action names."""
    if _plugin is None:
        LOGGER.warning("Player command %r ignored; plugin not started", action)
        return False
    return _plugin.handle_command(action)


def toggle_panel() -> bool:
    """Parameterless command showing or hiding the panel."""
    if _plugin is None:
        LOGGER.warning("Panel toggle ignored; plugin not started")
        return False
    return _plugin.toggle()


def command_completions(prefix: str = "") -> List[str]:
    if _plugin is None:
        return CommandHandler.completions(prefix)
    return _plugin.completions(prefix)


# Metadata expected by some plugin loaders
name = PLUGIN_NAME
version = PLUGIN_VERSION
plugin_name = PLUGIN_NAME
logger_name = LOGGER_NAME
