from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from panel_client.poll_timer import PollTimer
from panel_client.status_poller import StatusPoller
from panel_client.surface import DisplaySurfaceManager
from panel_config.input_bindings import BindingManager
from panel_plugin.commands import CommandHandler
from panel_plugin.gateway import PlayerGateway, Runner, WhichFn
from panel_plugin.host import PanelHost
from panel_plugin.lifecycle import LifecycleTracker
from panel_plugin.preferences import Preferences


@dataclass
class AppContext:
    plugin_dir: Path
    host: PanelHost
    preferences: Preferences
    gateway: PlayerGateway
    surface: DisplaySurfaceManager
    timer: PollTimer
    poller: StatusPoller
    commands: CommandHandler
    bindings: BindingManager
    lifecycle: LifecycleTracker
    logger: logging.Logger


def build_app_context(
    *,
    plugin_dir: Path,
    host: PanelHost,
    overrides: Optional[Mapping[str, Any]] = None,
    preferences: Optional[Preferences] = None,
    runner: Optional[Runner] = None,
    which: Optional[WhichFn] = None,
    logger: Optional[logging.Logger] = None,
) -> AppContext:
    """Wire one independent set of panel components for ``host``."""
    plugin_dir = Path(plugin_dir)
    log = logger or logging.getLogger("PlayerPanel")
    prefs = preferences if preferences is not None else Preferences(plugin_dir, overrides=overrides)

    gateway = PlayerGateway(
        prefs.player,
        executable=prefs.executable,
        timeout=prefs.command_timeout,
        runner=runner,
        which=which,
    )
    surface = DisplaySurfaceManager(host, prefs)
    timer = PollTimer(
        prefs.interval_ms,
        after=host.after,
        after_cancel=host.after_cancel,
        logger=log.debug,
    )
    poller = StatusPoller(gateway=gateway, surface=surface, preferences=prefs, timer=timer)
    commands = CommandHandler(
        gateway,
        notify=host.notify,
        refresh=poller.refresh,
        is_visible=lambda: surface.visible,
        show_notifications=prefs.show_notifications,
        volume_step=prefs.volume_step,
    )
    bindings = BindingManager(host.bind_global, host.unbind_global, prefs.keymaps)

    return AppContext(
        plugin_dir=plugin_dir,
        host=host,
        preferences=prefs,
        gateway=gateway,
        surface=surface,
        timer=timer,
        poller=poller,
        commands=commands,
        bindings=bindings,
        lifecycle=LifecycleTracker(log),
        logger=log,
    )
