"""Plugin runtime: panel toggling, commands and teardown for one context."""
from __future__ import annotations

from typing import List, Optional

from panel_plugin.app_context import AppContext
from panel_plugin.commands import ACTIONS
from panel_plugin.runtime_services import start_panel_services, stop_panel_services

PLUGIN_NAME = "PlayerPanel"


class PanelRuntime:
    """Keeps panel visibility and polling strictly paired."""

    def __init__(self, context: AppContext) -> None:
        self.context = context
        self._running = False
        context.surface.set_dismiss_callback(self.hide_panel)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def panel_visible(self) -> bool:
        return self.context.surface.visible

    # Lifecycle ------------------------------------------------------------

    def start(self) -> str:
        if self._running:
            return PLUGIN_NAME
        ctx = self.context
        self._register_bindings()
        bound = ctx.bindings.activate()
        self._running = True
        ctx.logger.info(
            "Plugin started: player=%s interval=%dms bindings=%d",
            ctx.preferences.player,
            ctx.preferences.interval_ms,
            bound,
        )
        if not ctx.gateway.available():
            ctx.logger.warning("%s not found on PATH; the panel will report it until installed", ctx.gateway.executable)
        return PLUGIN_NAME

    def stop(self) -> None:
        """Stop the timer, close the panel and drop key bindings. Safe to call twice."""
        ctx = self.context
        try:
            self.hide_panel()
        finally:
            ctx.bindings.deactivate()
            if self._running:
                self._running = False
                ctx.logger.info("Plugin stopped")
            ctx.lifecycle.log_state("after stop")

    # Commands -------------------------------------------------------------

    def show_panel(self) -> bool:
        ctx = self.context
        return start_panel_services(ctx.surface, ctx.poller, ctx.lifecycle, ctx.logger)

    def hide_panel(self) -> bool:
        ctx = self.context
        return stop_panel_services(ctx.surface, ctx.poller, ctx.lifecycle, ctx.logger)

    def toggle(self) -> bool:
        """Flip panel visibility; returns the new visibility."""
        if self.context.surface.visible:
            self.hide_panel()
            return False
        self.show_panel()
        return self.context.surface.visible

    def handle_command(self, action: Optional[str] = None) -> bool:
        return self.context.commands.handle(action)

    def completions(self, prefix: str = "") -> List[str]:
        return self.context.commands.completions(prefix)

    def _register_bindings(self) -> None:
        bindings = self.context.bindings
        bindings.register_action("toggle_widget", self.toggle)
        bindings.register_action("play_pause", lambda: self.handle_command(None))
        for action in ACTIONS:
            bindings.register_action(action, lambda name=action: self.handle_command(name))
