"""Preferences for the Player Panel plugin."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

LOGGER = logging.getLogger("PlayerPanel.Preferences")

PREFERENCES_FILE = "player_panel_settings.json"
BORDER_STYLES = {"none", "single", "double", "rounded", "solid", "shadow"}


@dataclass(frozen=True)
class IconSet:
    """Glyphs used by the panel. A Nerd Font or emoji capable font is assumed."""

    track: str = "🎵"
    artist: str = "👥"
    album: str = "💿"
    shuffle_on: str = "🔀"
    shuffle_off: str = "→"
    repeat_on: str = "🔁"
    repeat_off: str = "→"
    volume: str = "🔊"
    playing: str = "▶"
    paused: str = "⏸"
    stopped: str = "⏹"
    progress_indicator: str = "●"
    progress_filled: str = "─"
    progress_empty: str = "·"


@dataclass(frozen=True)
class KeyBindings:
    """Key sequences for the player actions; inactive unless ``enabled``."""

    enabled: bool = False
    toggle_widget: str = "Ctrl+Alt+T"
    play_pause: str = "Ctrl+Alt+P"
    next: str = "Ctrl+Alt+N"
    previous: str = "Ctrl+Alt+B"
    volume_up: str = "Ctrl+Alt+="
    volume_down: str = "Ctrl+Alt+-"
    toggle_shuffle: str = "Ctrl+Alt+S"
    toggle_repeat: str = "Ctrl+Alt+R"

    def actions(self) -> Dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self) if item.name != "enabled"}


def _slot_names(cls: type) -> set[str]:
    return {item.name for item in fields(cls)}


def _merge_strings(base: Any, data: Mapping[str, Any], prefix: str, extras: Dict[str, Any]) -> Any:
    """Apply string overrides onto a frozen dataclass, keeping unknown keys in ``extras``."""
    known = _slot_names(type(base))
    updates: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            extras[f"{prefix}.{key}"] = value
            continue
        if key == "enabled":
            updates[key] = bool(value)
        elif value is not None and str(value):
            updates[key] = str(value)
    return replace(base, **updates) if updates else base


@dataclass
class Preferences:
    """User options merged once at startup.

    Layers, later ones winning field by field: built-in defaults, the JSON
    settings file in ``plugin_dir``, then the ``overrides`` mapping.
    """

    plugin_dir: Path
    overrides: Optional[Mapping[str, Any]] = None
    player: str = "spotify"
    interval_ms: int = 1000
    width: int = 45
    height: int = 7
    row_offset: int = 3
    col_offset: int = 2
    border: str = "rounded"
    show_notifications: bool = True
    executable: str = "playerctl"
    command_timeout: Optional[float] = 2.0
    volume_step: float = 0.05
    icons: IconSet = field(default_factory=IconSet)
    keymaps: KeyBindings = field(default_factory=KeyBindings)
    extras: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.plugin_dir = Path(self.plugin_dir)
        self._path = self.plugin_dir / PREFERENCES_FILE
        self._load()
        if self.overrides:
            self.apply(self.overrides)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def inner_width(self) -> int:
        return max(0, self.width - 2)

    @property
    def bar_width(self) -> int:
        return max(0, self.width - 4)

    # Loading ---------------------------------------------------------------

    def _load(self) -> None:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            LOGGER.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring settings file %s: expected a JSON object", self._path)
            return
        self.apply(data)

    def apply(self, data: Mapping[str, Any]) -> None:
        """Apply one override layer. Values that cannot be coerced are ignored."""
        if "player" in data and data["player"]:
            self.player = str(data["player"]).strip() or self.player
        self.interval_ms = self._positive_int(data, "interval_ms", self.interval_ms)
        self.width = self._positive_int(data, "width", self.width)
        self.height = self._positive_int(data, "height", self.height)
        self.row_offset = self._int(data, "row_offset", self.row_offset)
        self.col_offset = self._int(data, "col_offset", self.col_offset)
        if "border" in data:
            border = str(data["border"] or "").strip().lower()
            if border:
                if border not in BORDER_STYLES:
                    LOGGER.debug("Unknown border style %r; passing it to the host unchanged", border)
                self.border = border
        if "show_notifications" in data:
            self.show_notifications = bool(data["show_notifications"])
        if "executable" in data and data["executable"]:
            self.executable = str(data["executable"]).strip() or self.executable
        if "command_timeout" in data:
            raw_timeout = data["command_timeout"]
            if raw_timeout is None:
                self.command_timeout = None
            else:
                try:
                    timeout = float(raw_timeout)
                except (TypeError, ValueError):
                    timeout = -1.0
                if timeout > 0:
                    self.command_timeout = timeout
        if "volume_step" in data:
            try:
                step = float(data["volume_step"])
            except (TypeError, ValueError):
                step = 0.0
            if 0.0 < step <= 1.0:
                self.volume_step = step
        icons = data.get("icons")
        if isinstance(icons, Mapping):
            self.icons = _merge_strings(self.icons, icons, "icons", self.extras)
        keymaps = data.get("keymaps")
        if isinstance(keymaps, Mapping):
            self.keymaps = _merge_strings(self.keymaps, keymaps, "keymaps", self.extras)
        for key, value in data.items():
            if key not in _RECOGNISED_KEYS:
                self.extras[key] = value

    @staticmethod
    def _int(data: Mapping[str, Any], key: str, default: int) -> int:
        if key not in data:
            return default
        try:
            return int(data[key])
        except (TypeError, ValueError):
            return default

    @classmethod
    def _positive_int(cls, data: Mapping[str, Any], key: str, default: int) -> int:
        value = cls._int(data, key, default)
        return value if value > 0 else default


_RECOGNISED_KEYS = {
    "player",
    "interval_ms",
    "width",
    "height",
    "row_offset",
    "col_offset",
    "border",
    "show_notifications",
    "executable",
    "command_timeout",
    "volume_step",
    "icons",
    "keymaps",
}
