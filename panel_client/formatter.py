"""Pure text rendering for the player panel."""
from __future__ import annotations

import math
import unicodedata
from functools import lru_cache
from typing import Any, List, Optional

from panel_plugin.player_status import PlayerStatus
from panel_plugin.preferences import IconSet, Preferences

UNKNOWN_LABEL = "Unknown"


@lru_cache(maxsize=4096)
def _char_width(ch: str) -> int:
    if unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("F", "W"):
        return 2
    return 1


def display_width(text: str) -> int:
    """Column count of ``text`` as rendered in a monospaced cell grid."""
    return sum(_char_width(ch) for ch in text or "")


def format_time(seconds: Any) -> str:
    """Render seconds as MM:SS; negative or unparseable input gives 00:00."""
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return "00:00"
    if math.isnan(value) or math.isinf(value) or value < 0:
        return "00:00"
    minutes = math.floor(value / 60)
    secs = math.floor(value % 60)
    return f"{minutes:02d}:{secs:02d}"


def center_text(text: str, width: int) -> str:
    text_width = display_width(text)
    if text_width >= width:
        return text
    padding = (width - text_width) // 2
    return " " * padding + text + " " * (width - text_width - padding)


def pad_right(text: str, width: int) -> str:
    text_width = display_width(text)
    if text_width >= width:
        return text
    return text + " " * (width - text_width)


def progress_indicator_column(position: float, length: float, bar_width: int) -> int:
    """1-based column of the indicator glyph, clamped to the bar."""
    fraction = position / length if length > 0 else 0.0
    if not math.isfinite(fraction):
        return 1
    column = math.floor(bar_width * fraction)
    return max(1, min(column, bar_width))


def render_progress_bar(position: float, length: float, bar_width: int, icons: Optional[IconSet] = None) -> str:
    if bar_width <= 0:
        return ""
    icons = icons or IconSet()
    indicator = progress_indicator_column(position, length, bar_width)
    glyphs: List[str] = []
    for column in range(1, bar_width + 1):
        if column == indicator:
            glyphs.append(icons.progress_indicator)
        elif column < indicator:
            glyphs.append(icons.progress_filled)
        else:
            glyphs.append(icons.progress_empty)
    return "".join(glyphs)


def status_icon(status_text: str, icons: IconSet) -> str:
    # "pause" is checked after "play", so it wins when both appear.
    lowered = (status_text or "").lower()
    icon = icons.stopped
    if "play" in lowered:
        icon = icons.playing
    if "pause" in lowered:
        icon = icons.paused
    return icon


def volume_percent(volume: float) -> int:
    return math.floor(round(volume * 100.0, 6))


def controls_line(status: PlayerStatus, icons: IconSet) -> str:
    shuffle = icons.shuffle_on if status.shuffle_enabled else icons.shuffle_off
    repeat = icons.repeat_on if status.repeat_enabled else icons.repeat_off
    state = status_icon(status.status_text, icons)
    return f"{shuffle}   {repeat}   {state}   {icons.volume} {volume_percent(status.volume)}%"


def time_line(status: PlayerStatus) -> str:
    return f"{format_time(status.position_seconds)} / {format_time(status.length_seconds)}"


def format_panel(status: PlayerStatus, preferences: Preferences) -> List[str]:
    """Seven-line panel layout for one status snapshot."""
    icons = preferences.icons
    inner = preferences.inner_width
    lines = [
        f" {icons.track}  {status.title or UNKNOWN_LABEL}",
        f" {icons.artist}  {status.artist or UNKNOWN_LABEL}",
        f" {icons.album}  {status.album or UNKNOWN_LABEL}",
        "",
        center_text(controls_line(status, icons), inner),
        " " + render_progress_bar(status.position_seconds, status.length_seconds, preferences.bar_width, icons) + " ",
        center_text(time_line(status), inner),
    ]
    return [pad_right(line, inner) for line in lines]


def format_message(message: str, preferences: Preferences) -> List[str]:
    """Single centered line replacing the panel layout."""
    return [center_text(message, preferences.inner_width)]
