"""Player status snapshot rebuilt on every poll."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PlaybackState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class RepeatMode(Enum):
    OFF = "None"
    TRACK = "Track"
    PLAYLIST = "Playlist"


# Off -> Playlist -> Track -> Off
_REPEAT_CYCLE = {
    RepeatMode.OFF: RepeatMode.PLAYLIST,
    RepeatMode.PLAYLIST: RepeatMode.TRACK,
}


def parse_playback_state(status_text: Optional[str]) -> PlaybackState:
    """Match the raw status line the same way the status icon is chosen.

    "play" is checked first and "pause" second, so a line containing both
    resolves to PAUSED.
    """
    lowered = (status_text or "").lower()
    state = PlaybackState.STOPPED
    if "play" in lowered:
        state = PlaybackState.PLAYING
    if "pause" in lowered:
        state = PlaybackState.PAUSED
    return state


def parse_repeat_mode(raw: Optional[str]) -> Optional[RepeatMode]:
    if raw is None:
        return None
    try:
        return RepeatMode(raw.strip())
    except ValueError:
        return None


def next_repeat_mode(current: Optional[RepeatMode]) -> RepeatMode:
    """Return the mode that follows ``current``; unknown states wrap to OFF."""
    if current is None:
        return RepeatMode.OFF
    return _REPEAT_CYCLE.get(current, RepeatMode.OFF)


def _coerce_float(raw: Optional[str], default: float = 0.0) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    # "nan" and "inf" parse but are not usable positions or levels.
    return value if math.isfinite(value) else default


def _coerce_microseconds(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(raw))
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class PlayerStatus:
    """One poll worth of player state. Missing fields keep their defaults."""

    status_text: str
    playback_state: PlaybackState = PlaybackState.STOPPED
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    position_seconds: float = 0.0
    length_microseconds: Optional[int] = None
    shuffle_enabled: bool = False
    repeat_mode: Optional[RepeatMode] = None
    volume: float = 0.0

    @property
    def length_seconds(self) -> float:
        if not self.length_microseconds or self.length_microseconds <= 0:
            return 0.0
        return self.length_microseconds / 1_000_000

    @property
    def repeat_enabled(self) -> bool:
        return self.repeat_mode is not RepeatMode.OFF

    @classmethod
    def from_fields(
        cls,
        status_text: str,
        *,
        title: Optional[str] = None,
        artist: Optional[str] = None,
        album: Optional[str] = None,
        position: Optional[str] = None,
        length: Optional[str] = None,
        shuffle: Optional[str] = None,
        loop: Optional[str] = None,
        volume: Optional[str] = None,
    ) -> "PlayerStatus":
        """Build a snapshot from raw single-line utility responses."""
        level = _coerce_float(volume)
        return cls(
            status_text=status_text,
            playback_state=parse_playback_state(status_text),
            title=title or None,
            artist=artist or None,
            album=album or None,
            position_seconds=_coerce_float(position),
            length_microseconds=_coerce_microseconds(length),
            shuffle_enabled=shuffle == "On",
            repeat_mode=parse_repeat_mode(loop),
            volume=max(0.0, min(level, 1.0)),
        )
