from __future__ import annotations

import pytest

from panel_plugin.player_status import (
    PlaybackState,
    PlayerStatus,
    RepeatMode,
    next_repeat_mode,
    parse_playback_state,
    parse_repeat_mode,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Playing", PlaybackState.PLAYING),
        ("Paused", PlaybackState.PAUSED),
        ("Stopped", PlaybackState.STOPPED),
        ("play paused", PlaybackState.PAUSED),
        ("", PlaybackState.STOPPED),
    ],
)
def test_parse_playback_state(text, expected):
    assert parse_playback_state(text) is expected


def test_repeat_cycle_visits_three_states():
    assert next_repeat_mode(RepeatMode.OFF) is RepeatMode.PLAYLIST
    assert next_repeat_mode(RepeatMode.PLAYLIST) is RepeatMode.TRACK
    assert next_repeat_mode(RepeatMode.TRACK) is RepeatMode.OFF


def test_unknown_repeat_state_wraps_to_off():
    assert parse_repeat_mode("Sometimes") is None
    assert parse_repeat_mode(None) is None
    assert next_repeat_mode(None) is RepeatMode.OFF


def test_from_fields_coerces_raw_values():
    status = PlayerStatus.from_fields(
        "Playing",
        title="",
        position="abc",
        length="2.5e8",
        shuffle="on",
        loop="None",
        volume="1.7",
    )

    assert status.title is None
    assert status.position_seconds == 0.0
    assert status.length_seconds == pytest.approx(250.0)
    # Only the exact "On" response enables shuffle.
    assert status.shuffle_enabled is False
    assert status.repeat_mode is RepeatMode.OFF
    assert status.repeat_enabled is False
    assert status.volume == 1.0


def test_non_positive_length_reads_as_zero():
    assert PlayerStatus.from_fields("Playing", length="0").length_seconds == 0.0
    assert PlayerStatus.from_fields("Playing", length="-5").length_seconds == 0.0
    assert PlayerStatus.from_fields("Playing", length="nope").length_seconds == 0.0


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e400"])
def test_non_finite_numbers_fall_back_to_defaults(raw):
    status = PlayerStatus.from_fields("Playing", position=raw, length=raw, volume=raw)

    assert status.position_seconds == 0.0
    assert status.length_microseconds is None
    assert status.length_seconds == 0.0
    assert status.volume == 0.0
