from __future__ import annotations

import logging

import pytest

import load
from panel_plugin.gateway import CommandResult


@pytest.fixture(autouse=True)
def _stopped_plugin():
    load.plugin_stop()
    yield
    load.plugin_stop()


def test_plugin_start_stop_idempotent(monkeypatch, tmp_path, fake_host):
    started = []

    class DummyRuntime:
        def __init__(self, context):
            self.context = context
            self.stopped = 0

        def start(self):
            started.append(self)
            return load.PLUGIN_NAME

        def stop(self):
            self.stopped += 1

    monkeypatch.setattr(load, "PanelRuntime", DummyRuntime)

    result1 = load.plugin_start3(str(tmp_path), fake_host)
    result2 = load.plugin_start3(str(tmp_path), fake_host)

    assert result1 == load.PLUGIN_NAME
    assert result2 == load.PLUGIN_NAME
    assert len(started) == 1
    runtime = load._plugin

    load.plugin_stop()
    load.plugin_stop()

    assert load._plugin is None
    assert runtime.stopped == 1


def test_hooks_before_start_are_ignored(caplog):
    with caplog.at_level(logging.WARNING, logger=load.LOGGER_NAME):
        assert load.player_command("next") is False
        assert load.toggle_panel() is False

    assert load.command_completions("prev") == ["previous"]
    assert len(caplog.records) == 2


def test_toggle_panel_and_stop_close_everything(monkeypatch, tmp_path, fake_host):
    monkeypatch.setattr("panel_plugin.gateway.shutil.which", lambda _name: None)
    load.plugin_start3(str(tmp_path), fake_host)

    assert load.toggle_panel() is True
    assert fake_host.open_surfaces == 1
    fake_host.run_pending()
    buffer = next(iter(fake_host.buffers))
    assert fake_host.buffers[buffer][0].strip() == "Error: `playerctl` is not installed."

    load.plugin_stop()

    assert fake_host.open_surfaces == 0
    assert fake_host.buffers == {}
    assert fake_host.pending == {}


def test_player_command_reaches_the_utility(monkeypatch, tmp_path, fake_host):
    calls = []

    def runner(argv, timeout):
        calls.append(list(argv))
        return CommandResult(0, "")

    monkeypatch.setattr("panel_plugin.gateway.shutil.which", lambda _name: "/usr/bin/playerctl")
    monkeypatch.setattr("panel_plugin.gateway.run_subprocess", runner)
    load.plugin_start3(str(tmp_path), fake_host, overrides={"player": "vlc"})

    assert load.player_command(None) is True
    assert load.player_command("next") is True

    assert calls == [["playerctl", "-p", "vlc", "play-pause"], ["playerctl", "-p", "vlc", "next"]]
    assert [note[0] for note in fake_host.notifications] == ["Toggled play/pause", "Next track"]


def test_metadata_exports():
    assert load.name == load.PLUGIN_NAME == "PlayerPanel"
    assert load.version == load.PLUGIN_VERSION
