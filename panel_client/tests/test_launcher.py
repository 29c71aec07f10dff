from __future__ import annotations

import logging

import pytest

from panel_client import launcher
from panel_plugin.gateway import CommandResult


def test_parser_accepts_optional_command_argument():
    parser = launcher.build_parser()

    assert parser.parse_args([]).command is None
    assert parser.parse_args(["--command"]).command == ""
    assert parser.parse_args(["--command", "next"]).command == "next"
    args = parser.parse_args(["--player", "vlc", "--interval-ms", "500", "--hidden"])
    assert launcher.build_overrides(args) == {"player": "vlc", "interval_ms": 500}
    assert args.hidden is True


def test_plugin_dir_resolution(monkeypatch, tmp_path):
    monkeypatch.setenv("PLAYER_PANEL_DIR", str(tmp_path / "env"))

    assert launcher.resolve_plugin_dir(str(tmp_path)) == tmp_path.resolve()
    assert launcher.resolve_plugin_dir(None) == (tmp_path / "env").resolve()


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["--command"], ["play-pause"]),
        (["--command", "previous"], ["previous"]),
    ],
)
def test_single_command_runs_without_ui(monkeypatch, tmp_path, argv, expected):
    calls = []

    def runner(cmd, timeout):
        calls.append(list(cmd[3:]))
        return CommandResult(0, "")

    monkeypatch.setattr("panel_plugin.gateway.shutil.which", lambda _name: "/usr/bin/playerctl")
    monkeypatch.setattr("panel_plugin.gateway.run_subprocess", runner)

    assert launcher.main(["--plugin-dir", str(tmp_path), *argv]) == 0
    assert calls == [expected]


def test_single_command_reports_failure(monkeypatch, tmp_path, caplog):
    monkeypatch.setattr("panel_plugin.gateway.shutil.which", lambda _name: None)

    with caplog.at_level(logging.ERROR, logger="PlayerPanel.Client"):
        assert launcher.main(["--plugin-dir", str(tmp_path), "--command", "next"]) == 1

    assert any("is not installed" in record.getMessage() for record in caplog.records)
