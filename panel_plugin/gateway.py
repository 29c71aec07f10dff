"""Gateway to the external player control utility (playerctl)."""
from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .player_status import PlayerStatus

LOGGER = logging.getLogger("PlayerPanel.Gateway")

DEFAULT_EXECUTABLE = "playerctl"
DEFAULT_TIMEOUT = 2.0

METADATA_FIELDS = ("title", "artist", "album")
LENGTH_FIELD = "mpris:length"


class GatewayError(Exception):
    """Base class for failures talking to the player utility."""


class ToolMissingError(GatewayError):
    def __init__(self, executable: str) -> None:
        super().__init__(f"Error: `{executable}` is not installed.")
        self.executable = executable


class PlayerInactiveError(GatewayError):
    def __init__(self, player: str) -> None:
        super().__init__(f"Player '{player}' is not active.")
        self.player = player


class CommandFailedError(GatewayError):
    def __init__(self, command: Sequence[str], reason: str) -> None:
        super().__init__(f"Command '{' '.join(command)}' failed: {reason}")
        self.command = list(command)
        self.reason = reason


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str = ""


Runner = Callable[[Sequence[str], Optional[float]], CommandResult]
WhichFn = Callable[[str], Optional[str]]


def run_subprocess(argv: Sequence[str], timeout: Optional[float]) -> CommandResult:
    """Run ``argv`` synchronously and capture its output.

    Raises ``subprocess.TimeoutExpired`` and ``FileNotFoundError`` unchanged.
    """
    completed = subprocess.run(
        list(argv),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
        creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
    )
    return CommandResult(completed.returncode, completed.stdout or "", completed.stderr or "")


def first_line(output: str) -> Optional[str]:
    for line in (output or "").splitlines():
        return line.strip() or None
    return None


class PlayerGateway:
    """Issues one-shot queries and commands to ``playerctl -p <player>``."""

    def __init__(
        self,
        player: str,
        *,
        executable: str = DEFAULT_EXECUTABLE,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        runner: Optional[Runner] = None,
        which: Optional[WhichFn] = None,
    ) -> None:
        self.player = player
        self.executable = executable
        self.timeout = timeout
        self._runner = runner or run_subprocess
        self._which = which or shutil.which

    # Availability ---------------------------------------------------------

    def available(self) -> bool:
        return self._which(self.executable) is not None

    def _require_tool(self) -> None:
        if not self.available():
            raise ToolMissingError(self.executable)

    # Queries --------------------------------------------------------------

    def query_status(self) -> PlayerStatus:
        self._require_tool()
        status_text = self._query("status")
        if status_text is None:
            raise PlayerInactiveError(self.player)
        metadata = {name: self._query("metadata", "--format", "{{%s}}" % name) for name in METADATA_FIELDS}
        return PlayerStatus.from_fields(
            status_text,
            title=metadata["title"],
            artist=metadata["artist"],
            album=metadata["album"],
            position=self._query("position"),
            length=self._query("metadata", "--format", "{{%s}}" % LENGTH_FIELD),
            shuffle=self._query("shuffle"),
            loop=self._query("loop"),
            volume=self._query("volume"),
        )

    def query_loop(self) -> Optional[str]:
        self._require_tool()
        return self._query("loop")

    def _query(self, *args: str) -> Optional[str]:
        """Return the first trimmed stdout line, or None on any failure."""
        argv = self._argv(args)
        try:
            result = self._runner(argv, self.timeout)
        except subprocess.TimeoutExpired:
            LOGGER.debug("Query timed out after %ss: %s", self.timeout, " ".join(argv))
            return None
        except FileNotFoundError as exc:
            raise ToolMissingError(self.executable) from exc
        except OSError as exc:
            LOGGER.debug("Query failed to launch (%s): %s", exc, " ".join(argv))
            return None
        if result.returncode != 0:
            if result.stderr:
                LOGGER.debug("Query exited %d: %s (%s)", result.returncode, " ".join(argv), result.stderr.strip())
            return None
        return first_line(result.stdout)

    # Commands -------------------------------------------------------------

    def send_command(self, *args: str) -> None:
        self._require_tool()
        argv = self._argv(args)
        LOGGER.debug("Sending command: %s", " ".join(argv))
        try:
            result = self._runner(argv, self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise CommandFailedError(argv, f"timed out after {self.timeout}s") from exc
        except FileNotFoundError as exc:
            raise ToolMissingError(self.executable) from exc
        except OSError as exc:
            raise CommandFailedError(argv, str(exc)) from exc
        if result.returncode != 0:
            reason = first_line(result.stderr) or f"exit status {result.returncode}"
            raise CommandFailedError(argv, reason)

    def _argv(self, args: Sequence[str]) -> list[str]:
        return [self.executable, "-p", self.player, *args]
