from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = "PlayerPanel"
LOG_TAG = "PlayerPanel"
LOG_LEVEL_ENV_VAR = "PLAYER_PANEL_LOG_LEVEL"
LOG_DIR_ENV_VAR = "PLAYER_PANEL_LOG_DIR"
PROPAGATE_ENV_VAR = "PLAYER_PANEL_PROPAGATE_LOGS"
DEFAULT_LOG_LEVEL = logging.INFO

_LEVEL_NAME_MAP = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": logging.DEBUG,
}


def coerce_level(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        token = raw.strip().upper()
        if token.isdigit():
            return int(token)
        return _LEVEL_NAME_MAP.get(token)
    return None


def resolve_log_level(explicit: Any = None) -> int:
    """Pick the first usable level: explicit value, environment, root logger, default."""
    candidates = [coerce_level(explicit), coerce_level(os.environ.get(LOG_LEVEL_ENV_VAR))]
    candidates.append(logging.getLogger().getEffectiveLevel())
    for level in candidates:
        if isinstance(level, int) and level != logging.NOTSET:
            return level
    return DEFAULT_LOG_LEVEL


def configure_logger(level: Any = None) -> logging.Logger:
    """Attach the plugin handler once and apply the resolved level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(level))
    if not any(getattr(handler, "_player_panel_handler", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler._player_panel_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(f"[%(asctime)s] [{LOG_TAG}] %(message)s", "%H:%M:%S"))
        logger.addHandler(handler)
    logger.propagate = os.environ.get(PROPAGATE_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "on"}
    return logger


def resolve_logs_dir(log_dir_name: str = "player-panel") -> Path:
    """Directory for log files: env override, XDG state, XDG cache, cwd, then tempdir."""
    candidates = []
    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())
    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / log_dir_name / "logs")
    candidates.append(cache_home / log_dir_name / "logs")
    candidates.append(Path.cwd() / "logs")

    for target in candidates:
        try:
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name / "logs"
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_log_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler for the plugin log."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    handler.setLevel(logging.DEBUG)
    return handler
