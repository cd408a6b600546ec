"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from sdkfox.utils.helpers import get_home_path

_SINK_IDS: dict[str, int] = {}

_STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"


def _log_dir() -> Path:
    return get_home_path() / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_path = _log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def configure_cli_logging(debug: bool) -> None:
    """Debug prints the bridge trace to stderr and to the rotating file; otherwise sdkfox stays quiet."""
    if debug:
        logger.remove()
        logger.add(sys.stderr, level="DEBUG", format=_STDERR_FORMAT)
        logger.enable("sdkfox")
        ensure_rotating_log_file("cli", level="DEBUG")
    else:
        logger.disable("sdkfox")
