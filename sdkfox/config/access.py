"""Process-wide config access, refreshed when the file on disk changes."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from sdkfox.config.loader import get_config_path, load_config
from sdkfox.config.schema import Config

_lock = threading.RLock()
_entries: dict[Path, "_Entry"] = {}


@dataclass(slots=True)
class _Entry:
    stamp: int | None  # mtime_ns of the file when loaded; None when it did not exist
    config: Config


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def _stamp(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """
    Return the config for ``config_path`` (default ``~/.sdkfox/config.json``).

    The parsed object is reused until the file's modification time changes,
    the file appears or disappears, or ``force_reload`` is set.
    """
    path = _resolve(config_path)
    stamp = _stamp(path)
    with _lock:
        entry = _entries.get(path)
        if entry is None or force_reload or entry.stamp != stamp:
            if entry is not None:
                logger.debug("Reloading config {}", path)
            entry = _Entry(stamp=stamp, config=load_config(path))
            _entries[path] = entry
        return entry.config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    with _lock:
        if config_path is None:
            _entries.clear()
        else:
            _entries.pop(_resolve(config_path), None)
