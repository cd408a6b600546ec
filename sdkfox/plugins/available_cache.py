"""Memoization of the ``Available`` hook, persisted next to the plugin."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from sdkfox.plugins.luai.codec import to_python
from sdkfox.plugins.luai.vm import LuaVM
from sdkfox.storage import CacheDuration, FileCache

CACHE_FILENAME = ".available.cache"
EMPTY_ARGS_KEY = "empty"
KEY_SEPARATOR = "##"


def cache_key(args: list[str]) -> str:
    """Join hook arguments into a cache key; ``["a#", "b"]`` and ``["a", "#b"]`` collide."""
    if not args:
        return EMPTY_ARGS_KEY
    return KEY_SEPARATOR.join(args)


class AvailableCache:
    """
    Wraps raw ``Available`` invocations.

    A miss runs the hook and persists its outcome, nil included; a hit
    rebuilds the Lua value from the stored JSON without touching the plugin.
    Cache file problems are logged and treated as a miss.
    """

    def __init__(
        self,
        vm: LuaVM,
        path: Path,
        duration: CacheDuration,
        clock: Callable[[], int] | None = None,
    ):
        self._vm = vm
        self.path = Path(path)
        self.duration = duration
        self._clock = clock

    @classmethod
    def for_plugin(cls, vm: LuaVM, plugin_dir: Path, duration: CacheDuration) -> "AvailableCache":
        return cls(vm, Path(plugin_dir) / CACHE_FILENAME, duration)

    def _open(self) -> FileCache | None:
        try:
            return FileCache.open(self.path, clock=self._clock)
        except ValueError as exc:
            logger.debug("Discarding unreadable available cache {}: {}", self.path, exc)
            return FileCache(self.path, clock=self._clock)
        except OSError as exc:
            logger.debug("Available cache {} unavailable: {}", self.path, exc)
            return None

    def invoke(self, args: list[str], call: Callable[[], Any]) -> Any:
        if self.duration.disabled:
            self._remove_file()
            return call()

        key = cache_key(args)
        logger.debug("Available cache key: {}", key)
        cache = self._open()
        if cache is not None:
            text, found = cache.get(key)
            if found and text is not None:
                try:
                    value = json.loads(text)
                except ValueError as exc:
                    logger.debug("Ignoring corrupt available cache entry {}: {}", key, exc)
                else:
                    logger.debug("Available cache hit: {}", key)
                    return self._vm.marshal(value)

        raw = call()
        if cache is None:
            return raw
        try:
            text = json.dumps(to_python(raw), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.debug("Available result not cacheable: {}", exc)
            return raw
        cache.set(key, text, self.duration)
        try:
            cache.close()
        except OSError as exc:
            logger.warning("Failed to write available cache {}: {}", self.path, exc)
        return raw

    def _remove_file(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.debug("Failed to remove available cache {}: {}", self.path, exc)
        else:
            logger.debug("Available cache disabled, removed {}", self.path)
