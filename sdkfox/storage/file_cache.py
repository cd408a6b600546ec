"""File-backed key/value cache with per-entry expiry."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from sdkfox.storage.duration import CacheDuration

NEVER_EXPIRED = -1


@dataclass(slots=True)
class CacheItem:
    """One cached value: serialized text plus absolute expiry in nanoseconds."""
    val: str | None
    expire: int

    def expired(self, now_ns: int) -> bool:
        return self.expire != NEVER_EXPIRED and now_ns > self.expire


class FileCache:
    """
    In-memory map snapshotted to a single JSON file on ``close()``.

    The map is process-local. Two processes closing the same file race and
    the last writer wins.
    """

    def __init__(self, path: Path, clock: Callable[[], int] | None = None):
        self.path = Path(path)
        self._clock = clock or time.time_ns
        self._lock = threading.RLock()
        self._items: dict[str, CacheItem] = {}

    @classmethod
    def open(cls, path: Path, clock: Callable[[], int] | None = None) -> "FileCache":
        """Load an existing cache file. A missing file yields an empty cache; a corrupt one raises."""
        cache = cls(path, clock=clock)
        cache._load()
        return cache

    def _load(self) -> None:
        if not self.path.exists():
            return
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"cache file {self.path} is not a JSON object")
        items: dict[str, CacheItem] = {}
        for key, row in payload.items():
            if not isinstance(row, dict):
                continue
            val = row.get("val")
            expire = row.get("expire")
            if (val is not None and not isinstance(val, str)) or not isinstance(expire, int):
                continue
            items[str(key)] = CacheItem(val=val, expire=expire)
        with self._lock:
            self._items = items

    def get(self, key: str) -> tuple[str | None, bool]:
        """Return ``(value, found)``; an expired entry is dropped and reported missing."""
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None, False
            if item.expired(self._clock()):
                del self._items[key]
                return None, False
            return item.val, True

    def set(self, key: str, val: str | None, duration: CacheDuration) -> None:
        with self._lock:
            self._items[key] = CacheItem(val=val, expire=duration.expire_at(self._clock()))

    def remove(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def close(self) -> None:
        """Write the whole map to disk. I/O errors propagate to the caller."""
        with self._lock:
            payload: dict[str, Any] = {
                key: {"val": item.val, "expire": item.expire} for key, item in self._items.items()
            }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
