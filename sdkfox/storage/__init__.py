"""Persistent storage primitives."""

from sdkfox.storage.duration import DISABLED, NEVER_EXPIRE, CacheDuration
from sdkfox.storage.file_cache import CacheItem, FileCache

__all__ = ["CacheDuration", "CacheItem", "DISABLED", "FileCache", "NEVER_EXPIRE"]
