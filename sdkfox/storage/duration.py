"""Cache duration policy values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta

from sdkfox.utils.exceptions import ValidationError

_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_SECOND = _NS_PER_UNIT["s"]


@dataclass(frozen=True, slots=True)
class CacheDuration:
    """
    Cache lifetime policy in nanoseconds.

    ``-1`` never expires, ``0`` disables caching, anything positive is a TTL.
    """

    nanoseconds: int

    @classmethod
    def parse(cls, value: "CacheDuration | int | float | str | timedelta") -> "CacheDuration":
        """Parse a config value. Bare numbers are seconds; strings use h/m/s/ms units."""
        if isinstance(value, CacheDuration):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"invalid cache duration: {value!r}", field="cache.available_hook_duration")
        if isinstance(value, timedelta):
            return cls._from_ns(int(value.total_seconds() * _SECOND))
        if isinstance(value, (int, float)):
            if value == -1:
                return NEVER_EXPIRE
            return cls._from_ns(int(value * _SECOND))
        text = str(value).strip()
        if text in ("-1", "0"):
            return NEVER_EXPIRE if text == "-1" else DISABLED
        try:
            return cls._from_ns(int(float(text) * _SECOND))
        except ValueError:
            pass
        total = 0
        pos = 0
        for match in _COMPONENT.finditer(text):
            if match.start() != pos:
                break
            total += int(float(match.group(1)) * _NS_PER_UNIT[match.group(2)])
            pos = match.end()
        if pos == 0 or pos != len(text):
            raise ValidationError(f"invalid cache duration: {value!r}", field="cache.available_hook_duration")
        return cls._from_ns(total)

    @classmethod
    def _from_ns(cls, ns: int) -> "CacheDuration":
        if ns < 0:
            raise ValidationError(f"invalid cache duration: {ns}ns", field="cache.available_hook_duration")
        return cls(ns)

    @property
    def disabled(self) -> bool:
        return self.nanoseconds == 0

    @property
    def never_expires(self) -> bool:
        return self.nanoseconds == -1

    def expire_at(self, now_ns: int) -> int:
        """Absolute expiry for an entry written at ``now_ns`` (-1 for never)."""
        if self.never_expires:
            return -1
        return now_ns + self.nanoseconds

    def __str__(self) -> str:
        if self.never_expires:
            return "-1"
        if self.disabled:
            return "0"
        seconds, remainder = divmod(self.nanoseconds, _SECOND)
        if seconds == 0:
            return f"{remainder // 1_000_000}ms" if remainder >= 1_000_000 else f"{remainder}ns"
        hours, seconds = divmod(seconds, 3600)
        minutes, seconds = divmod(seconds, 60)
        parts = []
        if hours:
            parts.append(f"{hours}h")
        if minutes:
            parts.append(f"{minutes}m")
        if seconds:
            parts.append(f"{seconds}s")
        return "".join(parts)


NEVER_EXPIRE = CacheDuration(-1)
DISABLED = CacheDuration(0)
