"""``sdkfox.strings``: string helpers for plugins."""

from __future__ import annotations

from typing import Any, Callable

from sdkfox.utils.helpers import PRODUCT_NAME


def split(s: str, sep: str = "") -> list[str]:
    if sep == "":
        return list(s)
    return s.split(sep)


def fields(s: str) -> list[str]:
    return s.split()


def join(items: list[Any], sep: str) -> str:
    return sep.join(_lua_tostring(item) for item in items)


def trim(s: str, cutset: str) -> str:
    return s.strip(cutset) if cutset else s


def trim_space(s: str) -> str:
    return s.strip()


def trim_prefix(s: str, prefix: str) -> str:
    return s[len(prefix):] if prefix and s.startswith(prefix) else s


def trim_suffix(s: str, suffix: str) -> str:
    return s[: -len(suffix)] if suffix and s.endswith(suffix) else s


def has_prefix(s: str, prefix: str) -> bool:
    return s.startswith(prefix)


def has_suffix(s: str, suffix: str) -> bool:
    return s.endswith(suffix)


def contains(s: str, substr: str) -> bool:
    return substr in s


def _lua_tostring(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if value is None:
        return "nil"
    return str(value)


class StringsModule:
    name = f"{PRODUCT_NAME}.strings"

    def functions(self) -> dict[str, Callable[..., Any]]:
        return {
            "split": split,
            "fields": fields,
            "join": join,
            "trim": trim,
            "trim_space": trim_space,
            "trim_prefix": trim_prefix,
            "trim_suffix": trim_suffix,
            "has_prefix": has_prefix,
            "has_suffix": has_suffix,
            "contains": contains,
        }
