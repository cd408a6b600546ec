"""``json``: encode Lua values to JSON text and back."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Callable

import lupa.lua51 as lupa

from sdkfox.plugins.luai.codec import LuaObject

if TYPE_CHECKING:
    from sdkfox.plugins.luai.vm import LuaVM


class JsonEncodeError(ValueError):
    pass


def to_json_value(value: Any) -> Any:
    """Convert a Lua value into a ``json``-serializable host value."""
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value
    if lupa.lua_type(value) != "table":
        raise JsonEncodeError(f"cannot encode {lupa.lua_type(value) or type(value).__name__} to JSON")
    items = list(value.items())
    if not items:
        return []
    keys = [k for k, _ in items]
    if all(isinstance(k, (int, float)) and not isinstance(k, bool) for k in keys):
        size = len(keys)
        if sorted(keys) != list(range(1, size + 1)):
            raise JsonEncodeError("cannot encode sparse array")
        ordered = sorted(items, key=lambda kv: kv[0])
        return [to_json_value(v) for _, v in ordered]
    if all(isinstance(k, str) for k in keys):
        return {k: to_json_value(v) for k, v in items}
    raise JsonEncodeError("cannot encode mixed or invalid key types")


class JsonModule:
    name = "json"

    def __init__(self, vm: "LuaVM"):
        self._vm = vm

    def encode(self, value: LuaObject) -> tuple[Any, ...] | str:
        try:
            return json.dumps(to_json_value(value), separators=(",", ":"), sort_keys=True, allow_nan=False)
        except (JsonEncodeError, ValueError) as exc:
            return None, str(exc)

    def decode(self, text: str) -> Any:
        try:
            data = json.loads(text)
        except ValueError as exc:
            return None, str(exc)
        return self._vm.marshal(data)

    def functions(self) -> dict[str, Callable[..., Any]]:
        return {"encode": self.encode, "decode": self.decode}
