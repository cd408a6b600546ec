"""Host value -> Lua value."""

from __future__ import annotations

import dataclasses
import inspect
import typing
from dataclasses import dataclass
from typing import Any, Callable

import lupa.lua51 as lupa
from loguru import logger

from sdkfox.plugins.luai.codec.descriptor import (
    Kind,
    TypeDescriptor,
    describe,
    struct_descriptor,
    type_name,
)
from sdkfox.utils.exceptions import ArityMismatchError, CodecError

# Lua-side trampoline so wrapped host functions are real Lua functions.
_FUNCTION_FACTORY = "function(f) return function(...) return f(...) end end"


class Pointer:
    """
    Settable cell with a declared type.

    ``unmarshal`` decodes into ``ptr.value``; ``marshal`` dereferences one
    level.
    """

    __slots__ = ("type", "value")

    def __init__(self, tp: Any, value: Any = None):
        self.type = tp
        self.value = value

    def __repr__(self) -> str:
        return f"Pointer({type_name(self.type)}, {self.value!r})"


def marshal(runtime: lupa.LuaRuntime, value: Any) -> Any:
    """Convert a host value into a Lua value owned by ``runtime``."""
    if isinstance(value, Pointer):
        value = value.value
        if isinstance(value, Pointer):
            raise CodecError("marshal: unsupported type pointer to pointer")
    return _encode(runtime, value)


def _encode(runtime: lupa.LuaRuntime, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, bool)):
        return value
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError as exc:
            raise CodecError(f"marshal: number out of range: {value}") from exc
    if lupa.lua_type(value) is not None:
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        table = runtime.table()
        _encode_struct(runtime, value, table, set())
        return table
    if isinstance(value, dict):
        table = runtime.table()
        for key, item in value.items():
            table[_encode_key(key)] = _encode(runtime, item)
        return table
    if isinstance(value, (list, tuple)):
        table = runtime.table()
        index = 1
        for item in value:
            if item is None:
                continue
            table[index] = _encode(runtime, item)
            index += 1
        return table
    if isinstance(value, Pointer):
        raise CodecError("marshal: unsupported type pointer")
    if callable(value):
        return wrap_function(runtime, value)
    raise CodecError(f"marshal: unsupported type {type(value).__name__}")


def _encode_struct(runtime: lupa.LuaRuntime, value: Any, table: Any, taken: set[str]) -> None:
    # Direct fields first so they win over promoted ones on key collision.
    desc = struct_descriptor(type(value))
    embedded = []
    for field in desc.fields:
        item = getattr(value, field.name)
        if field.embedded:
            embedded.append(item)
            continue
        if item is None:
            continue
        table[field.key] = _encode(runtime, item)
        taken.add(field.key)
    for item in embedded:
        if item is None:
            continue
        inner = runtime.table()
        _encode_struct(runtime, item, inner, set())
        for key, val in inner.items():
            if key not in taken:
                table[key] = val
                taken.add(key)


def _encode_key(key: Any) -> Any:
    if isinstance(key, bool):
        raise CodecError("marshal: unsupported type bool for key")
    if isinstance(key, (str, int)):
        return key
    raise CodecError(f"marshal: unsupported type {type(key).__name__} for key")


@dataclass(frozen=True, slots=True)
class HostFunction:
    """Guest-callable binding: the host function's signature plus a thunk."""

    func: Callable[..., Any]
    label: str
    params: tuple[TypeDescriptor, ...]
    required: int
    variadic: TypeDescriptor | None
    runtime: Any

    @classmethod
    def bind(cls, runtime: lupa.LuaRuntime, func: Callable[..., Any]) -> "HostFunction":
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return cls(func, _label(func, None), (), 0, describe(Any), runtime)
        try:
            hints = typing.get_type_hints(func)
        except Exception:
            hints = {}
        params = []
        required = 0
        variadic = None
        for param in signature.parameters.values():
            annotation = hints.get(param.name, Any)
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                variadic = describe(annotation)
            elif param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
                params.append(describe(annotation))
                if param.default is inspect.Parameter.empty:
                    required += 1
        return cls(func, _label(func, signature), tuple(params), required, variadic, runtime)

    def check_arity(self, count: int) -> None:
        if self.variadic is not None:
            if count < self.required:
                raise ArityMismatchError(
                    f"expected at least {self.required} arguments for {self.label}, got {count}",
                    expected=self.required,
                    got=count,
                )
            return
        if count < self.required or count > len(self.params):
            expected = self.required if count < self.required else len(self.params)
            raise ArityMismatchError(
                f"expected {expected} arguments for {self.label}, got {count}",
                expected=expected,
                got=count,
            )

    def __call__(self, *args: Any) -> Any:
        from sdkfox.plugins.luai.codec.decode import decode

        self.check_arity(len(args))
        values = []
        for i, arg in enumerate(args):
            desc = self.params[i] if i < len(self.params) else self.variadic
            try:
                values.append(decode(arg, desc.type))
            except CodecError as exc:
                return None, f"error unmarshaling argument {i}: {exc.message}"
        logger.debug("Calling host function {} with {} argument(s)", self.label, len(values))
        result = self.func(*values)
        if result is None:
            return ()
        if isinstance(result, tuple):
            return tuple(_encode(self.runtime, item) for item in result)
        return _encode(self.runtime, result)


def wrap_function(runtime: lupa.LuaRuntime, func: Callable[..., Any]) -> Any:
    """Expose a host callable to Lua as an ordinary Lua function."""
    binding = HostFunction.bind(runtime, func)
    return runtime.eval(_FUNCTION_FACTORY)(binding)


def _label(func: Callable[..., Any], signature: inspect.Signature | None) -> str:
    name = getattr(func, "__qualname__", None) or type(func).__name__
    return f"{name}{signature}" if signature is not None else name
