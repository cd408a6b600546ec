"""Lua value -> host value."""

from __future__ import annotations

import dataclasses
import math
import re
import struct
from typing import Any

import lupa.lua51 as lupa

from sdkfox.plugins.luai.codec.descriptor import (
    FieldDescriptor,
    Kind,
    StructDescriptor,
    TypeDescriptor,
    describe,
    struct_descriptor,
    zero_value,
)
from sdkfox.plugins.luai.codec.encode import Pointer
from sdkfox.utils.exceptions import CodecError

_SIGNED_KEY = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_KEY = re.compile(r"\+?[0-9]+")


def unmarshal(value: Any, dest: Any) -> None:
    """
    Decode a Lua value into ``dest``.

    ``dest`` is a ``Pointer`` or a dataclass instance (filled in place).
    A nil value leaves the destination untouched.
    """
    if isinstance(dest, Pointer):
        target = _indirect(dest)
        target.value = _decode(value, describe(target.type), target.value)
        return
    if dataclasses.is_dataclass(dest) and not isinstance(dest, type):
        _decode_struct(value, struct_descriptor(type(dest)), dest)
        return
    raise CodecError("unmarshal: value must be a pointer")


def decode(value: Any, tp: Any) -> Any:
    """Decode a Lua value into a fresh host value of type ``tp``."""
    desc = describe(tp)
    return _decode(value, desc, zero_value(desc))


def to_python(value: Any) -> Any:
    """Generic decoding: tables become lists or dicts, numbers become floats."""
    return _decode_any(value)


def _indirect(ptr: Pointer) -> Pointer:
    # Follow pointer-to-pointer chains; stop on a cycle.
    seen = {id(ptr)}
    while isinstance(ptr.value, Pointer):
        nxt = ptr.value
        if id(nxt) in seen:
            break
        seen.add(id(nxt))
        ptr = nxt
    return ptr


def _guest_type(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (str, bytes)):
        return "string"
    return lupa.lua_type(value) or type(value).__name__


def _decode(value: Any, desc: TypeDescriptor, current: Any) -> Any:
    if value is None:
        return current
    kind = desc.kind
    if kind is Kind.RAW:
        return value
    if kind is Kind.ANY:
        return _decode_any(value)
    if kind is Kind.OPTIONAL:
        inner = current if current is not None else zero_value(desc.elem)
        return _decode(value, desc.elem, inner)
    if kind is Kind.STRUCT:
        if current is None:
            current = zero_value(desc)
        _decode_struct(value, desc.struct, current)
        return current
    if kind is Kind.MAP:
        return _decode_map(value, desc, current)
    if kind is Kind.SLICE:
        return _decode_slice(value, desc, current)
    if kind is Kind.CALLABLE:
        if _guest_type(value) != "function":
            raise CodecError(f"unmarshal: cannot store {_guest_type(value)} into {desc.name}")
        return value
    if kind is Kind.UNSUPPORTED:
        raise CodecError(f"unmarshal: unsupported type {desc.name}")
    return _store_literal(value, desc)


def _store_literal(value: Any, desc: TypeDescriptor) -> Any:
    guest = _guest_type(value)
    kind = desc.kind
    if kind is Kind.STRING and guest == "string":
        return value.decode("utf-8", "replace") if isinstance(value, bytes) else value
    if kind is Kind.BOOL and guest == "boolean":
        return value
    if kind is Kind.INT and guest == "number":
        try:
            number = int(value)
        except (ValueError, OverflowError) as exc:
            raise CodecError(f"unmarshal: cannot store {value} into {desc.name}") from exc
        return _wrap(number, desc.bits, desc.signed) if desc.bits else number
    if kind is Kind.FLOAT and guest == "number":
        number = float(value)
        if desc.bits == 32 and math.isfinite(number):
            try:
                number = struct.unpack("f", struct.pack("f", number))[0]
            except OverflowError:
                number = math.copysign(math.inf, number)
        return number
    raise CodecError(f"unmarshal: cannot store {guest} into {desc.name}")


def _wrap(number: int, bits: int, signed: bool) -> int:
    number &= (1 << bits) - 1
    if signed and number >= 1 << (bits - 1):
        number -= 1 << bits
    return number


def _require_table(value: Any, desc: TypeDescriptor) -> None:
    if lupa.lua_type(value) != "table":
        raise CodecError(f"unmarshal: cannot store {_guest_type(value)} into {desc.name}")


def _decode_any(value: Any) -> Any:
    guest = _guest_type(value)
    if guest == "number":
        return float(value)
    if guest in ("string", "boolean", "nil"):
        return value
    if guest == "table":
        if value[1] is not None:
            return [_decode_any(item) for _, item in value.items()]
        return {_key_string(key): _decode_any(item) for key, item in value.items()}
    return None


def _key_string(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, float):
        if key.is_integer():
            return str(int(key))
        return "%.14g" % key
    if isinstance(key, bytes):
        return key.decode("utf-8", "replace")
    return str(key)


def _decode_map(value: Any, desc: TypeDescriptor, current: Any) -> dict[Any, Any]:
    _require_table(value, desc)
    key_kind = desc.key.kind
    if key_kind not in (Kind.STRING, Kind.INT):
        raise CodecError("unmarshal: unsupported map key type")
    result = current if current is not None else {}
    for raw_key, item in value.items():
        key_text = _key_string(raw_key)
        if key_kind is Kind.STRING:
            key: Any = key_text
        else:
            key = _parse_int_key(key_text, desc.key)
            if key is None:
                continue
        result[key] = _decode(item, desc.elem, result.get(key, zero_value(desc.elem)))
    return result


def _parse_int_key(text: str, desc: TypeDescriptor) -> int | None:
    """Strict base-10 key parse; anything malformed or out of range is None."""
    pattern = _SIGNED_KEY if desc.signed else _UNSIGNED_KEY
    if not pattern.fullmatch(text):
        return None
    number = int(text)
    if desc.bits:
        if desc.signed:
            low, high = -(1 << (desc.bits - 1)), (1 << (desc.bits - 1)) - 1
        else:
            low, high = 0, (1 << desc.bits) - 1
        if not low <= number <= high:
            return None
    return number


def _decode_slice(value: Any, desc: TypeDescriptor, current: Any) -> Any:
    _require_table(value, desc)
    previous = list(current) if current is not None else []
    result = []
    for i, (_, item) in enumerate(value.items()):
        seed = previous[i] if i < len(previous) else zero_value(desc.elem)
        result.append(_decode(item, desc.elem, seed))
    if desc.type is tuple or getattr(desc.type, "__origin__", None) is tuple:
        return tuple(result)
    return result


def _decode_struct(value: Any, desc: StructDescriptor, target: Any) -> None:
    if lupa.lua_type(value) != "table":
        raise CodecError(f"unmarshal: cannot store {_guest_type(value)} into {desc.cls.__name__}")
    for raw_key, item in value.items():
        path = desc.resolve(_key_string(raw_key))
        if path is None:
            continue
        _assign(target, path, item)


def _assign(target: Any, path: tuple[FieldDescriptor, ...], value: Any) -> None:
    *embedded, leaf = path
    for field in embedded:
        inner = getattr(target, field.name)
        if inner is None:
            desc = field.descriptor
            inner = zero_value(desc.elem if desc.kind is Kind.OPTIONAL else desc)
            setattr(target, field.name, inner)
        target = inner
    current = getattr(target, leaf.name)
    setattr(target, leaf.name, _decode(value, leaf.descriptor, current))
