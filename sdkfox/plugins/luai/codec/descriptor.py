"""Runtime type descriptors driving the Lua value codec.

Every host type the codec can encode or decode is described by a
``TypeDescriptor`` with a closed ``Kind``. Dataclasses are described by a
``StructDescriptor`` that resolves guest keys by field name, then by tag,
then through embedded (promoted) fields in declared order.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, NewType, Union

Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
# Guest value handed over untouched (tables stay Lua tables).
LuaObject = NewType("LuaObject", object)

_FIXED_INTS: dict[Any, tuple[int, bool]] = {
    Int8: (8, True),
    Int16: (16, True),
    Int32: (32, True),
    Int64: (64, True),
    UInt8: (8, False),
    UInt16: (16, False),
    UInt32: (32, False),
    UInt64: (64, False),
}

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

TAG_KEY = "lua"
EMBEDDED_KEY = "embedded"


class Kind(Enum):
    ANY = "any"
    RAW = "raw"
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRUCT = "struct"
    MAP = "map"
    SLICE = "slice"
    CALLABLE = "callable"
    OPTIONAL = "optional"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    kind: Kind
    type: Any
    elem: "TypeDescriptor | None" = None  # slice element, map value, optional target
    key: "TypeDescriptor | None" = None
    bits: int = 0  # 0 means unbounded
    signed: bool = True

    @property
    def name(self) -> str:
        return type_name(self.type)

    @property
    def struct(self) -> "StructDescriptor":
        return struct_descriptor(self.type)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    tag: str | None
    annotation: Any
    embedded: bool

    @property
    def key(self) -> str:
        return self.tag or self.name

    @property
    def descriptor(self) -> TypeDescriptor:
        return describe(self.annotation)

    @property
    def embedded_struct(self) -> "StructDescriptor":
        desc = self.descriptor
        if desc.kind is Kind.OPTIONAL:
            desc = desc.elem
        return desc.struct


@dataclass(frozen=True, slots=True)
class StructDescriptor:
    cls: type
    fields: tuple[FieldDescriptor, ...]

    @property
    def promoted(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.embedded)

    def resolve(self, key: str) -> tuple[FieldDescriptor, ...] | None:
        """Return the field path a guest key lands on, or None when it matches nothing."""
        for f in self.fields:
            if f.name == key:
                return (f,)
        for f in self.fields:
            if f.tag == key:
                return (f,)
        for f in self.promoted:
            path = f.embedded_struct.resolve(key)
            if path is not None:
                return (f, *path)
        return None


def lua_field(tag: str | None = None, *, embedded: bool = False, **kwargs: Any) -> Any:
    """``dataclasses.field`` carrying the guest key and the embedded flag."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    if tag is not None:
        metadata[TAG_KEY] = tag
    if embedded:
        metadata[EMBEDDED_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


def type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return tp.__name__
    name = getattr(tp, "__name__", None)
    if name and not typing.get_args(tp):
        return name
    return str(tp).replace("typing.", "")


def is_struct_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


@lru_cache(maxsize=None)
def struct_descriptor(cls: type) -> StructDescriptor:
    hints = typing.get_type_hints(cls)
    fields = []
    for f in dataclasses.fields(cls):
        fields.append(
            FieldDescriptor(
                name=f.name,
                tag=f.metadata.get(TAG_KEY),
                annotation=hints.get(f.name, Any),
                embedded=bool(f.metadata.get(EMBEDDED_KEY)),
            )
        )
    return StructDescriptor(cls=cls, fields=tuple(fields))


@lru_cache(maxsize=None)
def describe(tp: Any) -> TypeDescriptor:
    """Build the descriptor for a type annotation."""
    if tp is LuaObject:
        return TypeDescriptor(Kind.RAW, tp)
    if tp is Any or tp is object:
        return TypeDescriptor(Kind.ANY, tp)
    if tp in _FIXED_INTS:
        bits, signed = _FIXED_INTS[tp]
        return TypeDescriptor(Kind.INT, tp, bits=bits, signed=signed)
    if tp is Float32:
        return TypeDescriptor(Kind.FLOAT, tp, bits=32)
    if tp is bool:
        return TypeDescriptor(Kind.BOOL, tp)
    if tp is str:
        return TypeDescriptor(Kind.STRING, tp)
    if tp is int:
        return TypeDescriptor(Kind.INT, tp)
    if tp is float:
        return TypeDescriptor(Kind.FLOAT, tp)

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is Union or origin is types.UnionType:
        members = [a for a in args if a is not type(None)]
        if len(members) == 1 and len(args) == 2:
            return TypeDescriptor(Kind.OPTIONAL, tp, elem=describe(members[0]))
        return TypeDescriptor(Kind.UNSUPPORTED, tp)
    if tp in (list, tuple) or origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return TypeDescriptor(Kind.UNSUPPORTED, tp)
        return TypeDescriptor(Kind.SLICE, tp, elem=describe(args[0]) if args else describe(Any))
    if tp is dict or origin in _MAPPING_ORIGINS:
        key_tp, val_tp = args if args else (str, Any)
        return TypeDescriptor(Kind.MAP, tp, key=describe(key_tp), elem=describe(val_tp))
    if tp is collections.abc.Callable or tp is Callable or origin is collections.abc.Callable:
        return TypeDescriptor(Kind.CALLABLE, tp)
    if is_struct_type(tp):
        return TypeDescriptor(Kind.STRUCT, tp)
    supertype = getattr(tp, "__supertype__", None)
    if supertype is not None:
        return describe(supertype)
    return TypeDescriptor(Kind.UNSUPPORTED, tp)


def zero_value(desc: TypeDescriptor) -> Any:
    """The value a freshly allocated destination of this shape starts with."""
    kind = desc.kind
    if kind is Kind.STRING:
        return ""
    if kind is Kind.BOOL:
        return False
    if kind is Kind.INT:
        return 0
    if kind is Kind.FLOAT:
        return 0.0
    if kind is Kind.STRUCT:
        return new_struct(desc.type)
    return None


def new_struct(cls: type) -> Any:
    """Instantiate a dataclass, zero-filling fields that have no default."""
    kwargs = {}
    hints = None
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        if hints is None:
            hints = typing.get_type_hints(cls)
        kwargs[f.name] = zero_value(describe(hints.get(f.name, Any)))
    return cls(**kwargs)
