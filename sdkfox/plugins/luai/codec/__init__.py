"""Two-way conversion between host values and Lua values."""

from sdkfox.plugins.luai.codec.descriptor import (
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    Kind,
    LuaObject,
    StructDescriptor,
    TypeDescriptor,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    describe,
    lua_field,
    struct_descriptor,
)
from sdkfox.plugins.luai.codec.encode import HostFunction, Pointer, marshal, wrap_function
from sdkfox.plugins.luai.codec.decode import decode, to_python, unmarshal

__all__ = [
    "Float32",
    "HostFunction",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "LuaObject",
    "Pointer",
    "StructDescriptor",
    "TypeDescriptor",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "decode",
    "describe",
    "lua_field",
    "marshal",
    "struct_descriptor",
    "to_python",
    "unmarshal",
    "wrap_function",
]
