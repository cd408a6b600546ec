from dataclasses import dataclass, field
from typing import Any

import pytest

from sdkfox.plugins.luai.codec import (
    Int8,
    Pointer,
    UInt8,
    decode,
    lua_field,
    marshal,
    to_python,
    unmarshal,
)
from sdkfox.utils.exceptions import CodecError


@dataclass
class Child:
    title: str = ""
    level: int = 0


@dataclass
class Base:
    id: int = 0
    label: str = lua_field("displayName", default="")


@dataclass
class Checks:
    sha256: str = ""
    md5: str = ""


@dataclass
class Record:
    name: str = ""
    count: int = 0
    small: Int8 = 0
    ratio: float = 0.0
    enabled: bool = False
    tags: list[str] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)
    by_id: dict[int, str] = field(default_factory=dict)
    child: Child | None = None
    children: list[Child] = field(default_factory=list)
    base: Base = lua_field(embedded=True, default_factory=Base)
    checks: Checks | None = lua_field(embedded=True, default=None)
    extra: Any = None


@dataclass
class Inner:
    name: str = ""
    only_inner: str = lua_field("onlyInner", default="")


@dataclass
class Outer:
    name: str = ""
    inner: Inner = lua_field(embedded=True, default_factory=Inner)


def _sample() -> Record:
    return Record(
        name="java",
        count=42,
        small=-5,
        ratio=0.5,
        enabled=True,
        tags=["lts", "stable"],
        scores={"a": 1, "b": 2},
        by_id={1: "one", 2: "two"},
        child=Child(title="nested", level=3),
        children=[Child(title="first", level=1), Child(title="second", level=2)],
        base=Base(id=7, label="Seven"),
        checks=Checks(sha256="abc"),
    )


def test_struct_round_trip(lua):
    original = _sample()
    decoded = Record()

    unmarshal(marshal(lua, original), decoded)

    assert decoded == original
    assert isinstance(decoded.count, int)


def test_marshal_uses_tags_flattens_embedded_and_omits_nil_fields(lua):
    table = marshal(lua, Record(name="x", base=Base(id=1, label="L")))

    keys = set(table.keys())
    assert "displayName" in keys
    assert "label" not in keys
    assert table["id"] == 1
    assert "child" not in keys
    assert "extra" not in keys
    assert "sha256" not in keys


def test_direct_field_wins_over_promoted_field_on_marshal(lua):
    table = marshal(lua, Outer(name="outer", inner=Inner(name="inner", only_inner="x")))

    assert table["name"] == "outer"
    assert table["onlyInner"] == "x"


def test_numbers_marshal_to_floats(lua):
    assert isinstance(marshal(lua, 3), float)
    assert marshal(lua, 3) == 3.0
    assert marshal(lua, True) is True


def test_untyped_destination_gets_floats_while_typed_ints_stay_ints(lua):
    table = lua.eval("{ count = 42, extra = { 1, 2 } }")
    decoded = Record()

    unmarshal(table, decoded)

    assert decoded.count == 42 and isinstance(decoded.count, int)
    assert decoded.extra == [1.0, 2.0]
    assert all(isinstance(v, float) for v in decoded.extra)


def test_embedded_fields_resolve_by_value_and_by_lazy_pointer(lua):
    table = lua.eval('{ id = 9, displayName = "Nine", sha256 = "deadbeef" }')
    decoded = Record()
    assert decoded.checks is None

    unmarshal(table, decoded)

    assert decoded.base == Base(id=9, label="Nine")
    assert decoded.checks == Checks(sha256="deadbeef")


def test_unknown_keys_are_dropped(lua):
    table = lua.eval('{ name = "x", somethingNew = { 1, 2 }, [5] = true }')
    decoded = Record()

    unmarshal(table, decoded)

    assert decoded.name == "x"


def test_field_name_takes_precedence_over_tag(lua):
    decoded = Base()

    unmarshal(lua.eval('{ label = "by-name" }'), decoded)

    assert decoded.label == "by-name"


def test_int_keyed_map_skips_unparseable_keys(lua):
    table = lua.eval("{ ['1'] = 'a', ['x'] = 'b', [2] = 'c', ['3.5'] = 'd' }")
    ptr = Pointer(dict[int, str])

    unmarshal(table, ptr)

    assert ptr.value == {1: "a", 2: "c"}


def test_int_keyed_map_parses_keys_strictly(lua):
    signed = Pointer(dict[int, str])
    unmarshal(lua.eval("{ ['1_0'] = 'a', [' 7 '] = 'b', ['-4'] = 'c', ['+5'] = 'd' }"), signed)

    unsigned = Pointer(dict[UInt8, str])
    unmarshal(lua.eval("{ ['-1'] = 'neg', ['256'] = 'big', ['255'] = 'max' }"), unsigned)

    small = Pointer(dict[Int8, str])
    unmarshal(lua.eval("{ ['-129'] = 'low', ['-128'] = 'min' }"), small)

    assert signed.value == {-4: "c", 5: "d"}
    assert unsigned.value == {255: "max"}
    assert small.value == {-128: "min"}


def test_string_keyed_map_accepts_number_keys_as_text(lua):
    ptr = Pointer(dict[str, int])

    unmarshal(lua.eval("{ [10] = 1, ten = 2 }"), ptr)

    assert ptr.value == {"10": 1, "ten": 2}


def test_bool_map_keys_are_rejected_on_marshal(lua):
    with pytest.raises(CodecError, match="unsupported type bool for key"):
        marshal(lua, {True: 1})


def test_unsupported_map_key_type_on_unmarshal(lua):
    with pytest.raises(CodecError, match="unsupported map key type"):
        unmarshal(lua.eval("{ a = 1 }"), Pointer(dict[bool, int]))


def test_destination_must_be_a_pointer(lua):
    table = lua.eval("{ name = 'x' }")

    with pytest.raises(CodecError, match="value must be a pointer"):
        unmarshal(table, {})
    with pytest.raises(CodecError, match="value must be a pointer"):
        unmarshal(table, Record)


def test_generic_table_is_array_when_index_one_present(lua):
    assert to_python(lua.eval("{ 'a', 'b' }")) == ["a", "b"]
    assert to_python(lua.eval("{ 'a', 'b', name = 'x' }")) == ["a", "b", "x"]
    assert to_python(lua.eval("{ [2] = 'b', name = 'x' }")) == {"2": "b", "name": "x"}
    assert to_python(lua.eval("{}")) == {}


def test_empty_table_decodes_to_empty_list_not_none(lua):
    ptr = Pointer(list[str])

    unmarshal(lua.eval("{}"), ptr)

    assert ptr.value == []


def test_slice_is_resized_to_visited_entries(lua):
    ptr = Pointer(list[int], [9, 9, 9, 9])

    unmarshal(lua.eval("{ 1, 2 }"), ptr)

    assert ptr.value == [1, 2]


def test_fixed_width_integers_truncate():
    assert decode(300, Int8) == 44
    assert decode(-1, UInt8) == 255
    assert decode(3.9, int) == 3
    assert decode(-3.9, int) == -3


def test_nil_leaves_destination_untouched():
    ptr = Pointer(str, "keep")

    unmarshal(None, ptr)

    assert ptr.value == "keep"


def test_scalar_shape_mismatch_is_an_error(lua):
    with pytest.raises(CodecError, match="cannot store string"):
        decode("abc", int)
    with pytest.raises(CodecError):
        unmarshal(lua.eval("{ count = 'many' }"), Record())


def test_nested_pointers_are_followed_and_cycles_broken(lua):
    inner = Pointer(int)
    unmarshal(7, Pointer(Any, inner))
    assert inner.value == 7

    looped = Pointer(Any)
    looped.value = looped
    unmarshal(lua.eval("{ 1 }"), looped)
    assert looped.value == [1.0]


def test_marshal_skips_nil_list_elements(lua):
    table = marshal(lua, ["a", None, "b"])

    assert len(table) == 2
    assert table[2] == "b"


def test_marshal_rejects_unsupported_types(lua):
    with pytest.raises(CodecError, match="marshal: unsupported type set"):
        marshal(lua, {1, 2})
    with pytest.raises(CodecError, match="pointer to pointer"):
        marshal(lua, Pointer(Any, Pointer(int, 1)))


def test_marshal_dereferences_one_pointer_level(lua):
    table = marshal(lua, Pointer(Child, Child(title="t", level=1)))

    assert table["title"] == "t"
