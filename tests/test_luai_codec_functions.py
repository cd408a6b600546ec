import pytest

from sdkfox.plugins.luai.codec import HostFunction, marshal, wrap_function
from sdkfox.utils.exceptions import ArityMismatchError


def _call_from_lua(lua, source, *args):
    return lua.eval(source)(*args)


def test_wrapped_function_is_a_lua_function(lua):
    fn = marshal(lua, lambda: "ok")

    assert lua.globals().type(fn) == "function"


def test_variadic_arguments_are_decoded(lua):
    def total(prefix: str, *nums: int) -> str:
        return f"{prefix}{sum(nums)}"

    fn = wrap_function(lua, total)

    assert _call_from_lua(lua, "function(f) return f('x', 1, 2, 3) end", fn) == "x6"
    assert _call_from_lua(lua, "function(f) return f('x') end", fn) == "x0"


def test_missing_arguments_raise_arity_error(lua):
    def total(prefix: str, *nums: int) -> str:
        return prefix

    fn = wrap_function(lua, total)

    with pytest.raises(ArityMismatchError, match="expected at least 1 arguments"):
        _call_from_lua(lua, "function(f) return f() end", fn)


def test_fixed_arity_rejects_extra_arguments(lua):
    def pair(a: str, b: str) -> str:
        return a + b

    fn = wrap_function(lua, pair)

    assert _call_from_lua(lua, "function(f) return f('a', 'b') end", fn) == "ab"
    with pytest.raises(ArityMismatchError, match="expected 2 arguments"):
        _call_from_lua(lua, "function(f) return f('a', 'b', 'c') end", fn)


def test_arity_error_is_catchable_with_pcall(lua):
    fn = wrap_function(lua, lambda a, b: a)

    ok = _call_from_lua(lua, "function(f) local ok = pcall(f, 1) return ok end", fn)

    assert ok is False


def test_parameters_with_defaults_are_optional(lua):
    def greet(name: str, greeting: str = "hello") -> str:
        return f"{greeting} {name}"

    fn = wrap_function(lua, greet)

    assert _call_from_lua(lua, "function(f) return f('lua') end", fn) == "hello lua"
    assert _call_from_lua(lua, "function(f) return f('lua', 'hi') end", fn) == "hi lua"


def test_argument_decode_failure_returns_nil_and_message(lua):
    def double(n: int) -> int:
        return n * 2

    fn = wrap_function(lua, double)

    value, err = _call_from_lua(lua, "function(f) return f('abc') end", fn)

    assert value is None
    assert err.startswith("error unmarshaling argument 0:")


def test_tuple_result_becomes_multiple_returns(lua):
    def split_pair() -> tuple:
        return "left", 2

    fn = wrap_function(lua, split_pair)

    count = _call_from_lua(lua, "function(f) return select('#', f()) end", fn)
    second = _call_from_lua(lua, "function(f) local _, b = f() return b end", fn)

    assert count == 2
    assert second == 2


def test_none_result_means_no_values(lua):
    fn = wrap_function(lua, lambda: None)

    assert _call_from_lua(lua, "function(f) return select('#', f()) end", fn) == 0


def test_table_results_are_marshaled(lua):
    fn = wrap_function(lua, lambda: {"versions": ["1.0", "2.0"]})

    assert _call_from_lua(lua, "function(f) return f().versions[2] end", fn) == "2.0"


def test_bind_records_signature():
    def sample(a: str, b: int = 1, *rest: str) -> None:
        pass

    binding = HostFunction.bind(None, sample)

    assert binding.required == 1
    assert len(binding.params) == 2
    assert binding.variadic is not None
    assert "sample" in binding.label
