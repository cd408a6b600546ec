from dataclasses import dataclass

import pytest

from sdkfox.config.schema import Config
from sdkfox.plugins.luai.context import RuntimeContext
from sdkfox.plugins.luai.modules import PreloadOptions
from sdkfox.plugins.luai.vm import LuaError, LuaVM, load_prelude
from sdkfox.utils.exceptions import HookError


@dataclass
class Greeting:
    text: str = ""
    count: int = 0


def _vm(with_modules: bool = False) -> LuaVM:
    vm = LuaVM()
    options = PreloadOptions(config=Config(), context=RuntimeContext("0.1.0")) if with_modules else None
    vm.prepare(options)
    return vm


def test_prelude_is_bundled():
    assert "printTable" in load_prelude()


def test_prelude_provides_table_unpack():
    vm = _vm()

    vm.runtime.execute("A, B = table.unpack({ 'x', 'y' })")

    assert vm.get_global("A") == "x"
    assert vm.get_global("B") == "y"


def test_set_global_marshals_host_values():
    vm = _vm()

    vm.set_global("GREETING", Greeting(text="hi", count=2))

    assert vm.runtime.eval("GREETING.text .. GREETING.count") == "hi2"


def test_limit_package_path_scopes_require(tmp_path):
    (tmp_path / "mylib.lua").write_text("return { answer = 42 }", encoding="utf-8")
    vm = _vm()

    vm.limit_package_path(tmp_path / "?.lua")

    assert vm.package_path == f"{tmp_path}/?.lua"
    assert vm.runtime.globals()["package"]["cpath"] == ""
    assert vm.require("mylib")["answer"] == 42


def test_do_file_reports_lua_errors(tmp_path):
    broken = tmp_path / "broken.lua"
    broken.write_text("this is not lua", encoding="utf-8")
    vm = _vm()

    with pytest.raises(LuaError):
        vm.do_file(broken)


def test_call_function_passes_receiver_and_returns_first_result():
    vm = _vm()
    vm.runtime.execute(
        """
        OBJ = { prefix = "v" }
        function OBJ:Describe(ctx)
            return self.prefix .. ctx.text, "ignored"
        end
        """
    )
    obj = vm.get_global("OBJ")

    result = vm.call_function(obj, "Describe", vm.marshal(Greeting(text="1")))

    assert result == "v1"


def test_call_function_without_results_returns_none():
    vm = _vm()
    vm.runtime.execute("OBJ = {} function OBJ:Nothing() end")

    assert vm.call_function(vm.get_global("OBJ"), "Nothing") is None


def test_call_function_missing_method():
    vm = _vm()
    vm.runtime.execute("OBJ = { NotAFunction = 1 }")

    with pytest.raises(HookError, match="function not found"):
        vm.call_function(vm.get_global("OBJ"), "NotAFunction")


def test_preloaded_modules_are_requirable():
    vm = _vm(with_modules=True)
    vm.limit_package_path()

    vm.runtime.execute(
        """
        local strings = require("sdkfox.strings")
        local json = require("json")
        PARTS = strings.join(strings.split("a,b", ","), "-")
        ENCODED = json.encode({ ok = true })
        HAS_HTTP = type(require("http").get) == "function"
        """
    )

    assert vm.get_global("PARTS") == "a-b"
    assert vm.get_global("ENCODED") == '{"ok":true}'
    assert vm.get_global("HAS_HTTP") is True


def test_close_releases_runtime():
    vm = _vm()

    vm.close()

    assert vm.closed
    with pytest.raises(RuntimeError):
        vm.get_global("print")
