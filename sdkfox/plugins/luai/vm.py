"""Lua interpreter wrapper: one instance per plugin."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any

import lupa.lua51 as lupa
from loguru import logger

from sdkfox.plugins.luai.codec import marshal
from sdkfox.utils.exceptions import HookError

LuaError = lupa.LuaError

_PRELUDE_FILE = "prelude.lua"


def load_prelude() -> str:
    return resources.files("sdkfox.plugins.luai").joinpath(_PRELUDE_FILE).read_text(encoding="utf-8")


class LuaVM:
    """
    Owns a ``lupa`` Lua 5.1 runtime.

    Not thread-safe: one call at a time per instance.
    """

    def __init__(self) -> None:
        self.runtime: lupa.LuaRuntime | None = lupa.LuaRuntime(unpack_returned_tuples=True, register_eval=False)

    @property
    def closed(self) -> bool:
        return self.runtime is None

    def _require_runtime(self) -> lupa.LuaRuntime:
        if self.runtime is None:
            raise RuntimeError("Lua runtime already closed")
        return self.runtime

    def prepare(self, options: Any = None) -> None:
        """Run the bundled prelude, then register preload modules when options are given."""
        runtime = self._require_runtime()
        runtime.execute(load_prelude())
        if options is not None:
            from sdkfox.plugins.luai.modules import preload

            preload(self, options)

    def limit_package_path(self, *package_paths: str | Path) -> None:
        """Restrict ``require`` to the given ``?.lua`` search patterns; native loaders get no path."""
        package = self._require_runtime().globals()["package"]
        package["path"] = ";".join(str(p) for p in package_paths)
        package["cpath"] = ""

    @property
    def package_path(self) -> str:
        return self._require_runtime().globals()["package"]["path"]

    def do_file(self, path: str | Path) -> None:
        self._require_runtime().globals()["dofile"](str(path))

    def require(self, module: str) -> Any:
        return self._require_runtime().globals()["require"](module)

    def get_global(self, name: str) -> Any:
        return self._require_runtime().globals()[name]

    def set_global(self, name: str, value: Any) -> None:
        """Marshal ``value`` and bind it to a Lua global."""
        self._require_runtime().globals()[name] = self.marshal(value)

    def marshal(self, value: Any) -> Any:
        return marshal(self._require_runtime(), value)

    def new_table(self) -> Any:
        return self._require_runtime().table()

    def call_function(self, plugin_obj: Any, func_name: str, *args: Any) -> Any:
        """
        Call ``plugin_obj[func_name]`` as a method: the plugin table is passed
        first, as Lua's ``obj:method(...)`` would. Returns the first result.
        """
        self._require_runtime()
        function = plugin_obj[func_name]
        if lupa.lua_type(function) != "function":
            raise HookError(func_name, "function not found")
        logger.debug("CallFunction: {}", func_name)
        result = function(plugin_obj, *args)
        if isinstance(result, tuple):
            return result[0] if result else None
        return result

    def close(self) -> None:
        self.runtime = None
