"""Host modules that plugins can ``require`` regardless of their search path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol

import httpx
from loguru import logger

from sdkfox.config.schema import Config
from sdkfox.plugins.luai.context import RuntimeContext

if TYPE_CHECKING:
    from sdkfox.plugins.luai.vm import LuaVM


@dataclass(slots=True)
class PreloadOptions:
    """What preload modules may see: user config and the runtime context."""

    config: Config
    context: RuntimeContext
    # Test hook for the http module; None means a real network transport.
    http_transport: httpx.BaseTransport | None = None


class LuaModule(Protocol):
    name: str

    def functions(self) -> dict[str, Callable[..., Any]]:
        ...


def register_module(vm: "LuaVM", module: LuaModule) -> None:
    """Install ``module`` in ``package.preload`` so ``require(name)`` returns its table."""
    functions = module.functions()

    def loader(*_: Any) -> Any:
        table = vm.new_table()
        for func_name, func in functions.items():
            table[func_name] = vm.marshal(func)
        return table

    preload_table = vm.get_global("package")["preload"]
    preload_table[module.name] = vm.marshal(loader)
    logger.debug("Preloaded Lua module {}", module.name)


def preload(vm: "LuaVM", options: PreloadOptions) -> None:
    from sdkfox.plugins.luai.modules.http import HttpModule
    from sdkfox.plugins.luai.modules.json import JsonModule
    from sdkfox.plugins.luai.modules.strings import StringsModule

    register_module(vm, HttpModule(vm, options))
    register_module(vm, JsonModule(vm))
    register_module(vm, StringsModule())


__all__ = ["LuaModule", "PreloadOptions", "preload", "register_module"]
