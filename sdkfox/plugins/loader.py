"""Load a Lua plugin directory into a ready hook protocol."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from sdkfox.plugins.available_cache import AvailableCache
from sdkfox.plugins.core.protocol import Navigator, RuntimeInfo
from sdkfox.plugins.core.types import PluginMetadata, RuntimeEnvContext
from sdkfox.plugins.hooks import HOOKS, LuaPlugin
from sdkfox.plugins.luai.codec import unmarshal
from sdkfox.plugins.luai.context import RuntimeContext
from sdkfox.plugins.luai.modules import PreloadOptions
from sdkfox.plugins.luai.modules.http import NAVIGATOR_GLOBAL
from sdkfox.plugins.luai.vm import LuaError, LuaVM
from sdkfox.utils.exceptions import CodecError, PluginError
from sdkfox.utils.helpers import get_arch_type, get_os_type

MAIN_FILE = "main.lua"
METADATA_FILE = "metadata.lua"
HOOKS_DIR = "hooks"
LIB_DIR = "lib"

OS_TYPE_GLOBAL = "OS_TYPE"
ARCH_TYPE_GLOBAL = "ARCH_TYPE"
RUNTIME_GLOBAL = "RUNTIME"
PLUGIN_GLOBAL = "PLUGIN"


def is_lua_plugin_dir(path: Path) -> bool:
    path = Path(path)
    return (path / METADATA_FILE).is_file() or (path / MAIN_FILE).is_file()


def _load_sources(vm: LuaVM, plugin_dir: Path) -> None:
    main_path = plugin_dir / MAIN_FILE
    if main_path.is_file():
        vm.limit_package_path(plugin_dir / "?.lua")
        try:
            vm.do_file(main_path)
        except LuaError as exc:
            raise PluginError(str(plugin_dir), f"failed to load main file, {exc}") from exc
        return

    vm.limit_package_path(plugin_dir / HOOKS_DIR / "?.lua", plugin_dir / LIB_DIR / "?.lua")
    metadata_path = plugin_dir / METADATA_FILE
    if not metadata_path.is_file():
        raise PluginError(str(plugin_dir), "plugin invalid, metadata file not found")
    try:
        vm.do_file(metadata_path)
    except LuaError as exc:
        raise PluginError(str(plugin_dir), f"failed to load metadata file, {exc}") from exc

    for hook in HOOKS:
        hook_path = plugin_dir / HOOKS_DIR / f"{hook.filename}.lua"
        if not hook.required and not hook_path.is_file():
            continue
        try:
            vm.do_file(hook_path)
        except LuaError as exc:
            raise PluginError(str(plugin_dir), f"failed to load [{hook.name}] hook function: {exc}") from exc


def create_lua_plugin(plugin_dir: Path, env_ctx: RuntimeEnvContext) -> tuple[LuaPlugin, PluginMetadata]:
    """
    Boot a Lua runtime for ``plugin_dir`` and read its ``PLUGIN`` table.

    Globals (OS_TYPE, ARCH_TYPE, RUNTIME, SDKFOX_NAVIGATOR) are set after
    all plugin code has run, so plugin code cannot replace them.
    """
    plugin_dir = Path(plugin_dir).resolve()
    context = RuntimeContext(env_ctx.runtime_version)
    vm = LuaVM()
    try:
        vm.prepare(PreloadOptions(config=env_ctx.user_config, context=context))
        _load_sources(vm, plugin_dir)

        os_type = get_os_type()
        arch_type = get_arch_type()
        vm.set_global(OS_TYPE_GLOBAL, os_type)
        vm.set_global(ARCH_TYPE_GLOBAL, arch_type)
        vm.set_global(
            RUNTIME_GLOBAL,
            RuntimeInfo(
                os_type=os_type,
                arch_type=arch_type,
                version=env_ctx.runtime_version,
                plugin_dir_path=str(plugin_dir),
            ),
        )

        plugin_obj = vm.get_global(PLUGIN_GLOBAL)
        if plugin_obj is None:
            raise PluginError(str(plugin_dir), "plugin object not found")
        metadata = PluginMetadata()
        try:
            unmarshal(plugin_obj, metadata)
        except CodecError as exc:
            raise PluginError(str(plugin_dir), f"invalid plugin metadata: {exc.message}") from exc

        context.set_plugin_info(metadata.name, metadata.version)
        vm.set_global(NAVIGATOR_GLOBAL, Navigator(user_agent=context.user_agent))
    except BaseException:
        vm.close()
        raise

    duration = env_ctx.user_config.cache.available_hook_cache_duration
    cache = AvailableCache.for_plugin(vm, plugin_dir, duration)
    logger.debug("Loaded Lua plugin {} from {}", metadata.name or "<unnamed>", plugin_dir)
    return LuaPlugin(vm, plugin_obj, metadata, available_cache=cache), metadata
