"""Lua plugin runtime: codec, hooks, caching and the plugin wrapper."""

from sdkfox.plugins.hooks import HOOKS, HookDescriptor, LuaPlugin
from sdkfox.plugins.loader import create_lua_plugin, is_lua_plugin_dir
from sdkfox.plugins.manager import PluginManager, create_plugin, get_plugin_manager
from sdkfox.plugins.wrapper import PluginState, PluginWrapper, create_packages

__all__ = [
    "HOOKS",
    "HookDescriptor",
    "LuaPlugin",
    "PluginManager",
    "PluginState",
    "PluginWrapper",
    "create_lua_plugin",
    "create_packages",
    "create_plugin",
    "get_plugin_manager",
    "is_lua_plugin_dir",
]
