"""Lifecycle hook registry and the typed call protocol over a loaded plugin."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import lupa.lua51 as lupa
from loguru import logger

from sdkfox.plugins.core.protocol import (
    AvailableHookCtx,
    AvailableHookResultItem,
    EnvKeysHookCtx,
    EnvKeysHookResultItem,
    ParseLegacyFileHookCtx,
    ParseLegacyFileResult,
    PostInstallHookCtx,
    PreInstallHookCtx,
    PreInstallHookResult,
    PreUninstallHookCtx,
    PreUseHookCtx,
    PreUseHookResult,
)
from sdkfox.plugins.core.types import PluginMetadata
from sdkfox.plugins.core.contracts import HookInvoker
from sdkfox.plugins.luai.codec import Pointer, unmarshal
from sdkfox.plugins.luai.vm import LuaVM
from sdkfox.utils.exceptions import CodecError, HookError, NoResultProvided


@dataclass(frozen=True, slots=True)
class HookDescriptor:
    name: str
    filename: str
    required: bool


AVAILABLE = HookDescriptor("Available", "available", True)
PRE_INSTALL = HookDescriptor("PreInstall", "pre_install", True)
ENV_KEYS = HookDescriptor("EnvKeys", "env_keys", True)
POST_INSTALL = HookDescriptor("PostInstall", "post_install", False)
PRE_USE = HookDescriptor("PreUse", "pre_use", False)
PARSE_LEGACY_FILE = HookDescriptor("ParseLegacyFile", "parse_legacy_file", False)
PRE_UNINSTALL = HookDescriptor("PreUninstall", "pre_uninstall", False)

HOOKS: tuple[HookDescriptor, ...] = (
    AVAILABLE,
    PRE_INSTALL,
    ENV_KEYS,
    POST_INSTALL,
    PRE_USE,
    PARSE_LEGACY_FILE,
    PRE_UNINSTALL,
)

HOOKS_BY_NAME: dict[str, HookDescriptor] = {hook.name: hook for hook in HOOKS}


class LuaPlugin:
    """
    Calls hooks on the plugin's ``PLUGIN`` table.

    Each call marshals a typed context, invokes the Lua method and decodes
    the single return value. A nil return raises ``NoResultProvided``; a
    value that does not fit the result type raises ``HookError`` naming the
    hook. Errors raised by plugin code propagate unchanged.
    """

    def __init__(
        self,
        vm: LuaVM,
        plugin_obj: Any,
        metadata: PluginMetadata,
        available_cache: HookInvoker | None = None,
    ):
        self.vm = vm
        self.plugin_obj = plugin_obj
        self.metadata = metadata
        self.available_cache = available_cache

    def has_function(self, name: str) -> bool:
        return lupa.lua_type(self.plugin_obj[name]) == "function"

    def _call(self, hook: HookDescriptor, ctx: Any) -> Any:
        try:
            lua_ctx = self.vm.marshal(ctx)
        except CodecError as exc:
            raise HookError(hook.name, f"failed to marshal the context: {exc.message}") from exc
        logger.debug("{} hook context: {}", hook.name, ctx)
        return self.vm.call_function(self.plugin_obj, hook.name, lua_ctx)

    def _decode(self, hook: HookDescriptor, raw: Any, result_type: Any) -> Any:
        if raw is None:
            raise NoResultProvided(hook=hook.name)
        result = Pointer(result_type)
        try:
            unmarshal(raw, result)
        except CodecError as exc:
            raise HookError(hook.name, f"failed to unmarshal the return value: {exc.message}") from exc
        return result.value

    def _invoke(self, hook: HookDescriptor, ctx: Any, result_type: Any) -> Any:
        return self._decode(hook, self._call(hook, ctx), result_type)

    def available(self, ctx: AvailableHookCtx) -> list[AvailableHookResultItem]:
        call: Callable[[], Any] = lambda: self._call(AVAILABLE, ctx)
        if self.available_cache is not None:
            raw = self.available_cache.invoke(ctx.args, call)
        else:
            raw = call()
        return self._decode(AVAILABLE, raw, list[AvailableHookResultItem])

    def pre_install(self, ctx: PreInstallHookCtx) -> PreInstallHookResult:
        return self._invoke(PRE_INSTALL, ctx, PreInstallHookResult)

    def env_keys(self, ctx: EnvKeysHookCtx) -> list[EnvKeysHookResultItem]:
        raw = self._call(ENV_KEYS, ctx)
        if lupa.lua_type(raw) == "table" and next(iter(raw.keys()), None) is None:
            raise NoResultProvided(hook=ENV_KEYS.name)
        return self._decode(ENV_KEYS, raw, list[EnvKeysHookResultItem])

    def post_install(self, ctx: PostInstallHookCtx) -> None:
        self._call(POST_INSTALL, ctx)

    def pre_use(self, ctx: PreUseHookCtx) -> PreUseHookResult:
        return self._invoke(PRE_USE, ctx, PreUseHookResult)

    def parse_legacy_file(self, ctx: ParseLegacyFileHookCtx) -> ParseLegacyFileResult:
        return self._invoke(PARSE_LEGACY_FILE, ctx, ParseLegacyFileResult)

    def pre_uninstall(self, ctx: PreUninstallHookCtx) -> None:
        self._call(PRE_UNINSTALL, ctx)

    def close(self) -> None:
        self.plugin_obj = None
        self.vm.close()
