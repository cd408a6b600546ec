"""Runtime contracts for plugin backends."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .protocol import (
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


@runtime_checkable
class PluginHooks(Protocol):
    """Typed hook calls on a loaded plugin; what the wrapper drives."""

    def has_function(self, name: str) -> bool: ...
    def available(self, ctx: AvailableHookCtx) -> list[AvailableHookResultItem]: ...
    def pre_install(self, ctx: PreInstallHookCtx) -> PreInstallHookResult: ...
    def env_keys(self, ctx: EnvKeysHookCtx) -> list[EnvKeysHookResultItem]: ...
    def post_install(self, ctx: PostInstallHookCtx) -> None: ...
    def pre_use(self, ctx: PreUseHookCtx) -> PreUseHookResult: ...
    def parse_legacy_file(self, ctx: ParseLegacyFileHookCtx) -> ParseLegacyFileResult: ...
    def pre_uninstall(self, ctx: PreUninstallHookCtx) -> None: ...
    def close(self) -> None: ...


@runtime_checkable
class HookInvoker(Protocol):
    """Anything that can run a zero-argument hook thunk, possibly memoized."""

    def invoke(self, args: list[str], call: Any) -> Any: ...
