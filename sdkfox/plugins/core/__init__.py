"""Shared plugin types, hook models and runtime contracts."""

from .types import (
    NONE_CHECKSUM,
    Checksum,
    Envs,
    Package,
    PackageInfo,
    PluginMetadata,
    RuntimeEnvContext,
)
from .contracts import HookInvoker, PluginHooks

__all__ = [
    "NONE_CHECKSUM",
    "Checksum",
    "Envs",
    "HookInvoker",
    "Package",
    "PackageInfo",
    "PluginHooks",
    "PluginMetadata",
    "RuntimeEnvContext",
]
