"""Plugin wrapper: validated handle exposing one method per hook."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Callable

from loguru import logger
from rich.console import Console

from sdkfox.plugins.core.contracts import PluginHooks
from sdkfox.plugins.core.protocol import (
    AvailableHookCtx,
    AvailableHookResultItem,
    EnvKeysHookCtx,
    InstalledPackageItem,
    ParseLegacyFileHookCtx,
    PostInstallHookCtx,
    PreInstallHookCtx,
    PreUninstallHookCtx,
    PreUseHookCtx,
)
from sdkfox.plugins.core.types import Envs, Package, PackageInfo, PluginMetadata, RuntimeEnvContext
from sdkfox.plugins.hooks import (
    HOOKS,
    PARSE_LEGACY_FILE,
    POST_INSTALL,
    PRE_UNINSTALL,
    PRE_USE,
)
from sdkfox.utils.exceptions import NoResultProvided, PluginError, PluginInvalidError

_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_\-]*$")

PATH_ENV_KEY = "PATH"


class PluginState(Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    VALIDATED = "validated"
    READY = "ready"
    CLOSED = "closed"


def is_valid_name(name: str) -> bool:
    return bool(_NAME_PATTERN.match(name))


def create_packages(name: str, items: list[AvailableHookResultItem]) -> list[Package]:
    """One package per ``Available`` candidate; the main artifact is named after the plugin."""
    packages = []
    for item in items:
        for index, addition in enumerate(item.addition, start=1):
            if not addition.name:
                logger.error("[Available] additional file {} no name provided", index)
        packages.append(
            Package(
                main=PackageInfo(name=name, version=item.version, note=item.note),
                additions=[addition.info() for addition in item.addition],
            )
        )
    return packages


class PluginWrapper:
    """
    Owns a loaded plugin for its whole lifetime.

    ``load()`` is the only way to obtain a usable wrapper: it validates the
    metadata and the required hooks, and releases the runtime if either check
    fails. Hook methods need the READY state.
    """

    def __init__(self, metadata: PluginMetadata, plugin: PluginHooks, installed_path: Path, env_ctx: RuntimeEnvContext):
        self.metadata = metadata
        self.plugin = plugin
        self.installed_path = Path(installed_path)
        self.env_ctx = env_ctx
        self.state = PluginState.LOADING

    @classmethod
    def load(cls, plugin_dir: Path, env_ctx: RuntimeEnvContext) -> "PluginWrapper":
        from sdkfox.plugins.loader import create_lua_plugin

        plugin, metadata = create_lua_plugin(plugin_dir, env_ctx)
        wrapper = cls(metadata, plugin, plugin_dir, env_ctx)
        try:
            wrapper.validate()
        except PluginInvalidError:
            wrapper.close()
            raise
        wrapper.state = PluginState.READY
        return wrapper

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def version(self) -> str:
        return self.metadata.version

    def validate(self) -> None:
        plugin_id = self.metadata.name or str(self.installed_path)
        if not self.metadata.name:
            raise PluginInvalidError(plugin_id, "no plugin name provided")
        if not is_valid_name(self.metadata.name):
            raise PluginInvalidError(plugin_id, f"invalid plugin name [{self.metadata.name}]")
        for hook in HOOKS:
            if hook.required and not self.plugin.has_function(hook.name):
                raise PluginInvalidError(plugin_id, f"[{hook.name}] function not found")
        self.state = PluginState.VALIDATED

    def _ensure_ready(self) -> None:
        if self.state is not PluginState.READY:
            raise PluginError(self.name, f"plugin is {self.state.value}, not ready")

    def has_hook(self, name: str) -> bool:
        return self.plugin.has_function(name)

    def available(self, args: list[str] | None = None) -> list[Package]:
        self._ensure_ready()
        try:
            items = self.plugin.available(AvailableHookCtx(args=list(args or [])))
        except NoResultProvided:
            return []
        return create_packages(self.name, items)

    def pre_install(self, version: str) -> Package:
        self._ensure_ready()
        try:
            result = self.plugin.pre_install(PreInstallHookCtx(version=version))
        except NoResultProvided:
            return Package(main=PackageInfo(name=self.name, version=""))
        if result.package is None:
            main = PackageInfo(name=self.name, version="")
        else:
            main = result.package.info()
            main.name = self.name
        additions = []
        for index, item in enumerate(result.addition, start=1):
            if not item.name:
                raise PluginError(self.name, f"[PreInstall] additional file {index} no name provided")
            additions.append(item.info())
        return Package(main=main, additions=additions)

    def post_install(self, root_path: str, sdks: list[PackageInfo]) -> None:
        self._ensure_ready()
        if not self.plugin.has_function(POST_INSTALL.name):
            return
        ctx = PostInstallHookCtx(
            root_path=root_path,
            sdk_info={sdk.name: InstalledPackageItem.from_info(sdk) for sdk in sdks},
        )
        self.plugin.post_install(ctx)

    def env_keys(self, package: Package) -> Envs:
        """
        Ask the plugin for its environment.

        ``PATH`` entries are collected in order without duplicates; everything
        else lands in ``variables``. An empty answer raises ``NoResultProvided``.
        """
        self._ensure_ready()
        ctx = EnvKeysHookCtx(
            main=InstalledPackageItem.from_info(package.main),
            path=package.main.path,
            sdk_info=self._sdk_info(package),
        )
        try:
            items = self.plugin.env_keys(ctx)
        except NoResultProvided as exc:
            raise NoResultProvided("no environment variables provided", hook=exc.hook) from exc
        envs = Envs()
        for item in items:
            if item.key == PATH_ENV_KEY:
                envs.add_path(item.value)
            else:
                envs.variables[item.key] = item.value
        return envs

    def pre_use(
        self,
        version: str,
        previous_version: str,
        scope: str,
        cwd: str,
        installed_sdks: list[Package],
    ) -> str:
        """Returns the version the plugin picks, or ``""`` to keep ``version``."""
        self._ensure_ready()
        if not self.plugin.has_function(PRE_USE.name):
            logger.debug("Plugin {} has no PreUse hook", self.name)
            return ""
        ctx = PreUseHookCtx(
            cwd=cwd,
            scope=scope,
            version=version,
            previous_version=previous_version,
            installed_sdks={
                sdk.main.version: InstalledPackageItem.from_info(sdk.main) for sdk in installed_sdks
            },
        )
        try:
            result = self.plugin.pre_use(ctx)
        except NoResultProvided:
            return ""
        return result.version

    def parse_legacy_file(self, path: Path, installed_versions: Callable[[], list[str]]) -> str:
        """Version pinned by a legacy version file, or ``""`` when the plugin cannot read it."""
        self._ensure_ready()
        if not self.metadata.legacy_filenames or not self.plugin.has_function(PARSE_LEGACY_FILE.name):
            return ""
        path = Path(path)
        ctx = ParseLegacyFileHookCtx(
            filepath=str(path),
            filename=path.name,
            get_installed_versions=installed_versions,
            strategy=self.env_ctx.user_config.legacy_version_file.strategy,
        )
        try:
            result = self.plugin.parse_legacy_file(ctx)
        except NoResultProvided:
            return ""
        return result.version

    def pre_uninstall(self, package: Package) -> None:
        self._ensure_ready()
        if not self.plugin.has_function(PRE_UNINSTALL.name):
            return
        ctx = PreUninstallHookCtx(
            main=InstalledPackageItem.from_info(package.main),
            sdk_info=self._sdk_info(package),
        )
        self.plugin.pre_uninstall(ctx)

    def _sdk_info(self, package: Package) -> dict[str, InstalledPackageItem]:
        infos = [package.main, *package.additions]
        return {info.name: InstalledPackageItem.from_info(info) for info in infos}

    def label(self, version: str | None = None) -> str:
        return f"{self.name}@{version if version is not None else self.version}"

    def show_notes(self, console: Console | None = None) -> None:
        if not self.metadata.notes:
            return
        console = console or Console()
        console.print("Notes:")
        console.print("======")
        for note in self.metadata.notes:
            console.print(f"  {note}", markup=False)

    def close(self) -> None:
        if self.state is PluginState.CLOSED:
            return
        self.plugin.close()
        self.state = PluginState.CLOSED
