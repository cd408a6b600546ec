"""Hook context/result models exchanged with Lua plugins.

Field tags give the camelCase keys plugins read and write.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from sdkfox.plugins.core.types import NONE_CHECKSUM, Checksum, PackageInfo
from sdkfox.plugins.luai.codec import lua_field


@dataclass(slots=True)
class CheckSumItem:
    sha256: str = ""
    sha512: str = ""
    sha1: str = ""
    md5: str = ""

    def checksum(self) -> Checksum:
        """First non-empty of sha256, md5, sha1, sha512."""
        for kind in ("sha256", "md5", "sha1", "sha512"):
            value = getattr(self, kind)
            if value:
                return Checksum(value=value, type=kind)
        return NONE_CHECKSUM


@dataclass(slots=True)
class PreInstallPackageItem:
    name: str = ""
    version: str = ""
    path: str = lua_field("url", default="")
    headers: dict[str, str] | None = None
    note: str = ""
    checksum_item: CheckSumItem | None = lua_field(embedded=True, default=None)

    def checksum(self) -> Checksum:
        if self.checksum_item is None:
            return NONE_CHECKSUM
        return self.checksum_item.checksum()

    def info(self) -> PackageInfo:
        return PackageInfo(
            name=self.name,
            version=self.version,
            path=self.path,
            note=self.note,
            headers=dict(self.headers) if self.headers else None,
            checksum=self.checksum(),
        )


@dataclass(slots=True)
class InstalledPackageItem:
    """An installed SDK as plugins see it."""

    path: str = ""
    version: str = ""
    name: str = ""
    note: str = ""

    @classmethod
    def from_info(cls, info: PackageInfo) -> "InstalledPackageItem":
        return cls(path=info.path, version=info.version, name=info.name, note=info.note)


@dataclass(slots=True)
class RuntimeInfo:
    os_type: str = lua_field("osType", default="")
    arch_type: str = lua_field("archType", default="")
    version: str = ""
    plugin_dir_path: str = lua_field("pluginDirPath", default="")


@dataclass(slots=True)
class Navigator:
    user_agent: str = lua_field("userAgent", default="")


@dataclass(slots=True)
class AvailableHookCtx:
    args: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AvailableHookResultItem:
    version: str = ""
    note: str = ""
    addition: list[PreInstallPackageItem] = field(default_factory=list)


@dataclass(slots=True)
class PreInstallHookCtx:
    version: str = ""


@dataclass(slots=True)
class PreInstallHookResult:
    package: PreInstallPackageItem | None = lua_field(embedded=True, default=None)
    addition: list[PreInstallPackageItem] = field(default_factory=list)


@dataclass(slots=True)
class PostInstallHookCtx:
    root_path: str = lua_field("rootPath", default="")
    sdk_info: dict[str, InstalledPackageItem] = lua_field("sdkInfo", default_factory=dict)


@dataclass(slots=True)
class PreUseHookCtx:
    cwd: str = ""
    scope: str = ""
    version: str = ""
    previous_version: str = lua_field("previousVersion", default="")
    installed_sdks: dict[str, InstalledPackageItem] = lua_field("installedSdks", default_factory=dict)


@dataclass(slots=True)
class PreUseHookResult:
    version: str = ""


@dataclass(slots=True)
class EnvKeysHookCtx:
    main: InstalledPackageItem | None = None
    path: str = ""
    sdk_info: dict[str, InstalledPackageItem] = lua_field("sdkInfo", default_factory=dict)


@dataclass(slots=True)
class EnvKeysHookResultItem:
    key: str = ""
    value: str = ""


@dataclass(slots=True)
class ParseLegacyFileHookCtx:
    filepath: str = ""
    filename: str = ""
    get_installed_versions: Callable[[], list[str]] | None = lua_field("getInstalledVersions", default=None)
    strategy: str = ""


@dataclass(slots=True)
class ParseLegacyFileResult:
    version: str = ""


@dataclass(slots=True)
class PreUninstallHookCtx:
    main: InstalledPackageItem | None = None
    sdk_info: dict[str, InstalledPackageItem] = lua_field("sdkInfo", default_factory=dict)
