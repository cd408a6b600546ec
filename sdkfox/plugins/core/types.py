"""Types for plugin host integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sdkfox.plugins.luai.codec import lua_field

if TYPE_CHECKING:
    from sdkfox.config.schema import Config


@dataclass(frozen=True, slots=True)
class Checksum:
    """Expected digest of a downloaded artifact."""

    value: str
    type: str  # sha256 | md5 | sha1 | sha512 | none


NONE_CHECKSUM = Checksum(value="", type="none")


@dataclass(slots=True)
class PackageInfo:
    """One installable or installed artifact."""

    name: str
    version: str
    path: str = ""
    note: str = ""
    headers: dict[str, str] | None = None
    checksum: Checksum = NONE_CHECKSUM

    def label(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(slots=True)
class Package:
    """Main SDK artifact plus any additional files installed next to it."""

    main: PackageInfo
    additions: list[PackageInfo] = field(default_factory=list)

    def label(self) -> str:
        return self.main.label()


@dataclass(slots=True)
class Envs:
    """Environment a plugin asks for: plain variables plus PATH entries."""

    variables: dict[str, str] = field(default_factory=dict)
    paths: list[str] = field(default_factory=list)

    def add_path(self, path: str) -> None:
        if path and path not in self.paths:
            self.paths.append(path)


@dataclass(slots=True)
class PluginMetadata:
    """Identity and contract declared by the plugin's ``PLUGIN`` table."""

    name: str = ""
    version: str = ""
    description: str = ""
    update_url: str = lua_field("updateUrl", default="")
    manifest_url: str = lua_field("manifestUrl", default="")
    homepage: str = ""
    license: str = ""
    min_runtime_version: str = lua_field("minRuntimeVersion", default="")
    notes: list[str] = field(default_factory=list)
    legacy_filenames: list[str] = lua_field("legacyFilenames", default_factory=list)


@dataclass(slots=True)
class RuntimeEnvContext:
    """Host environment handed to plugin creation."""

    user_config: "Config"
    runtime_version: str = ""
