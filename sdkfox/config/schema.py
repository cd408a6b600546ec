"""Configuration schema using Pydantic.

Persisted to ~/.sdkfox/config.json; every section has usable defaults.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from sdkfox.storage.duration import CacheDuration
from sdkfox.utils.exceptions import SdkfoxError


class ProxyConfig(BaseModel):
    """HTTP proxy used by the plugin http module."""
    enable: bool = False
    url: str = ""  # e.g. "http://127.0.0.1:7890"


class CacheConfig(BaseModel):
    """Plugin hook result caching."""
    # Seconds as a number, or "12h" / "1h30m" / "45s"; -1 never expires, 0 disables.
    available_hook_duration: int | str = "12h"

    @field_validator("available_hook_duration")
    @classmethod
    def _check_duration(cls, value: int | str) -> int | str:
        try:
            CacheDuration.parse(value)
        except SdkfoxError as exc:
            raise ValueError(exc.message) from exc
        return value

    @property
    def available_hook_cache_duration(self) -> CacheDuration:
        return CacheDuration.parse(self.available_hook_duration)


class LegacyVersionFileConfig(BaseModel):
    """Reading versions from other tools' files (.nvmrc, .sdkmanrc, ...)."""
    enable: bool = True
    strategy: Literal["specified", "latest_installed", "latest_available"] = "specified"


class StorageConfig(BaseModel):
    """Where installed SDKs live; empty means the default under ~/.sdkfox."""
    sdk_path: str = ""


class Config(BaseSettings):
    """Root configuration for sdkfox."""
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    legacy_version_file: LegacyVersionFileConfig = Field(default_factory=LegacyVersionFileConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    model_config = ConfigDict(
        env_prefix="SDKFOX_",
        env_nested_delimiter="__"
    )
