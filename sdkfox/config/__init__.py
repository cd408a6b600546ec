"""Configuration module for sdkfox."""

from sdkfox.config.loader import load_config, save_config, get_config_path
from sdkfox.config.schema import Config
from sdkfox.config.access import get_config, clear_config_cache

__all__ = ["Config", "load_config", "save_config", "get_config_path", "get_config", "clear_config_cache"]
