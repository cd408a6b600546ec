"""Plugin discovery and process-wide handle cache."""

from __future__ import annotations

import threading
from pathlib import Path

from loguru import logger

from sdkfox import __version__
from sdkfox.config.access import get_config
from sdkfox.plugins.core.types import RuntimeEnvContext
from sdkfox.plugins.loader import is_lua_plugin_dir
from sdkfox.plugins.wrapper import PluginWrapper
from sdkfox.utils.exceptions import NotFoundError
from sdkfox.utils.helpers import get_home_path

_singleton_lock = threading.Lock()
_singleton: "PluginManager | None" = None


def create_plugin(plugin_dir: Path, env_ctx: RuntimeEnvContext) -> PluginWrapper:
    """Load and validate the plugin in ``plugin_dir``."""
    plugin_dir = Path(plugin_dir)
    if not is_lua_plugin_dir(plugin_dir):
        raise NotFoundError("plugin", str(plugin_dir))
    return PluginWrapper.load(plugin_dir, env_ctx)


def get_plugins_dir() -> Path:
    return get_home_path() / "plugins"


class PluginManager:
    """Loads plugins from ``plugins_dir/<name>`` on first use and keeps them open."""

    def __init__(self, plugins_dir: Path, env_ctx: RuntimeEnvContext):
        self.plugins_dir = Path(plugins_dir)
        self.env_ctx = env_ctx
        self._lock = threading.RLock()
        self._loaded: dict[str, PluginWrapper] = {}

    def discover(self) -> list[str]:
        """Names of installed plugin directories, sorted."""
        if not self.plugins_dir.is_dir():
            return []
        return sorted(p.name for p in self.plugins_dir.iterdir() if p.is_dir() and is_lua_plugin_dir(p))

    def get(self, name: str) -> PluginWrapper:
        with self._lock:
            wrapper = self._loaded.get(name)
            if wrapper is None:
                wrapper = create_plugin(self.plugins_dir / name, self.env_ctx)
                self._loaded[name] = wrapper
                logger.debug("Plugin {} loaded as {}", name, wrapper.label())
            return wrapper

    def close(self) -> None:
        with self._lock:
            for name, wrapper in self._loaded.items():
                wrapper.close()
                logger.debug("Plugin {} closed", name)
            self._loaded.clear()


def get_plugin_manager(plugins_dir: Path | None = None) -> PluginManager:
    """Get or create process-global plugin manager."""
    global _singleton
    with _singleton_lock:
        if _singleton is None:
            env_ctx = RuntimeEnvContext(user_config=get_config(), runtime_version=__version__)
            _singleton = PluginManager(plugins_dir or get_plugins_dir(), env_ctx)
    return _singleton
