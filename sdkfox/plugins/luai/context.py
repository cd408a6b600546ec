"""Per-plugin runtime context shared with preload modules."""

from __future__ import annotations

import threading

from sdkfox.utils.helpers import PRODUCT_NAME


class RuntimeContext:
    """Runtime version and plugin identity; composes the HTTP user agent."""

    def __init__(self, runtime_version: str = ""):
        self._lock = threading.RLock()
        self._runtime_version = runtime_version
        self._plugin_name = ""
        self._plugin_version = ""
        self._user_agent = ""
        self._compose_user_agent()

    @property
    def runtime_version(self) -> str:
        with self._lock:
            return self._runtime_version

    @property
    def plugin_info(self) -> tuple[str, str]:
        with self._lock:
            return self._plugin_name, self._plugin_version

    @property
    def user_agent(self) -> str:
        with self._lock:
            return self._user_agent

    def set_plugin_info(self, name: str, version: str) -> None:
        with self._lock:
            self._plugin_name = name
            self._plugin_version = version
            self._compose_user_agent()

    def _compose_user_agent(self) -> None:
        components = [f"{PRODUCT_NAME}/{self._runtime_version}" if self._runtime_version else PRODUCT_NAME]
        name = _ensure_prefix(self._plugin_name)
        if name:
            components.append(f"{name}/{self._plugin_version}" if self._plugin_version else name)
        self._user_agent = " ".join(components).strip()


def _ensure_prefix(name: str) -> str:
    if not name:
        return ""
    prefix = f"{PRODUCT_NAME}-"
    return name if name.startswith(prefix) else prefix + name
