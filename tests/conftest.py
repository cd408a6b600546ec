"""Pytest hooks and fixtures."""

import shutil
from pathlib import Path

import lupa.lua51 as lupa
import pytest

from sdkfox.config.schema import Config
from sdkfox.plugins.core.types import RuntimeEnvContext

TESTDATA_PLUGINS = Path(__file__).parent / "testdata" / "plugins"


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    """Keep config, logs and plugin caches out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("SDKFOX_CONFIG", raising=False)
    from sdkfox.config.access import clear_config_cache

    clear_config_cache()
    yield home
    clear_config_cache()


@pytest.fixture
def lua():
    return lupa.LuaRuntime(unpack_returned_tuples=True)


@pytest.fixture
def env_ctx() -> RuntimeEnvContext:
    return RuntimeEnvContext(user_config=Config(), runtime_version="0.1.0")


@pytest.fixture
def plugin_copy(tmp_path):
    """Copy a fixture plugin into tmp_path; the availability cache writes into the plugin dir."""

    def _copy(name: str) -> Path:
        target = tmp_path / "plugins" / name
        shutil.copytree(TESTDATA_PLUGINS / name, target)
        return target

    return _copy


@pytest.fixture
def write_plugin(tmp_path):
    """Write a plugin from a {relative_path: source} mapping."""

    def _write(name: str, files: dict[str, str]) -> Path:
        root = tmp_path / "plugins" / name
        for rel, source in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return root

    return _write


@pytest.fixture(autouse=True)
def _restore_sdkfox_logging():
    """CLI logging setup disables the sdkfox logger process-wide; re-enable it between tests."""
    from loguru import logger

    yield
    logger.enable("sdkfox")
