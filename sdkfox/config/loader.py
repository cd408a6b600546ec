"""Read and write ``config.json``.

The file uses camelCase keys (``availableHookDuration``); the models use
snake_case. ``SDKFOX_CONFIG`` points at an alternative file.
"""

import json
import os
from pathlib import Path
from typing import Any

from sdkfox.config.schema import Config
from sdkfox.utils.helpers import get_home_path

CONFIG_ENV_VAR = "SDKFOX_CONFIG"
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return get_home_path() / CONFIG_FILENAME


def load_config(config_path: Path | None = None) -> Config:
    """
    Parse the config file, or return defaults when it does not exist.

    Raises:
        ValueError: the file is not JSON, its root is not an object, or a
            value fails validation. The message names the file.
    """
    path = Path(config_path) if config_path else get_config_path()
    if not path.exists():
        return Config()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("config root must be a JSON object")
        return Config.model_validate(convert_keys(data))
    except ValueError as e:
        raise ValueError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to regenerate defaults."
        ) from e


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Write ``config`` as camelCase JSON, replacing the file in one step. Returns the path written."""
    path = Path(config_path) if config_path else get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(convert_to_camel(config.model_dump()), indent=2) + "\n", encoding="utf-8")
    os.replace(tmp, path)

    from sdkfox.config.access import clear_config_cache

    clear_config_cache(config_path=path)
    return path


def convert_keys(data: Any) -> Any:
    """camelCase -> snake_case, recursively."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """snake_case -> camelCase, recursively."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    out = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            out.append("_")
        out.append(char.lower())
    return "".join(out)


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
