"""Filesystem and platform helpers."""

from __future__ import annotations

import platform
import sys
from pathlib import Path

PRODUCT_NAME = "sdkfox"

_OS_TYPES = {
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "linux": "linux",
}

_ARCH_TYPES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv7l": "arm",
    "armv6l": "arm",
}


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_home_path() -> Path:
    """Return the sdkfox home directory (~/.sdkfox)."""
    return Path.home() / f".{PRODUCT_NAME}"


def get_data_path(*parts: str) -> Path:
    """Return (and create) a directory under the sdkfox home."""
    return ensure_dir(get_home_path().joinpath(*parts))


def get_os_type() -> str:
    """Operating system identifier as plugins see it: darwin, windows or linux."""
    return _OS_TYPES.get(sys.platform, sys.platform)


def get_arch_type() -> str:
    """CPU architecture identifier as plugins see it: amd64, arm64, 386 or arm."""
    machine = platform.machine().lower()
    return _ARCH_TYPES.get(machine, machine)
