"""Platform detection and the well-known per-user locations."""

import dataclasses
import os
import platform
import sys
from pathlib import Path
from typing import Optional, Union

from ..application.output_paths import APP_NAME, default_dump_root

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
}


@dataclasses.dataclass(frozen=True)
class PlatformInfo:
    platform: str
    arch: str

    @property
    def is_windows(self) -> bool:
        return self.platform == "win32"


def normalize_platform(value: str) -> str:
    """Maps `sys.platform` style names onto linux, darwin or win32."""
    if value.startswith("win"):
        return "win32"
    if value.startswith("linux"):
        return "linux"
    return value


def normalize_arch(machine: str) -> str:
    """Maps `platform.machine()` values onto x64 or arm64."""
    return _ARCH_ALIASES.get(machine.lower(), machine.lower())


def current_platform() -> PlatformInfo:
    return PlatformInfo(
        platform=normalize_platform(sys.platform),
        arch=normalize_arch(platform.machine()),
    )


def config_dir() -> Path:
    if sys.platform.startswith("win"):
        app_data = os.environ.get("APPDATA")
        base = Path(app_data) if app_data else Path.home() / "AppData" / "Roaming"
        return base / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def config_path(custom: Optional[Union[str, Path]] = None) -> Path:
    if custom:
        return Path(custom).expanduser()
    return config_dir() / "config.json"


def binary_cache_root(custom: Optional[Union[str, Path]] = None) -> Path:
    if custom:
        return Path(custom).expanduser()
    return Path.home() / f".{APP_NAME}" / "bin"


def temp_dump_root(custom: Optional[Union[str, Path]] = None) -> Path:
    if custom:
        return Path(custom).expanduser()
    return default_dump_root()
