"""Raw TOML configuration I/O utilities.

Separates file I/O from validation logic so settings can be validated by
pydantic after the raw data is read.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

CONFIG_DIR = ".ghcontext"
CONFIG_FILE = "config.toml"


def get_config_path(root: Path) -> Path:
    """Get the path to the config file under a directory."""
    return root / CONFIG_DIR / CONFIG_FILE


def find_config_root(start_path: Path | None = None) -> Path | None:
    """Walk up from start_path to the first directory holding a config file."""
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    for candidate in (current, *current.parents):
        if get_config_path(candidate).exists():
            return candidate
    return None


def read_raw_toml(path: Path) -> dict[str, Any]:
    """Read raw TOML data from a file.

    Raises:
        FileNotFoundError: If the file does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    with open(path, "rb") as f:
        return tomllib.load(f)


def write_raw_toml(data: dict[str, Any], path: Path) -> None:
    """Write raw TOML data to a file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomlkit.dumps(data))
