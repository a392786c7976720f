"""Pydantic settings for context extraction and resolution.

Settings come from, in order of precedence:
- .ghcontext/config.toml found by walking up from the working directory
- Environment variables (GHCONTEXT__DEFAULT_HOST, GHCONTEXT__GIT_TIMEOUT, ...)
- Built-in defaults
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config_store import find_config_root, get_config_path, read_raw_toml, write_raw_toml
from .context import DEFAULT_HOST
from .logging import get_logger
from .paths import DEFAULT_BRANCHES

logger = get_logger(__name__)


class ConfigError(RuntimeError):
    """Configuration error."""

    pass


class ContextSettings(BaseSettings):
    """Runtime configuration.

    List-valued environment variables are JSON, e.g.
    GHCONTEXT__DEFAULT_BRANCHES='["main", "develop"]'.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHCONTEXT__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_host: str = DEFAULT_HOST
    # Treeish prefixes assumed to match the checked-out files
    default_branches: list[str] = list(DEFAULT_BRANCHES)
    # WM_CLASS names of browser windows, searched in order
    browser_window_classes: list[str] = ["google-chrome", "chromium", "firefox"]
    clipboard_command: list[str] = ["xclip", "-selection", "clipboard", "-o"]
    window_list_command: list[str] = ["wmctrl", "-lx"]
    editor_command: list[str] = ["code", "--goto", "{path}:{line}"]
    git_timeout: float = 60.0

    @field_validator("clipboard_command", "window_list_command", "editor_command")
    @classmethod
    def _command_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command cannot be empty")
        return value

    @field_validator("default_branches")
    @classmethod
    def _branches_not_blank(cls, value: list[str]) -> list[str]:
        if any(not b.strip() for b in value):
            raise ValueError("branch names cannot be blank")
        return value


def load_settings(root: Path | None = None) -> ContextSettings:
    """Load settings from the nearest config file, or defaults if none exists.

    Args:
        root: Directory holding .ghcontext/config.toml. If None, search
            upward from the working directory.

    Raises:
        ConfigError: If the config file is unreadable or invalid.
    """
    if root is None:
        root = find_config_root()

    data: dict = {}
    if root is not None:
        config_path = get_config_path(root)
        if config_path.exists():
            try:
                data = read_raw_toml(config_path)
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.error("settings.load_failed", path=str(config_path), error=str(e))
                raise ConfigError(f"Failed to read {config_path}: {e}") from e

    try:
        return ContextSettings(**data)
    except ValidationError as e:
        logger.error("settings.validation_failed", error=str(e))
        raise ConfigError(f"Invalid configuration: {e}") from e


def write_default_config(root: Path, *, force: bool = False) -> Path:
    """Write a config file populated with the default settings.

    Raises:
        ConfigError: If the file already exists and force is False.
    """
    config_path = get_config_path(root)
    if config_path.exists() and not force:
        raise ConfigError(f"Config already exists: {config_path}")

    write_raw_toml(ContextSettings.model_construct().model_dump(), config_path)
    logger.info("settings.written", path=str(config_path))
    return config_path
