"""
Configuration loader — reads chocosync.yml into a Settings model.

The file is optional for one-off CLI commands and required for
``chocosync apply``.  It reads YAML, validates against Pydantic
schemas, and returns typed settings.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from chocosync.adapters.base import DEFAULT_TIMEOUT
from chocosync.core.models.package import PackageDeclaration

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "chocosync.yml"

# Environment override for the invocation timeout
TIMEOUT_ENV = "CHOCOSYNC_TIMEOUT"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


class Settings(BaseModel):
    """Runtime settings and the declared package state."""

    choco_path: str | None = None
    timeout: int = Field(default=DEFAULT_TIMEOUT, gt=0)
    default_options: str = ""
    packages: list[PackageDeclaration] = Field(default_factory=list)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for chocosync.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to chocosync.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_settings(path: Path | None = None, required: bool = False) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to chocosync.yml. If None, searches upward.
        required: If True, a missing file is an error; otherwise
            defaults are returned.

    Returns:
        Validated Settings (with environment overrides applied).

    Raises:
        ConfigError: If the file is missing (when required) or invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        if required:
            raise ConfigError(
                f"No {CONFIG_FILE} found. Create one or specify --config."
            )
        return _apply_env(Settings())

    if not path.is_file():
        if explicit or required:
            raise ConfigError(f"Config file not found: {path}")
        return _apply_env(Settings())

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded %s with %d package declarations", path, len(settings.packages))
    return _apply_env(settings)


def _apply_env(settings: Settings) -> Settings:
    """Apply environment-variable overrides."""
    raw = os.environ.get(TIMEOUT_ENV)
    if not raw:
        return settings
    try:
        timeout = int(raw)
    except ValueError as e:
        raise ConfigError(f"{TIMEOUT_ENV} must be an integer, got {raw!r}") from e
    if timeout <= 0:
        raise ConfigError(f"{TIMEOUT_ENV} must be positive, got {timeout}")
    return settings.model_copy(update={"timeout": timeout})
