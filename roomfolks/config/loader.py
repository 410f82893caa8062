"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from roomfolks.config.schema import Config
from roomfolks.errors import ConfigError

SECRET_FIELDS = ("password", "api_key", "apiKey")
MASK = "********"


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".roomfolks" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, environment and defaults.

    Values from the file are applied on top of environment variables
    (``ROOMFOLKS_`` prefix, ``__`` for nesting) and defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.

    Raises:
        ConfigError: The file exists but cannot be parsed or validated.
    """
    path = config_path or get_config_path()

    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"config file not found: {path}")
        logger.debug(f"No config file at {path}, using environment and defaults")
        return Config()

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in {path}: {e}") from e

    try:
        config = Config(**data)
    except ValueError as e:
        raise ConfigError(f"invalid configuration in {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file with secure permissions.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(by_alias=True)

    with open(path, "w") as f:
        json.dump(data, f, indent=2)

    # Owner read/write only: the file holds credentials
    os.chmod(path, 0o600)
    logger.debug(f"Config saved with secure permissions: {path}")


def redact(data: Any) -> Any:
    """Return a copy of a dumped config with secret values masked."""
    if isinstance(data, dict):
        return {
            key: (MASK if key in SECRET_FIELDS and value else redact(value))
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data
