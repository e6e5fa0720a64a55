"""Configuration file parsing utilities."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vpm.config.schemas import Settings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/vpm/config.yaml")
CONFIG_ENV_VAR = "VPM_CONFIG"
PLUGINS_DIR_ENV_VAR = "VPM_PLUGINS_DIR"
DEPRECATED_PLUGINS_DIR_ENV_VAR = "VPM_BUNDLE_DIR"


class ConfigError(Exception):
    """Error loading or parsing configuration."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"File not found: {path}", path)

    try:
        with open(path, encoding="utf-8") as f:
            result = yaml.safe_load(f)
            if result is None:
                return {}
            if not isinstance(result, dict):
                raise ConfigError(f"YAML file must contain a mapping: {path}", path)
            return result
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Get the config file path, honoring VPM_CONFIG."""
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    return config_path.expanduser()


def load_settings(config_path: Path | None = None) -> Settings:
    """Build settings from the config file and the environment.

    The config file is optional; a missing file means defaults. The
    deprecated VPM_BUNDLE_DIR variable is mapped onto plugins_dir when
    VPM_PLUGINS_DIR is not set.

    Args:
        config_path: Explicit config file, or None for VPM_CONFIG / default

    Returns:
        Validated Settings

    Raises:
        ConfigError: If the config file or any value is invalid
    """
    path = resolve_config_path(config_path)

    data: dict[str, Any] = {}
    if path.exists():
        logger.debug("Loading config file %s", path)
        data = load_yaml(path)
    else:
        logger.debug("No config file at %s, using defaults", path)

    deprecated_dir = os.environ.get(DEPRECATED_PLUGINS_DIR_ENV_VAR)
    if deprecated_dir:
        logger.warning(
            "%s is deprecated, use %s instead",
            DEPRECATED_PLUGINS_DIR_ENV_VAR,
            PLUGINS_DIR_ENV_VAR,
        )
        if not os.environ.get(PLUGINS_DIR_ENV_VAR):
            data["plugins_dir"] = deprecated_dir

    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", path) from e

    logger.debug(
        "Settings: editor_root=%s plugins_root=%s manifest=%s",
        settings.editor_root,
        settings.plugins_root,
        settings.manifest_path,
    )
    return settings
