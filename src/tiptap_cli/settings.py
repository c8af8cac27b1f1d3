"""User-level settings for tiptap-cli.

Reads from ~/.config/tiptap-cli/config.yaml. The ``REGISTRY_URL`` environment
variable takes precedence over the file.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from tiptap_cli.package_manager import PackageManager
from tiptap_cli.registry import DEFAULT_REGISTRY_URL, is_url

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "tiptap-cli"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
REGISTRY_URL_ENV = "REGISTRY_URL"

# Keys that map to enum types for validation
_ENUM_FIELDS: dict[str, type[Enum]] = {
    "package_manager": PackageManager,
}


def get_settings_path() -> Path:
    """Return the path to the user settings file."""
    return CONFIG_FILE


def load_settings() -> dict[str, Any]:
    """Load user settings from disk.

    Returns an empty dict if the file doesn't exist or is invalid.
    """
    settings_path = get_settings_path()
    if not settings_path.exists():
        return {}

    try:
        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load user settings from {settings_path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"User settings are not a mapping: {settings_path}")
        return {}

    validated: dict[str, Any] = {}
    for key, value in data.items():
        if key in _ENUM_FIELDS and value is not None:
            try:
                _ENUM_FIELDS[key](value)
            except ValueError:
                valid = [e.value for e in _ENUM_FIELDS[key]]
                logger.warning(
                    f"Invalid value '{value}' for '{key}' in user settings. Valid: {valid}"
                )
                continue
        if key == "registry_url" and not (isinstance(value, str) and is_url(value)):
            logger.warning(f"Ignoring invalid registry_url '{value}' in user settings")
            continue
        validated[key] = value

    return validated


def save_settings(settings: dict[str, Any]) -> Path:
    """Save settings to the user settings file.

    Returns the path written to.
    """
    settings_path = get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    with open(settings_path, "w") as f:
        yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)
    return settings_path


def get_default_settings() -> dict[str, Any]:
    return {
        "registry_url": DEFAULT_REGISTRY_URL,
        "package_manager": None,
    }


def get_registry_url(settings: dict[str, Any] | None = None) -> str:
    """Registry base URL from the environment, the settings file, or the default."""
    env_url = os.environ.get(REGISTRY_URL_ENV)
    if env_url:
        return env_url.rstrip("/")
    if settings is None:
        settings = load_settings()
    return str(settings.get("registry_url") or DEFAULT_REGISTRY_URL).rstrip("/")


def get_preferred_package_manager(settings: dict[str, Any] | None = None) -> PackageManager | None:
    if settings is None:
        settings = load_settings()
    value = settings.get("package_manager")
    return PackageManager(value) if value else None
