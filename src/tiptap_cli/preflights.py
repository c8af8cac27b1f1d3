"""Checks run before ``init`` and ``add`` touch a project."""

import logging
from pathlib import Path

from tiptap_cli.config import CONFIG_FILE_NAME, get_config
from tiptap_cli.errors import ConfigError
from tiptap_cli.frameworks import Framework
from tiptap_cli.models import Config
from tiptap_cli.project_info import ProjectInfo, get_project_info

logger = logging.getLogger(__name__)


def is_missing_project(cwd: Path) -> bool:
    """A directory without ``package.json`` counts as an empty project."""
    return not cwd.is_dir() or not (cwd / "package.json").is_file()


def preflight_add(cwd: Path) -> Config | None:
    """Load the config for ``add``; ``None`` when there is no project at *cwd*."""
    if is_missing_project(cwd):
        return None

    try:
        return get_config(cwd)
    except ConfigError as e:
        raise ConfigError(
            f"{e}\nBefore you can add components, you must create a valid "
            f"{CONFIG_FILE_NAME} file by running the init command."
        ) from e


def preflight_init(cwd: Path) -> ProjectInfo | None:
    """Verify framework and import alias; ``None`` when there is no project."""
    if is_missing_project(cwd):
        return None

    info = get_project_info(cwd)
    if info.framework == Framework.MANUAL:
        raise ConfigError(
            f"We could not detect a supported framework at {cwd}.\n"
            f"Visit {info.framework.installation_url} to manually configure your project.\n"
            "Once configured, you can use the cli to add components."
        )

    if not info.alias_prefix:
        raise ConfigError(
            "No import alias found in your tsconfig.json file.\n"
            f"Visit {info.framework.installation_url} to learn how to set an import alias."
        )

    logger.debug(f"Verified framework {info.framework.label} at {cwd}")
    return info
