"""Package manager detection and dependency installation."""

import logging
import os
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from tiptap_cli.process import CommandRunner, SubprocessRunner
from tiptap_cli.resolver import merge_unique

logger = logging.getLogger(__name__)


class PackageManager(StrEnum):
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


# Lockfile -> package manager, checked in order.
LOCKFILES: tuple[tuple[str, PackageManager], ...] = (
    ("bun.lockb", PackageManager.BUN),
    ("bun.lock", PackageManager.BUN),
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
)


def _from_user_agent(user_agent: str) -> PackageManager | None:
    # e.g. "pnpm/9.1.0 npm/? node/v20.11.0 darwin arm64"
    name = user_agent.split("/", 1)[0].strip()
    try:
        return PackageManager(name)
    except ValueError:
        return None


def get_package_manager(
    cwd: Path, *, default: PackageManager | None = None, with_fallback: bool = True
) -> PackageManager:
    """Detect the package manager used at *cwd*.

    Lockfiles win, then the user agent of the invoking package manager, then
    *default* (if given), then npm.
    """
    for lockfile, manager in LOCKFILES:
        if (cwd / lockfile).exists():
            return manager

    if with_fallback:
        detected = _from_user_agent(os.environ.get("npm_config_user_agent", ""))
        if detected is not None:
            return detected

    return default or PackageManager.NPM


def install_command(
    manager: PackageManager, packages: list[str], *, dev: bool = False
) -> list[str]:
    """Build the command line that adds *packages* to a project."""
    if manager == PackageManager.NPM:
        args = ["npm", "install"]
        if dev:
            args.append("--save-dev")
    else:
        args = [manager.value, "add"]
        if dev:
            args.append("-D")
    return [*args, *packages]


class PackageInstaller(Protocol):
    def install(self, packages: list[str], *, cwd: Path, dev: bool = False) -> None: ...


class SubprocessInstaller:
    """Installs packages by shelling out to the detected package manager."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        package_manager: PackageManager | None = None,
    ) -> None:
        self.runner = runner or SubprocessRunner()
        self.package_manager = package_manager

    def install(self, packages: list[str], *, cwd: Path, dev: bool = False) -> None:
        packages = merge_unique([packages])
        if not packages:
            return

        manager = get_package_manager(cwd, default=self.package_manager)
        args = install_command(manager, packages, dev=dev)
        logger.info(f"Installing {'dev ' if dev else ''}dependencies: {', '.join(packages)}")
        self.runner.run(args, cwd=cwd)
