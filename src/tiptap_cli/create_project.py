"""Bootstrapping new Next.js and Vite projects."""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from tiptap_cli.errors import ProjectCreationError
from tiptap_cli.frameworks import NewProjectFramework
from tiptap_cli.package_manager import PackageManager
from tiptap_cli.process import CommandFailure, CommandRunner, SubprocessRunner
from tiptap_cli.project_info import load_jsonc
from tiptap_cli.template_engine import render_readme

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "my-app"
NEXT_VERSION = "latest"
MAX_PROJECT_NAME_LENGTH = 128

_VITE_IMPORT = "import { defineConfig } from 'vite'"
_VITE_PLUGINS = "plugins: [react()]"
_VITE_ALIAS = """plugins: [react()],
  resolve: {
    alias: {
      '@': path.resolve(__dirname, './src')
    }
  }"""


def validate_project_name(name: str) -> str | None:
    """Return an error message for an unusable project name, else ``None``."""
    if not name.strip():
        return "Name cannot be empty."
    if len(name) > MAX_PROJECT_NAME_LENGTH:
        return f"Name should be less than {MAX_PROJECT_NAME_LENGTH} characters."
    return None


def validate_project_path(cwd: Path, project_name: str) -> Path:
    """Check that *cwd* is writable and the project does not exist yet."""
    if not cwd.is_dir() or not os.access(cwd, os.W_OK):
        raise ProjectCreationError(
            f"The path {cwd} is not writable. It is likely you do not have write "
            f"permissions for this folder or the path {cwd} does not exist."
        )

    project_path = cwd / project_name
    if (project_path / "package.json").exists():
        raise ProjectCreationError(
            f"A project with the name {project_name} already exists. "
            "Please choose a different name and try again."
        )
    return project_path


def next_create_command(
    project_path: Path,
    package_manager: PackageManager,
    *,
    src_dir: bool = False,
    version: str = NEXT_VERSION,
) -> list[str]:
    args = [
        "npx",
        f"create-next-app@{version}",
        str(project_path),
        "--silent",
        "--tailwind",
        "--eslint",
        "--typescript",
        "--app",
        "--src-dir" if src_dir else "--no-src-dir",
        "--no-import-alias",
        f"--use-{package_manager.value}",
    ]
    if version.startswith(("15", "latest", "canary")):
        args.append("--turbopack")
    return args


def vite_create_command(project_name: str) -> list[str]:
    return ["npm", "create", "vite@latest", project_name, "--", "--template", "react-ts"]


def add_tsconfig_path_alias(tsconfig_path: Path) -> bool:
    """Map ``@/*`` to ``./src/*`` in a tsconfig file, if it exists."""
    if not tsconfig_path.exists():
        return False

    data = load_jsonc(tsconfig_path)
    compiler_options = data.get("compilerOptions") or {}
    compiler_options["baseUrl"] = "."
    compiler_options["paths"] = {**(compiler_options.get("paths") or {}), "@/*": ["./src/*"]}
    data["compilerOptions"] = compiler_options

    tsconfig_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return True


def add_vite_path_alias(vite_config_path: Path) -> None:
    """Resolve ``@`` to ``./src`` in ``vite.config.ts``."""
    content = vite_config_path.read_text(encoding="utf-8")
    content = content.replace(_VITE_IMPORT, f"{_VITE_IMPORT}\nimport path from 'path'")
    content = content.replace(_VITE_PLUGINS, _VITE_ALIAS)
    vite_config_path.write_text(content, encoding="utf-8")


def write_readme(
    project_path: Path,
    project_name: str,
    framework: NewProjectFramework,
    package_manager: PackageManager,
) -> None:
    readme_path = project_path / "README.md"
    try:
        readme_path.write_text(
            render_readme(project_name, framework, package_manager), encoding="utf-8"
        )
    except OSError as e:
        logger.warning(f"Could not write {readme_path}: {e}")


class ProjectCreator(Protocol):
    def create(
        self,
        framework: NewProjectFramework,
        project_name: str,
        cwd: Path,
        *,
        package_manager: PackageManager,
        src_dir: bool = False,
    ) -> Path: ...


class SubprocessProjectCreator:
    """Creates projects by running the framework's own generator."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self.runner = runner or SubprocessRunner()

    def create(
        self,
        framework: NewProjectFramework,
        project_name: str,
        cwd: Path,
        *,
        package_manager: PackageManager,
        src_dir: bool = False,
    ) -> Path:
        """Create *project_name* under *cwd* and return its path."""
        error = validate_project_name(project_name)
        if error:
            raise ProjectCreationError(error)
        project_path = validate_project_path(cwd, project_name)

        try:
            match framework:
                case NewProjectFramework.NEXT:
                    self._create_next(project_path, cwd, package_manager, src_dir)
                case NewProjectFramework.VITE:
                    self._create_vite(project_path, project_name, cwd, package_manager)
        except CommandFailure as e:
            raise ProjectCreationError(
                f"Something went wrong creating a new {framework.value} project.\n{e}"
            ) from e

        write_readme(project_path, project_name, framework, package_manager)
        logger.info(f"Created {framework.value} project at {project_path}")
        return project_path

    def _create_next(
        self, project_path: Path, cwd: Path, package_manager: PackageManager, src_dir: bool
    ) -> None:
        args = next_create_command(project_path, package_manager, src_dir=src_dir)
        self.runner.run(args, cwd=cwd)

    def _create_vite(
        self, project_path: Path, project_name: str, cwd: Path, package_manager: PackageManager
    ) -> None:
        self.runner.run(vite_create_command(project_name), cwd=cwd)
        self.runner.run([package_manager.value, "install"], cwd=project_path)

        try:
            add_tsconfig_path_alias(project_path / "tsconfig.json")
            add_tsconfig_path_alias(project_path / "tsconfig.app.json")
            add_vite_path_alias(project_path / "vite.config.ts")
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(
                f"Failed to set up TypeScript path aliases, but project creation succeeded: {e}"
            )
