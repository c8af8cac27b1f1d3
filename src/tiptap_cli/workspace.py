"""Installing components, into the current package or across a workspace.

When the ``tiptap_ui`` alias points into another package of a monorepo, UI
items (and the items UI items depend on) are installed into that package using
its own configuration, and reported relative to the shared workspace root.
"""

import logging
import os
from pathlib import Path

from tiptap_cli.config import find_common_root, find_package_root, get_workspace_config
from tiptap_cli.context import AddContext
from tiptap_cli.errors import RegistryError
from tiptap_cli.models import Config, FileError, FileOperationResult, RegistryItemType
from tiptap_cli.process import CommandFailure
from tiptap_cli.project_info import get_project_info
from tiptap_cli.registry import REGISTRY_TYPE_ALIASES
from tiptap_cli.resolver import (
    filter_dev_dependencies_by_framework,
    get_registry_parent_map,
    resolve_items_tree,
    resolve_registry_items,
)
from tiptap_cli.updater import update_files

logger = logging.getLogger(__name__)


async def add_components(
    names: list[str],
    config: Config,
    ctx: AddContext,
    *,
    overwrite: bool = False,
    silent: bool = False,
) -> FileOperationResult:
    """Resolve *names* against the registry and install them."""
    workspace_config = get_workspace_config(config)
    ui_config = workspace_config.get("tiptap_ui")

    if ui_config is not None and ui_config.resolved_paths.cwd != config.resolved_paths.cwd:
        logger.info(f"Installing into workspace package {ui_config.resolved_paths.cwd}")
        return await add_workspace_components(
            names, config, workspace_config, ctx, overwrite=overwrite, silent=silent
        )

    return await add_project_components(names, config, ctx, overwrite=overwrite, silent=silent)


async def add_project_components(
    names: list[str],
    config: Config,
    ctx: AddContext,
    *,
    overwrite: bool = False,
    silent: bool = False,
) -> FileOperationResult:
    reporter = ctx.reporter.muted() if silent else ctx.reporter
    cwd = config.resolved_paths.cwd
    project_info = get_project_info(cwd)

    with reporter.status("Checking registry."):
        tree = await resolve_items_tree(names, ctx.registry, project_info.framework)
    reporter.success("Checking registry.")

    if tree.dependencies:
        with reporter.status("Installing dependencies."):
            ctx.installer.install(tree.dependencies, cwd=cwd)
    if tree.dev_dependencies:
        with reporter.status("Installing development dependencies."):
            ctx.installer.install(tree.dev_dependencies, cwd=cwd, dev=True)

    return update_files(
        tree.files,
        config,
        prompter=ctx.prompter,
        reporter=reporter,
        overwrite=overwrite,
        silent=silent,
        project_info=project_info,
    )


def _relative_to_workspace(files: list[str], package_root: Path, workspace_root: Path) -> list[str]:
    return [Path(os.path.relpath(package_root / f, workspace_root)).as_posix() for f in files]


async def add_workspace_components(
    names: list[str],
    config: Config,
    workspace_config: dict[str, Config],
    ctx: AddContext,
    *,
    overwrite: bool = False,
    silent: bool = False,
) -> FileOperationResult:
    reporter = ctx.reporter.muted() if silent else ctx.reporter

    with reporter.status("Checking registry."):
        resolved = await resolve_registry_items(names, ctx.registry)
    payload = resolved.ordered_items
    if not payload:
        raise RegistryError("Failed to fetch components from registry.")
    reporter.success("Checking registry.")

    parent_map = get_registry_parent_map(payload)
    ui_config = workspace_config.get("tiptap_ui", config)
    result = FileOperationResult()

    for component in payload:
        if component.type not in REGISTRY_TYPE_ALIASES:
            logger.debug(f"Skipping {component.name}: {component.type} has no install location")
            continue

        parent = parent_map.get(component.name)
        is_ui = component.type == RegistryItemType.UI or (
            parent is not None and parent.type == RegistryItemType.UI
        )
        target_config = ui_config if is_ui else config
        target_cwd = target_config.resolved_paths.cwd

        workspace_root = find_common_root(
            config.resolved_paths.cwd, target_config.resolved_paths.tiptap_ui
        )
        package_root = find_package_root(workspace_root, target_cwd) or target_cwd
        project_info = get_project_info(target_cwd)
        dev_dependencies = filter_dev_dependencies_by_framework(
            component.dev_dependencies, project_info.framework
        )

        try:
            ctx.installer.install(component.dependencies, cwd=target_cwd)
            ctx.installer.install(dev_dependencies, cwd=target_cwd, dev=True)
        except CommandFailure as e:
            files = FileOperationResult(errors=[FileError(component.name, str(e))])
        else:
            files = update_files(
                component.files,
                target_config,
                prompter=ctx.prompter,
                overwrite=overwrite,
                silent=True,
                project_info=project_info,
            )

        if files.errors:
            reporter.error(f"Encountered {len(files.errors)} errors:")
            for file_error in files.errors:
                reporter.line(f"  - [red]{file_error.file}: {file_error.error}[/red]")
            result.errors.extend(files.errors)

        for bucket in ("files_created", "files_updated", "files_skipped"):
            getattr(result, bucket).extend(
                _relative_to_workspace(getattr(files, bucket), package_root, workspace_root)
            )

    result.sort()
    reporter.success("Installing components.")
    reporter.file_result(result, show_errors=False)
    return result
