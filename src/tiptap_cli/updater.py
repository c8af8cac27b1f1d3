"""File writer - places, transforms and writes registry files.

Files are processed one at a time. A failure on one file is recorded in the
result and processing continues with the next; nothing is rolled back.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from tiptap_cli.models import Config, FileError, FileOperationResult, RegistryFile
from tiptap_cli.placement import PlacementContext, resolve_file_path
from tiptap_cli.project_info import ProjectInfo, get_project_info
from tiptap_cli.prompts import Prompter
from tiptap_cli.reporter import Reporter
from tiptap_cli.transformers import DEFAULT_TRANSFORMERS, TransformContext, Transformer, transform

logger = logging.getLogger(__name__)


def normalize_content(content: str) -> str:
    """Content as compared against an existing file."""
    return content.replace("\r\n", "\n").strip()


def _relative(path: Path, cwd: Path) -> str:
    return Path(os.path.relpath(path, cwd)).as_posix()


def update_files(
    files: Sequence[RegistryFile],
    config: Config,
    *,
    prompter: Prompter | None = None,
    reporter: Reporter | None = None,
    overwrite: bool = False,
    silent: bool = False,
    transformers: Sequence[Transformer] = DEFAULT_TRANSFORMERS,
    project_info: ProjectInfo | None = None,
) -> FileOperationResult:
    """Write *files* into the project described by *config*.

    Existing files with identical (normalized) content are skipped silently.
    Existing files with different content are only replaced when *overwrite*
    is set or the prompter confirms; without a prompter they are skipped.
    """
    result = FileOperationResult()
    if not files:
        return result

    cwd = config.resolved_paths.cwd
    info = project_info or get_project_info(cwd)

    for file in files:
        if not file.content:
            logger.debug(f"Skipping {file.path}: no content")
            continue

        try:
            context = PlacementContext(is_src_dir=info.is_src_dir, framework=info.framework)
            file_path = resolve_file_path(file, config, context)
        except Exception as e:
            result.errors.append(FileError(file.path, f"Failed to resolve file path: {e}"))
            continue

        if file_path is None:
            continue

        try:
            content = transform(
                file.content,
                TransformContext(filename=file.path, config=config, framework=info.framework),
                transformers,
            )
        except Exception as e:
            result.errors.append(FileError(str(file_path), f"Failed to transform content: {e}"))
            continue

        relative_path = _relative(file_path, cwd)
        existing = file_path.exists()

        if existing:
            try:
                existing_content = file_path.read_text(encoding="utf-8")
            except (OSError, ValueError) as e:
                result.errors.append(
                    FileError(str(file_path), f"Failed to read or normalize existing file: {e}")
                )
                continue

            if normalize_content(existing_content) == normalize_content(content):
                logger.debug(f"{relative_path} is up to date")
                result.files_skipped.append(relative_path)
                continue

            if not overwrite:
                message = f"The file {file_path.name} already exists. Would you like to overwrite?"
                if prompter is None or not prompter.confirm(message, default=False):
                    result.files_skipped.append(relative_path)
                    continue

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        except (OSError, ValueError) as e:
            result.errors.append(FileError(str(file_path), f"Failed to write file: {e}"))
            continue

        logger.debug(f"Wrote {file_path}")
        if existing:
            result.files_updated.append(relative_path)
        else:
            result.files_created.append(relative_path)

    result.sort()
    if reporter is not None and not silent:
        reporter.file_result(result)
    return result
