"""File placement - where each registry file lands in the consumer project."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from tiptap_cli.frameworks import Framework
from tiptap_cli.models import Config, RegistryFile, RegistryItemType

logger = logging.getLogger(__name__)

TEMPLATES_DIR = "tiptap-templates"

_TEMPLATE_PATH = re.compile(rf"{TEMPLATES_DIR}/([^/]+)/(.*)")
_PAGE_SUFFIX = re.compile(r"/page(\.[jt]sx?)$")
_TS_EXTENSION = re.compile(r"\.tsx?$")

# File type -> resolved_paths key used when the file has no explicit target.
TYPE_DIRECTORIES: dict[RegistryItemType, str] = {
    RegistryItemType.UI: "tiptap_ui",
    RegistryItemType.UI_PRIMITIVE: "tiptap_ui_primitives",
    RegistryItemType.EXTENSION: "tiptap_extensions",
    RegistryItemType.NODE: "tiptap_nodes",
    RegistryItemType.ICON: "tiptap_icons",
    RegistryItemType.HOOK: "hooks",
    RegistryItemType.LIB: "lib",
    RegistryItemType.CONTEXT: "contexts",
    RegistryItemType.TEMPLATE: "components",
    RegistryItemType.COMPONENT: "components",
    RegistryItemType.STYLE: "styles",
}

# Framework -> replacement for a leading ``app/`` in page targets.
_PAGE_ROOTS: dict[Framework, str] = {
    Framework.NEXT_PAGES: "pages/",
    Framework.REACT_ROUTER: "app/routes/",
    Framework.LARAVEL: "resources/js/pages/",
}


@dataclass
class PlacementContext:
    """Project facts that influence where files go."""

    is_src_dir: bool = False
    framework: Framework | None = None


def resolve_file_target_directory(file: RegistryFile, config: Config) -> Path:
    """Default directory for *file* based on its type."""
    key = TYPE_DIRECTORIES.get(file.type, "components")
    return getattr(config.resolved_paths, key)


def resolve_page_target(target: str, framework: Framework | None) -> str:
    """Rewrite a Next.js app-router page target for *framework*.

    Returns an empty string when the framework has no page convention.
    """
    if framework is None:
        return ""
    if framework == Framework.NEXT_APP:
        return target

    root = _PAGE_ROOTS.get(framework)
    if root is None:
        return ""

    result = re.sub(r"^app/", root, target)
    return _PAGE_SUFFIX.sub(r"\1", result)


def resolve_nested_file_path(file_path: str, target_dir: str | Path) -> str:
    """Path of *file_path* relative to the directory it is installed into.

    Everything after the first segment equal to the target directory's last
    segment is kept; if there is no such segment only the file name is kept.
    """
    file_segments = str(file_path).strip("/").split("/")
    target_segments = PurePosixPath(Path(target_dir).as_posix()).parts
    last_target_segment = target_segments[-1] if target_segments else ""

    if last_target_segment not in file_segments:
        return file_segments[-1]

    index = file_segments.index(last_target_segment)
    return "/".join(file_segments[index + 1 :])


def coerce_extension(path: Path, tsx: bool) -> Path:
    """Rewrite ``.tsx``/``.ts`` to ``.jsx``/``.js`` for JavaScript projects."""
    if tsx:
        return path
    new_name = _TS_EXTENSION.sub(lambda m: ".jsx" if m.group(0) == ".tsx" else ".js", path.name)
    return path.with_name(new_name)


def _join_project_target(target: str, config: Config, context: PlacementContext) -> Path:
    cwd = config.resolved_paths.cwd
    relative = target.lstrip("/").removeprefix("src/")
    return cwd / "src" / relative if context.is_src_dir else cwd / relative


def _resolve_template_file(file: RegistryFile, config: Config) -> Path | None:
    match = _TEMPLATE_PATH.search(file.path)
    if match is None:
        return None

    template_name, relative_path = match.groups()
    template_dir = config.resolved_paths.components / TEMPLATES_DIR / template_name

    if not file.target and file.type != RegistryItemType.PAGE:
        # Components inside a template sit directly in the template folder.
        return template_dir / relative_path.removeprefix("components/")

    if file.target and "/data/" in file.target:
        return template_dir / "data" / file.target.split("/data/", 1)[1]

    return None


def _resolve_uncoerced(
    file: RegistryFile, config: Config, context: PlacementContext
) -> Path | None:
    if f"{TEMPLATES_DIR}/" in file.path:
        template_path = _resolve_template_file(file, config)
        if template_path is not None:
            return template_path

    if file.target:
        if file.target.startswith("~/"):
            return config.resolved_paths.cwd / file.target.removeprefix("~/")

        target = file.target
        if file.type == RegistryItemType.PAGE:
            target = resolve_page_target(target, context.framework)
            if not target:
                logger.debug(f"No page convention for {context.framework}; skipping {file.path}")
                return None

        return _join_project_target(target, config, context)

    target_dir = resolve_file_target_directory(file, config)
    return target_dir / resolve_nested_file_path(file.path, target_dir)


def resolve_file_path(
    file: RegistryFile, config: Config, context: PlacementContext | None = None
) -> Path | None:
    """Compute the absolute destination of *file*, or ``None`` to skip it."""
    path = _resolve_uncoerced(file, config, context or PlacementContext())
    if path is None:
        return None
    return coerce_extension(path, config.tsx)
