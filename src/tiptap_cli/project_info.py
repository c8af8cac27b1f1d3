"""Project detection - framework, layout and TypeScript path aliases."""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tiptap_cli.frameworks import Framework

logger = logging.getLogger(__name__)

# Either a JSON string (kept) or a comment / trailing comma (dropped).
_JSONC_NOISE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/|,(?=\s*[}\]])', re.DOTALL)


def load_jsonc(path: Path) -> Any:
    """Load a JSON file that may contain comments and trailing commas."""
    text = path.read_text(encoding="utf-8")
    cleaned = _JSONC_NOISE.sub(lambda m: m.group(0) if m.group(0).startswith('"') else "", text)
    return json.loads(cleaned)


def read_package_json(cwd: Path) -> dict[str, Any] | None:
    """Return the parsed ``package.json`` in *cwd*, or ``None``."""
    package_json = cwd / "package.json"
    if not package_json.is_file():
        return None
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read {package_json}: {e}")
        return None
    return data if isinstance(data, dict) else None


@dataclass
class TsConfig:
    """The ``compilerOptions.paths`` mapping of a tsconfig/jsconfig file."""

    config_path: Path
    base_url: Path
    paths: dict[str, list[str]] = field(default_factory=dict)


def _read_compiler_options(config_path: Path, seen: set[Path]) -> tuple[dict[str, Any], Path]:
    """Read compilerOptions, following relative ``extends`` chains.

    Returns the merged options and the directory ``paths`` are relative to
    when no ``baseUrl`` is set.
    """
    seen.add(config_path)
    data = load_jsonc(config_path)
    options: dict[str, Any] = {}
    paths_root = config_path.parent

    extends = data.get("extends")
    if isinstance(extends, str) and extends.startswith("."):
        parent = (config_path.parent / extends).resolve()
        if parent.suffix != ".json":
            parent = parent.with_suffix(".json")
        if parent.is_file() and parent not in seen:
            parent_options, paths_root = _read_compiler_options(parent, seen)
            options.update(parent_options)

    own = data.get("compilerOptions") or {}
    if "baseUrl" in own:
        own = {**own, "baseUrl": str((config_path.parent / own["baseUrl"]).resolve())}
    if "paths" in own:
        paths_root = config_path.parent
    options.update(own)

    if not options.get("paths"):
        for reference in data.get("references") or []:
            ref_path = (config_path.parent / reference.get("path", "")).resolve()
            if ref_path.is_dir():
                ref_path = ref_path / "tsconfig.json"
            if not ref_path.is_file() or ref_path in seen:
                continue
            ref_options, ref_root = _read_compiler_options(ref_path, seen)
            if ref_options.get("paths"):
                options.setdefault("baseUrl", ref_options.get("baseUrl"))
                options["paths"] = ref_options["paths"]
                paths_root = ref_root
                break

    return options, paths_root


def load_tsconfig(cwd: Path) -> TsConfig | None:
    """Load ``tsconfig.json`` (or ``jsconfig.json``) from *cwd*.

    Returns ``None`` when neither file exists or the file cannot be parsed.
    """
    for name in ("tsconfig.json", "jsconfig.json"):
        config_path = cwd / name
        if not config_path.is_file():
            continue
        try:
            options, paths_root = _read_compiler_options(config_path.resolve(), set())
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Failed to parse {config_path}: {e}")
            return None
        base_url = Path(options["baseUrl"]) if options.get("baseUrl") else paths_root
        paths = {k: list(v) for k, v in (options.get("paths") or {}).items()}
        return TsConfig(config_path=config_path, base_url=base_url, paths=paths)
    return None


def resolve_import(alias: str, tsconfig: TsConfig) -> Path | None:
    """Resolve an import alias (e.g. ``@/components``) to a directory."""
    for pattern, targets in tsconfig.paths.items():
        if not targets:
            continue
        if pattern.endswith("/*"):
            prefix = pattern[:-2]
            if alias != prefix and not alias.startswith(prefix + "/"):
                continue
            rest = alias[len(prefix) :].lstrip("/")
            target = targets[0].replace("*", rest)
        elif pattern == alias:
            target = targets[0]
        else:
            continue
        return Path(os.path.normpath(tsconfig.base_url / target))
    return None


def get_tsconfig_alias_prefix(cwd: Path) -> str | None:
    """Return the import alias prefix that points at the project source root."""
    tsconfig = load_tsconfig(cwd)
    if tsconfig is None or not tsconfig.paths:
        return None

    for alias, targets in tsconfig.paths.items():
        if any(t in ("./*", "./src/*", "./app/*", "./resources/js/*") for t in targets):
            return alias.removesuffix("/*")

    return next(iter(tsconfig.paths)).removesuffix("/*")


def is_typescript_project(cwd: Path) -> bool:
    return any(cwd.glob("tsconfig.*"))


@dataclass
class ProjectInfo:
    """What was detected about a consumer project."""

    framework: Framework
    is_src_dir: bool
    is_rsc: bool
    is_tsx: bool
    alias_prefix: str | None


def _root_files(cwd: Path) -> list[str]:
    if not cwd.is_dir():
        return []
    return [p.name for p in cwd.iterdir() if p.is_file()]


def get_project_info(cwd: Path) -> ProjectInfo:
    """Detect the framework and conventions used by the project at *cwd*."""
    files = _root_files(cwd)
    is_src_dir = (cwd / "src").is_dir()
    package_json = read_package_json(cwd) or {}
    dependencies = list((package_json.get("dependencies") or {}).keys())
    dev_dependencies = list((package_json.get("devDependencies") or {}).keys())

    info = ProjectInfo(
        framework=Framework.MANUAL,
        is_src_dir=is_src_dir,
        is_rsc=False,
        is_tsx=is_typescript_project(cwd),
        alias_prefix=get_tsconfig_alias_prefix(cwd),
    )

    def has(prefix: str) -> bool:
        return any(name.startswith(prefix) for name in files)

    if has("next.config."):
        is_using_app_dir = (cwd / ("src/app" if is_src_dir else "app")).is_dir()
        info.framework = Framework.NEXT_APP if is_using_app_dir else Framework.NEXT_PAGES
        info.is_rsc = is_using_app_dir
    elif has("astro.config."):
        info.framework = Framework.ASTRO
    elif has("gatsby-config."):
        info.framework = Framework.GATSBY
    elif "composer.json" in files:
        info.framework = Framework.LARAVEL
    elif any(dep.startswith("@remix-run/") for dep in dependencies):
        info.framework = Framework.REMIX
    elif has("app.config.") and any(
        dep.startswith("@tanstack/start") for dep in dependencies + dev_dependencies
    ):
        info.framework = Framework.TANSTACK_START
    elif has("react-router.config."):
        info.framework = Framework.REACT_ROUTER
    elif has("vite.config."):
        # Remix templates also ship a vite config; they were caught above.
        info.framework = Framework.VITE

    logger.debug(f"Detected project info for {cwd}: {info}")
    return info
