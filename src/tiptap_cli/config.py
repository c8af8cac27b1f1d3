"""Configuration resolver - ``components.json`` and alias path resolution.

Loads the consumer project's ``components.json``, fills in default aliases and
resolves every alias to an absolute directory through the project's
``tsconfig.json``/``jsconfig.json`` path mapping. Also detects monorepo-style
workspaces where an alias points into a different package.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tiptap_cli.errors import ConfigError
from tiptap_cli.models import ALIAS_KEYS, Aliases, Config, RawConfig, ResolvedPaths
from tiptap_cli.project_info import (
    ProjectInfo,
    TsConfig,
    get_project_info,
    load_tsconfig,
    resolve_import,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "components.json"

DEFAULT_LIB = "@/lib"

# Directories skipped when searching for workspace package roots.
_PACKAGE_SEARCH_IGNORED = frozenset({"node_modules", "dist", "build", "public"})
_PACKAGE_SEARCH_DEPTH = 3


def get_default_aliases(prefix: str = "@") -> Aliases:
    """Return the default alias set rooted at *prefix*."""
    return Aliases(
        components=f"{prefix}/components",
        contexts=f"{prefix}/contexts",
        hooks=f"{prefix}/hooks",
        tiptap_icons=f"{prefix}/components/tiptap-icons",
        lib=f"{prefix}/lib",
        tiptap_extensions=f"{prefix}/components/tiptap-extension",
        tiptap_nodes=f"{prefix}/components/tiptap-node",
        tiptap_ui=f"{prefix}/components/tiptap-ui",
        tiptap_ui_primitives=f"{prefix}/components/tiptap-ui-primitive",
        tiptap_ui_utils=f"{prefix}/components/tiptap-ui-utils",
        styles=f"{prefix}/styles",
    )


def _fill_default_aliases(aliases: Aliases) -> Aliases:
    defaults = get_default_aliases()
    filled = {key: getattr(aliases, key) or getattr(defaults, key) for key in ALIAS_KEYS}
    return Aliases(**filled)


def get_config_path(cwd: Path) -> Path:
    return cwd / CONFIG_FILE_NAME


def read_raw_config(cwd: Path) -> RawConfig | None:
    """Parse ``components.json`` in *cwd*.

    Returns ``None`` if the file does not exist. Raises ``ConfigError`` if it
    exists but is not valid.
    """
    config_path = get_config_path(cwd)
    if not config_path.exists():
        return None

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return RawConfig.model_validate(data)
    except ValueError as e:
        # ValidationError subclasses ValueError.
        raise ConfigError(
            f"An invalid {CONFIG_FILE_NAME} file was found at {cwd}.\n{e}\n"
            "Run the 'init' command to create a valid configuration."
        ) from e


def write_raw_config(cwd: Path, config: RawConfig) -> Path:
    """Persist *config* to ``components.json`` and return the path written."""
    config_path = get_config_path(cwd)
    config_path.write_text(json.dumps(config.to_json_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug(f"Wrote {config_path}")
    return config_path


def to_raw_config(config: Config) -> RawConfig:
    return RawConfig(rsc=config.rsc, tsx=config.tsx, aliases=config.aliases)


def get_config(cwd: Path) -> Config:
    """Load and resolve the configuration for the project at *cwd*.

    Falls back to detected defaults when there is no ``components.json``.
    """
    raw = read_raw_config(cwd)
    if raw is None:
        info = get_project_info(cwd)
        raw = RawConfig(rsc=info.is_rsc, tsx=info.is_tsx, aliases=get_default_aliases())
    else:
        raw = RawConfig(rsc=raw.rsc, tsx=raw.tsx, aliases=_fill_default_aliases(raw.aliases))

    return resolve_config_paths(cwd, raw)


def _resolve_or_fail(alias: str, tsconfig: TsConfig) -> Path:
    resolved = resolve_import(alias, tsconfig)
    if resolved is None:
        raise ConfigError(
            f"Could not resolve the import alias '{alias}' using {tsconfig.config_path.name}. "
            "Make sure compilerOptions.paths maps it to a directory."
        )
    return resolved


def resolve_config_paths(cwd: Path, config: RawConfig) -> Config:
    """Resolve every alias of *config* to an absolute directory under *cwd*."""
    tsconfig = load_tsconfig(cwd)
    if tsconfig is None:
        kind = "tsconfig" if config.tsx else "jsconfig"
        raise ConfigError(f"Failed to load {kind}.json in {cwd}.")

    aliases = config.aliases
    components = _resolve_or_fail(aliases.components, tsconfig)

    def resolve(alias: str | None, fallback: Path) -> Path:
        return _resolve_or_fail(alias, tsconfig) if alias else fallback

    lib_fallback = resolve_import(DEFAULT_LIB, tsconfig)
    resolved: dict[str, Any] = {
        "cwd": cwd,
        "components": components,
        "contexts": resolve(aliases.contexts, (components.parent / "contexts")),
        "hooks": resolve(aliases.hooks, components.parent / "hooks"),
        "tiptap_icons": resolve(aliases.tiptap_icons, components / "tiptap-icons"),
        "lib": resolve(aliases.lib, (lib_fallback or cwd).parent),
        "tiptap_extensions": resolve(aliases.tiptap_extensions, components / "tiptap-extension"),
        "tiptap_nodes": resolve(aliases.tiptap_nodes, components / "tiptap-node"),
        "tiptap_ui": resolve(aliases.tiptap_ui, components / "tiptap-ui"),
        "tiptap_ui_primitives": resolve(
            aliases.tiptap_ui_primitives, components / "tiptap-ui-primitive"
        ),
        "tiptap_ui_utils": resolve(aliases.tiptap_ui_utils, components / "tiptap-ui-utils"),
        "styles": resolve(aliases.styles, cwd / "styles"),
    }

    try:
        return Config(
            rsc=config.rsc,
            tsx=config.tsx,
            aliases=aliases,
            resolved_paths=ResolvedPaths(**resolved),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration for {cwd}:\n{e}") from e


def get_project_config(cwd: Path, project_info: ProjectInfo | None = None) -> Config | None:
    """Return the existing config, or one derived from the detected project.

    Returns ``None`` when there is no ``components.json`` and no alias prefix
    could be detected.
    """
    raw = read_raw_config(cwd)
    if raw is not None:
        return get_config(cwd)

    info = project_info or get_project_info(cwd)
    if not info.alias_prefix:
        return None

    derived = RawConfig(
        rsc=info.is_rsc,
        tsx=info.is_tsx,
        aliases=get_default_aliases(info.alias_prefix),
    )
    return resolve_config_paths(cwd, derived)


def find_common_root(cwd: Path, resolved_path: Path) -> Path:
    """Return the deepest directory shared by *cwd* and *resolved_path*."""
    return Path(os.path.commonpath([cwd, resolved_path]))


def _iter_package_dirs(root: Path, depth: int = _PACKAGE_SEARCH_DEPTH) -> list[Path]:
    """Directories (relative to *root*) containing a ``package.json``."""
    found: list[Path] = []
    stack: list[tuple[Path, int]] = [(root, 0)]
    while stack:
        current, level = stack.pop()
        if (current / "package.json").is_file():
            found.append(current.relative_to(root))
        if level >= depth:
            continue
        try:
            children = sorted(p for p in current.iterdir() if p.is_dir())
        except OSError:
            continue
        for child in reversed(children):
            if child.name in _PACKAGE_SEARCH_IGNORED or child.name.startswith("."):
                continue
            stack.append((child, level + 1))
    return found


def find_package_root(cwd: Path, resolved_path: Path) -> Path | None:
    """Find the package that owns *resolved_path*, searched from the common root.

    Only packages other than the one at the common root itself are considered,
    so an alias pointing inside the consumer's own package yields ``None``.
    """
    common_root = find_common_root(cwd, resolved_path)
    relative = resolved_path.relative_to(common_root)

    matches = [
        pkg_dir
        for pkg_dir in _iter_package_dirs(common_root)
        if pkg_dir != Path(".") and relative.is_relative_to(pkg_dir)
    ]
    if not matches:
        return None

    # Nearest package.json wins.
    nearest = max(matches, key=lambda p: len(p.parts))
    return common_root / nearest


def get_workspace_config(config: Config) -> dict[str, Config]:
    """Map each alias key to the config of the package its directory lives in."""
    resolved_aliases: dict[str, Config] = {}
    cwd = config.resolved_paths.cwd

    for key in ALIAS_KEYS:
        resolved_path = getattr(config.resolved_paths, key)
        package_root = find_package_root(cwd, resolved_path)

        if package_root is None or package_root == cwd:
            resolved_aliases[key] = config
            continue

        logger.debug(f"Alias '{key}' resolves into workspace package {package_root}")
        resolved_aliases[key] = get_config(package_root)

    return resolved_aliases
