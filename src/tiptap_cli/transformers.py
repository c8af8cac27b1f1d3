"""Text-level source transforms applied before files are written.

Each transformer takes the file content and a ``TransformContext`` and returns
the new content. They operate on raw text with regular expressions; nothing
outside this module depends on how the rewriting is done.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from tiptap_cli.frameworks import Framework
from tiptap_cli.models import Config

logger = logging.getLogger(__name__)

REGISTRY_IMPORT_PREFIX = "@/registry/"

# Module specifiers in import/export/require/dynamic import statements.
_SPECIFIER = re.compile(
    r"""(?P<lead>\bfrom\s+|\bimport\s+|\bimport\s*\(\s*|\brequire\s*\(\s*)"""
    r"""(?P<quote>["'])(?P<spec>[^"'\n]+)(?P=quote)"""
)
_USE_CLIENT = re.compile(r"""^\s*["']use client["'];?[ \t]*\r?\n?""")
_NEXT_PUBLIC_ENV = re.compile(r"process\.env\.NEXT_PUBLIC_([A-Za-z0-9_]+)")
_PROCESS_ENV = re.compile(r"process\.env\.([A-Za-z0-9_]+)")

_TEMPLATE_COMPONENTS = re.compile(r"@/registry/tiptap-templates/([^/]+)/components/")
_TEMPLATE_OTHER = re.compile(r"@/registry/tiptap-templates/([^/]+)/(?!components/)")
_REGISTRY_FALLBACK = re.compile(r"^@/registry/[^/]+(?:/.*/)?")

# Registry directory -> alias attribute. Order matters: longer names first
# where one is a prefix of another.
_REGISTRY_ALIASES: tuple[tuple[str, str], ...] = (
    ("components", "components"),
    ("contexts", "contexts"),
    ("tiptap-extension", "tiptap_extensions"),
    ("hooks", "hooks"),
    ("tiptap-icons", "tiptap_icons"),
    ("lib", "lib"),
    ("tiptap-node", "tiptap_nodes"),
    ("tiptap-ui-primitive", "tiptap_ui_primitives"),
    ("tiptap-ui-utils", "tiptap_ui_utils"),
    ("tiptap-ui", "tiptap_ui"),
    ("styles", "styles"),
)


@dataclass
class TransformContext:
    """What a transformer knows about the file being written."""

    filename: str
    config: Config
    framework: Framework | None = None


class Transformer(Protocol):
    def __call__(self, content: str, context: TransformContext) -> str: ...


def update_import_alias(module_specifier: str, config: Config) -> str:
    """Rewrite one module specifier from registry layout to project aliases."""
    aliases = config.aliases

    if not module_specifier.startswith(REGISTRY_IMPORT_PREFIX):
        root = aliases.components.split("/")[0]
        return re.sub(r"^@/", f"{root}/", module_specifier)

    template_root = f"{aliases.components}/tiptap-templates/"
    if _TEMPLATE_COMPONENTS.search(module_specifier):
        return _TEMPLATE_COMPONENTS.sub(lambda m: f"{template_root}{m.group(1)}/", module_specifier)
    if _TEMPLATE_OTHER.search(module_specifier):
        return _TEMPLATE_OTHER.sub(lambda m: f"{template_root}{m.group(1)}/", module_specifier)

    for directory, attribute in _REGISTRY_ALIASES:
        alias = getattr(aliases, attribute)
        needle = f"{REGISTRY_IMPORT_PREFIX}{directory}"
        if alias and needle in module_specifier:
            return module_specifier.replace(needle, alias, 1)

    return _REGISTRY_FALLBACK.sub(lambda _: aliases.components + "/", module_specifier)


def transform_import(content: str, context: TransformContext) -> str:
    """Rewrite ``@/`` and ``@/registry/`` imports to the configured aliases."""

    def replace(match: re.Match[str]) -> str:
        spec = match.group("spec")
        if not spec.startswith("@/"):
            return match.group(0)
        quote = match.group("quote")
        return f"{match.group('lead')}{quote}{update_import_alias(spec, context.config)}{quote}"

    return _SPECIFIER.sub(replace, content)


def transform_rsc(content: str, context: TransformContext) -> str:
    """Drop a leading ``"use client"`` directive outside React Server Component projects."""
    if context.config.rsc:
        return content
    return _USE_CLIENT.sub("", content, count=1)


def transform_env_vars(content: str, context: TransformContext) -> str:
    """Use ``import.meta.env`` instead of ``process.env`` in Vite projects."""
    if context.framework != Framework.VITE:
        return content
    content = _NEXT_PUBLIC_ENV.sub(r"import.meta.env.VITE_\1", content)
    return _PROCESS_ENV.sub(r"import.meta.env.\1", content)


DEFAULT_TRANSFORMERS: tuple[Transformer, ...] = (
    transform_import,
    transform_rsc,
    transform_env_vars,
)


def transform(
    content: str,
    context: TransformContext,
    transformers: Sequence[Transformer] = DEFAULT_TRANSFORMERS,
) -> str:
    """Run *content* through each transformer in order."""
    for transformer in transformers:
        content = transformer(content, context)
    return content
