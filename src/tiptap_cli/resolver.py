"""Dependency graph resolver for registry items.

Walks ``registryDependencies`` edges from the requested names, fetching every
reachable item exactly once, then merges package dependencies across the
resolved set.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tiptap_cli.frameworks import Framework
from tiptap_cli.models import RegistryFile, RegistryItem, ResolvedItemsTree
from tiptap_cli.registry import RegistryClient, is_url, item_name

logger = logging.getLogger(__name__)

INDEX_ITEM = "index"


@dataclass
class ResolvedRegistry:
    """Fetch keys in discovery order and the items fetched for them."""

    keys: list[str] = field(default_factory=list)
    items: dict[str, RegistryItem] = field(default_factory=dict)

    @property
    def ordered_items(self) -> list[RegistryItem]:
        return [self.items[key] for key in self.keys]


def prioritize_index(names: list[str]) -> list[str]:
    """Move the registry index item to the front when it was requested."""
    index_refs = [n for n in names if not is_url(n) and item_name(n) == INDEX_ITEM]
    if not index_refs:
        return list(names)
    return [INDEX_ITEM] + [n for n in names if n not in index_refs]


async def resolve_registry_items(names: list[str], client: RegistryClient) -> ResolvedRegistry:
    """Fetch the named items and everything they transitively require.

    Uses an explicit stack per requested name. A key is marked visited before
    its dependencies are pushed, so cycles terminate and an item reached by
    several paths is fetched once. Any fetch error propagates and aborts the
    whole resolution.
    """
    resolved = ResolvedRegistry()
    visited: set[str] = set()

    for name in prioritize_index(names):
        stack = [client.item_url(name)]
        while stack:
            key = stack.pop()
            if key in visited:
                continue
            visited.add(key)

            item = await client.fetch_item(key)
            resolved.items[key] = item
            resolved.keys.append(key)
            logger.debug(f"Resolved {item.name} ({key})")

            # Reversed so dependencies are visited in declaration order.
            for dependency in reversed(item.registry_dependencies):
                dep_key = client.item_url(dependency)
                if dep_key not in visited:
                    stack.append(dep_key)

    return resolved


def merge_unique(groups: Iterable[Iterable[str]]) -> list[str]:
    """Concatenate *groups*, keeping the first occurrence of each entry."""
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for entry in group:
            if entry not in seen:
                seen.add(entry)
                merged.append(entry)
    return merged


def filter_dev_dependencies_by_framework(
    dev_dependencies: list[str], framework: Framework | None
) -> list[str]:
    """Keep only one of ``sass`` / ``sass-embedded`` when both are requested.

    Vite projects get ``sass-embedded``, Next.js projects get ``sass``. Other
    frameworks are left untouched.
    """
    if "sass" not in dev_dependencies or "sass-embedded" not in dev_dependencies:
        return list(dev_dependencies)

    if framework == Framework.VITE:
        return [dep for dep in dev_dependencies if dep != "sass"]
    if framework is not None and framework.is_next:
        return [dep for dep in dev_dependencies if dep != "sass-embedded"]
    return list(dev_dependencies)


def build_items_tree(
    items: list[RegistryItem], framework: Framework | None = None
) -> ResolvedItemsTree:
    """Merge dependencies and files of already-resolved items."""
    files: list[RegistryFile] = [file for item in items for file in item.files]
    dev_dependencies = merge_unique(item.dev_dependencies for item in items)
    return ResolvedItemsTree(
        dependencies=merge_unique(item.dependencies for item in items),
        dev_dependencies=filter_dev_dependencies_by_framework(dev_dependencies, framework),
        files=files,
    )


async def resolve_items_tree(
    names: list[str], client: RegistryClient, framework: Framework | None = None
) -> ResolvedItemsTree:
    """Resolve *names* and merge the result into a single tree."""
    resolved = await resolve_registry_items(names, client)
    logger.info(f"Resolved {len(resolved.keys)} registry item(s) for {names}")
    return build_items_tree(resolved.ordered_items, framework)


def get_registry_parent_map(items: list[RegistryItem]) -> dict[str, RegistryItem]:
    """Map each registry dependency name to the item that requires it."""
    parents: dict[str, RegistryItem] = {}
    for item in items:
        for dependency in item.registry_dependencies:
            parents[item_name(dependency)] = item
    return parents
