"""Tests for the registry dependency resolver."""

import pytest
from conftest import REGISTRY_URL, FakeRegistry

from tiptap_cli.errors import RegistryNotFoundError
from tiptap_cli.frameworks import Framework
from tiptap_cli.models import RegistryItem, RegistryItemType
from tiptap_cli.registry import RegistryClient
from tiptap_cli.resolver import (
    build_items_tree,
    filter_dev_dependencies_by_framework,
    get_registry_parent_map,
    merge_unique,
    prioritize_index,
    resolve_items_tree,
    resolve_registry_items,
)


def _file(path: str, type: str = "registry:ui") -> dict[str, str]:
    return {"path": path, "type": type, "content": f"// {path}\n"}


@pytest.mark.asyncio
class TestResolveRegistryItems:
    """Tests for resolve_registry_items."""

    async def test_diamond_fetches_shared_dependency_once(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """A -> B -> D and A -> C -> D visits depth first, fetching D once."""
        fake_registry.add("a", registryDependencies=["b", "c"])
        fake_registry.add("b", registryDependencies=["d"])
        fake_registry.add("c", registryDependencies=["d"])
        fake_registry.add("d")

        resolved = await resolve_registry_items(["a"], registry_client)

        assert [item.name for item in resolved.ordered_items] == ["a", "b", "d", "c"]
        assert fake_registry.fetched == ["a", "b", "d", "c"]
        assert fake_registry.fetch_count("d") == 1

    async def test_cycle_terminates(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """Mutually dependent items are each fetched once."""
        fake_registry.add("a", registryDependencies=["b"])
        fake_registry.add("b", registryDependencies=["a"])

        resolved = await resolve_registry_items(["a"], registry_client)

        assert [item.name for item in resolved.ordered_items] == ["a", "b"]
        assert fake_registry.fetched == ["a", "b"]

    async def test_requested_item_already_reached_is_not_refetched(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """A name reached as a dependency of an earlier request is skipped later."""
        fake_registry.add("editor", registryDependencies=["button"])
        fake_registry.add("button")

        resolved = await resolve_registry_items(["editor", "button"], registry_client)

        assert [item.name for item in resolved.ordered_items] == ["editor", "button"]
        assert fake_registry.fetch_count("button") == 1

    async def test_name_path_and_url_share_one_fetch(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """Bare name, registry path and full URL resolve to the same item."""
        url = f"{REGISTRY_URL}/api/registry/components/button"
        fake_registry.add("editor", registryDependencies=["components/button.json", url])
        fake_registry.add("button")

        resolved = await resolve_registry_items(["editor", "button"], registry_client)

        assert len(resolved.keys) == 2
        assert fake_registry.fetch_count("button") == 1

    async def test_index_is_resolved_first(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """The index item is moved to the front of the request list."""
        fake_registry.add("button")
        fake_registry.add("index", type="registry:style")

        await resolve_registry_items(["button", "index"], registry_client)

        assert fake_registry.fetched == ["index", "button"]

    async def test_missing_dependency_aborts(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """A failed fetch anywhere in the graph aborts the resolution."""
        fake_registry.add("editor", registryDependencies=["missing", "button"])
        fake_registry.add("button")

        with pytest.raises(RegistryNotFoundError, match="missing"):
            await resolve_registry_items(["editor"], registry_client)

        assert "button" not in fake_registry.fetched


@pytest.mark.asyncio
class TestResolveItemsTree:
    """Tests for resolve_items_tree."""

    async def test_merges_dependencies_and_files(
        self, fake_registry: FakeRegistry, registry_client: RegistryClient
    ) -> None:
        """Dependencies are unioned in first-seen order; files are concatenated."""
        fake_registry.add(
            "editor",
            dependencies=["@tiptap/react", "clsx"],
            registryDependencies=["button"],
            files=[_file("registry/tiptap-ui/editor/editor.tsx")],
        )
        fake_registry.add(
            "button",
            dependencies=["clsx", "@floating-ui/react"],
            devDependencies=["sass", "sass-embedded"],
            files=[_file("registry/tiptap-ui-primitive/button/button.tsx")],
        )

        tree = await resolve_items_tree(["editor"], registry_client, Framework.VITE)

        assert tree.dependencies == ["@tiptap/react", "clsx", "@floating-ui/react"]
        assert tree.dev_dependencies == ["sass-embedded"]
        assert [f.path for f in tree.files] == [
            "registry/tiptap-ui/editor/editor.tsx",
            "registry/tiptap-ui-primitive/button/button.tsx",
        ]


class TestFilterDevDependencies:
    """Tests for filter_dev_dependencies_by_framework."""

    def test_vite_keeps_sass_embedded(self) -> None:
        deps = ["sass", "sass-embedded", "typescript"]
        assert filter_dev_dependencies_by_framework(deps, Framework.VITE) == [
            "sass-embedded",
            "typescript",
        ]

    def test_next_keeps_sass(self) -> None:
        deps = ["sass", "sass-embedded"]
        assert filter_dev_dependencies_by_framework(deps, Framework.NEXT_PAGES) == ["sass"]
        assert filter_dev_dependencies_by_framework(deps, Framework.NEXT_APP) == ["sass"]

    def test_other_frameworks_untouched(self) -> None:
        deps = ["sass", "sass-embedded"]
        assert filter_dev_dependencies_by_framework(deps, Framework.ASTRO) == deps
        assert filter_dev_dependencies_by_framework(deps, None) == deps

    def test_single_sass_package_untouched(self) -> None:
        assert filter_dev_dependencies_by_framework(["sass"], Framework.VITE) == ["sass"]


class TestHelpers:
    """Tests for small resolver helpers."""

    def test_merge_unique_keeps_first_occurrence(self) -> None:
        assert merge_unique([["a", "b"], ["b", "c"], ["a"]]) == ["a", "b", "c"]

    def test_prioritize_index(self) -> None:
        assert prioritize_index(["a", "components/index.json", "b"]) == ["index", "a", "b"]
        assert prioritize_index(["a", "b"]) == ["a", "b"]

    def test_build_items_tree_with_no_items(self) -> None:
        tree = build_items_tree([])
        assert tree.dependencies == []
        assert tree.files == []

    def test_parent_map_uses_item_names(self) -> None:
        editor = RegistryItem(
            name="editor",
            type=RegistryItemType.TEMPLATE,
            registry_dependencies=["components/button.json", "toolbar"],
        )
        parents = get_registry_parent_map([editor])

        assert parents["button"] is editor
        assert parents["toolbar"] is editor
