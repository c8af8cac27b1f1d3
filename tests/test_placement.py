"""Tests for file placement."""

from collections.abc import Callable
from pathlib import Path

import pytest

from tiptap_cli.frameworks import Framework
from tiptap_cli.models import Config, RegistryFile, RegistryItemType
from tiptap_cli.placement import (
    PlacementContext,
    coerce_extension,
    resolve_file_path,
    resolve_nested_file_path,
    resolve_page_target,
)


def _file(path: str, type: RegistryItemType, target: str | None = None) -> RegistryFile:
    return RegistryFile(path=path, type=type, target=target, content="x")


@pytest.fixture
def config(tmp_path: Path, make_config: Callable[..., Config]) -> Config:
    return make_config(tmp_path)


class TestTypeDirectories:
    """Files without a target go to their type's directory."""

    def test_ui_keeps_nested_path(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/tiptap-ui/button/button.tsx", RegistryItemType.UI)
        assert resolve_file_path(file, config) == (
            tmp_path / "components" / "tiptap-ui" / "button" / "button.tsx"
        )

    def test_primitive_directory(self, tmp_path: Path, config: Config) -> None:
        file = _file(
            "registry/tiptap-ui-primitive/tooltip/tooltip.tsx", RegistryItemType.UI_PRIMITIVE
        )
        assert resolve_file_path(file, config) == (
            tmp_path / "components" / "tiptap-ui-primitive" / "tooltip" / "tooltip.tsx"
        )

    def test_flattens_without_matching_segment(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/shared/use-mobile.ts", RegistryItemType.HOOK)
        assert resolve_file_path(file, config) == tmp_path / "hooks" / "use-mobile.ts"

    def test_unmapped_type_uses_components(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/assets/logo.svg", RegistryItemType.ASSET)
        assert resolve_file_path(file, config) == tmp_path / "components" / "logo.svg"


class TestTargets:
    """Files with an explicit target."""

    def test_home_relative_target(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/styles/_vars.scss", RegistryItemType.STYLE, "~/styles/_vars.scss")
        assert resolve_file_path(file, config) == tmp_path / "styles" / "_vars.scss"

    def test_target_in_src_dir(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/lib/utils.ts", RegistryItemType.LIB, "lib/utils.ts")
        context = PlacementContext(is_src_dir=True)
        assert resolve_file_path(file, config, context) == tmp_path / "src" / "lib" / "utils.ts"

    def test_leading_src_is_not_doubled(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/lib/utils.ts", RegistryItemType.LIB, "src/lib/utils.ts")
        with_src = resolve_file_path(file, config, PlacementContext(is_src_dir=True))
        without_src = resolve_file_path(file, config, PlacementContext(is_src_dir=False))

        assert with_src == tmp_path / "src" / "lib" / "utils.ts"
        assert without_src == tmp_path / "lib" / "utils.ts"

    def test_src_only_stripped_at_start(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/x.ts", RegistryItemType.LIB, "lib/src/x.ts")
        assert resolve_file_path(file, config) == tmp_path / "lib" / "src" / "x.ts"


class TestPageTargets:
    """Page files follow the framework's routing convention."""

    PAGE = "app/simple/page.tsx"

    @pytest.mark.parametrize(
        ("framework", "expected"),
        [
            (Framework.NEXT_APP, "app/simple/page.tsx"),
            (Framework.NEXT_PAGES, "pages/simple.tsx"),
            (Framework.REACT_ROUTER, "app/routes/simple.tsx"),
            (Framework.LARAVEL, "resources/js/pages/simple.tsx"),
            (Framework.VITE, ""),
            (None, ""),
        ],
    )
    def test_resolve_page_target(self, framework: Framework | None, expected: str) -> None:
        assert resolve_page_target(self.PAGE, framework) == expected

    def test_page_for_next_app(self, tmp_path: Path, config: Config) -> None:
        file = _file("registry/app/simple/page.tsx", RegistryItemType.PAGE, self.PAGE)
        context = PlacementContext(framework=Framework.NEXT_APP)
        assert resolve_file_path(file, config, context) == tmp_path / "app" / "simple" / "page.tsx"

    def test_page_skipped_without_convention(self, config: Config) -> None:
        file = _file("registry/app/simple/page.tsx", RegistryItemType.PAGE, self.PAGE)
        assert resolve_file_path(file, config, PlacementContext(framework=Framework.VITE)) is None
        assert resolve_file_path(file, config, PlacementContext()) is None


class TestTemplates:
    """Files that belong to a template."""

    def test_template_component_sits_in_template_folder(
        self, tmp_path: Path, config: Config
    ) -> None:
        file = _file(
            "registry/tiptap-templates/simple/components/simple-editor.tsx",
            RegistryItemType.COMPONENT,
        )
        assert resolve_file_path(file, config) == (
            tmp_path / "components" / "tiptap-templates" / "simple" / "simple-editor.tsx"
        )

    def test_template_data_file(self, tmp_path: Path, config: Config) -> None:
        file = _file(
            "registry/tiptap-templates/simple/data/content.json",
            RegistryItemType.COMPONENT,
            "app/data/content.json",
        )
        assert resolve_file_path(file, config) == (
            tmp_path / "components" / "tiptap-templates" / "simple" / "data" / "content.json"
        )

    def test_template_page_uses_page_rules(self, tmp_path: Path, config: Config) -> None:
        file = _file(
            "registry/tiptap-templates/simple/page.tsx",
            RegistryItemType.PAGE,
            "app/simple/page.tsx",
        )
        context = PlacementContext(framework=Framework.NEXT_PAGES)
        assert resolve_file_path(file, config, context) == tmp_path / "pages" / "simple.tsx"


class TestExtensions:
    """TypeScript extensions in JavaScript projects."""

    def test_tsx_becomes_jsx(
        self, tmp_path: Path, make_config: Callable[..., Config]
    ) -> None:
        config = make_config(tmp_path, tsx=False)
        file = _file("registry/tiptap-ui/button/button.tsx", RegistryItemType.UI)
        assert resolve_file_path(file, config) == (
            tmp_path / "components" / "tiptap-ui" / "button" / "button.jsx"
        )

    def test_coerce_extension(self) -> None:
        assert coerce_extension(Path("a/b.ts"), tsx=False) == Path("a/b.js")
        assert coerce_extension(Path("a/b.tsx"), tsx=False) == Path("a/b.jsx")
        assert coerce_extension(Path("a/b.scss"), tsx=False) == Path("a/b.scss")
        assert coerce_extension(Path("a/b.tsx"), tsx=True) == Path("a/b.tsx")


class TestPathHelpers:
    """Tests for resolve_nested_file_path."""

    def test_nested_path_after_target_segment(self) -> None:
        assert (
            resolve_nested_file_path("registry/tiptap-node/image/image.tsx", "/p/tiptap-node")
            == "image/image.tsx"
        )

    def test_nested_path_uses_first_matching_segment(self) -> None:
        assert resolve_nested_file_path("a/ui/b/ui/c.tsx", "/p/ui") == "b/ui/c.tsx"

    def test_nested_path_falls_back_to_basename(self) -> None:
        assert resolve_nested_file_path("registry/other/c.tsx", "/p/ui") == "c.tsx"
