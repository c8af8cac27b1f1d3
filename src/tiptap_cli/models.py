"""Data models for registry items and project configuration."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RegistryItemType(StrEnum):
    """Category tag of a registry item or file."""

    CONTEXT = "registry:context"
    EXTENSION = "registry:extension"
    HOOK = "registry:hook"
    ICON = "registry:icon"
    LIB = "registry:lib"
    NODE = "registry:node"
    TEMPLATE = "registry:template"
    UI_PRIMITIVE = "registry:ui-primitive"
    UI = "registry:ui"
    UI_UTILS = "registry:ui-utils"
    PAGE = "registry:page"
    COMPONENT = "registry:component"
    STYLE = "registry:style"
    ASSET = "registry:asset"


class Plan(StrEnum):
    """Subscription tier that gates an item's visibility."""

    FREE = "free"
    PAID = "paid"


class RegistryFile(BaseModel):
    """One file within a registry item."""

    path: str = Field(..., description="Location in the registry's own source tree")
    content: str | None = Field(None, description="Literal file payload")
    type: RegistryItemType = Field(..., description="Governs the default target directory")
    target: str | None = Field(None, description="Explicit destination override")


class RegistryItem(BaseModel):
    """A fetchable unit of distributable code."""

    name: str = Field(..., description="Unique identifier within the registry")
    type: RegistryItemType
    description: str | None = None
    dependencies: list[str] = Field(default_factory=list, description="Runtime packages")
    dev_dependencies: list[str] = Field(
        default_factory=list, alias="devDependencies", description="Development packages"
    )
    registry_dependencies: list[str] = Field(
        default_factory=list,
        alias="registryDependencies",
        description="Other registry items (names or URLs) this item requires",
    )
    files: list[RegistryFile] = Field(default_factory=list)  # type: ignore[arg-type]
    meta: dict[str, Any] | None = None
    plan: Plan = Plan.FREE
    hidden: bool = True

    model_config = ConfigDict(populate_by_name=True)


class RegistryIndexEntry(RegistryItem):
    """An entry of ``index.json``; files may be listed as bare paths."""

    files: list[str | RegistryFile] = Field(default_factory=list)  # type: ignore[assignment]


class ResolvedItemsTree(BaseModel):
    """Merged outcome of resolving a set of registry items."""

    dependencies: list[str] = Field(default_factory=list)
    dev_dependencies: list[str] = Field(default_factory=list)
    files: list[RegistryFile] = Field(default_factory=list)  # type: ignore[arg-type]


class Aliases(BaseModel):
    """Logical category -> import alias."""

    components: str
    contexts: str | None = None
    hooks: str | None = None
    tiptap_icons: str | None = Field(None, alias="tiptapIcons")
    lib: str | None = None
    tiptap_extensions: str | None = Field(None, alias="tiptapExtensions")
    tiptap_nodes: str | None = Field(None, alias="tiptapNodes")
    tiptap_ui: str | None = Field(None, alias="tiptapUi")
    tiptap_ui_primitives: str | None = Field(None, alias="tiptapUiPrimitives")
    tiptap_ui_utils: str | None = Field(None, alias="tiptapUiUtils")
    styles: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class RawConfig(BaseModel):
    """Contents of ``components.json`` before path resolution."""

    rsc: bool = False
    tsx: bool = True
    aliases: Aliases

    def to_json_dict(self) -> dict[str, Any]:
        """Return the camelCase mapping persisted to ``components.json``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResolvedPaths(BaseModel):
    """Alias keys mapped to absolute directories, plus the project root."""

    cwd: Path
    components: Path
    contexts: Path
    hooks: Path
    tiptap_icons: Path
    lib: Path
    tiptap_extensions: Path
    tiptap_nodes: Path
    tiptap_ui: Path
    tiptap_ui_primitives: Path
    tiptap_ui_utils: Path
    styles: Path


class Config(RawConfig):
    """Fully resolved consumer project settings."""

    resolved_paths: ResolvedPaths


# Alias keys that have a resolved directory (everything except ``cwd``).
ALIAS_KEYS: tuple[str, ...] = tuple(k for k in ResolvedPaths.model_fields if k != "cwd")


@dataclass
class FileError:
    """A file that could not be processed, with the reason."""

    file: str
    error: str


@dataclass
class FileOperationResult:
    """Outcome of a file-writing pass."""

    files_created: list[str] = field(default_factory=list)
    files_updated: list[str] = field(default_factory=list)
    files_skipped: list[str] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.files_created or self.files_updated)

    def sort(self) -> None:
        """Sort every path list for deterministic reporting."""
        self.files_created.sort()
        self.files_updated.sort()
        self.files_skipped.sort()
        self.errors.sort(key=lambda e: e.file)

    def extend(self, other: "FileOperationResult") -> None:
        self.files_created.extend(other.files_created)
        self.files_updated.extend(other.files_updated)
        self.files_skipped.extend(other.files_skipped)
        self.errors.extend(other.errors)
