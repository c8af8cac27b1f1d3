"""Pytest fixtures for tiptap-cli tests."""

import json
import subprocess
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from tiptap_cli.context import AddContext
from tiptap_cli.config import get_default_aliases
from tiptap_cli.models import Config, ResolvedPaths
from tiptap_cli.prompts import Choice
from tiptap_cli.registry import RegistryClient
from tiptap_cli.reporter import Reporter

REGISTRY_URL = "https://template.tiptap.dev"
COMPONENTS_PATH = "/api/registry/components/"


class FakeRegistry:
    """In-memory registry served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.index: list[dict[str, Any]] = []
        self.free: list[str] = []
        self.statuses: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def add(self, name: str, type: str = "registry:ui", **fields: Any) -> dict[str, Any]:
        self.items[name] = {"name": name, "type": type, **fields}
        return self.items[name]

    def fetch_count(self, name: str) -> int:
        return [r.url.path for r in self.requests].count(f"{COMPONENTS_PATH}{name}")

    @property
    def fetched(self) -> list[str]:
        return [
            r.url.path.removeprefix(COMPONENTS_PATH)
            for r in self.requests
            if r.url.path.startswith(COMPONENTS_PATH)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.statuses:
            return httpx.Response(self.statuses[path], json={"error": "registry exploded"})
        if path == "/r/index.json":
            return httpx.Response(200, json=self.index)
        if path == "/api/registry/free":
            return httpx.Response(200, json=self.free)
        name = path.removeprefix(COMPONENTS_PATH)
        if path.startswith(COMPONENTS_PATH) and name in self.items:
            return httpx.Response(200, json=self.items[name])
        return httpx.Response(404, json={"error": "Not found"})

    def client(self, **kwargs: Any) -> RegistryClient:
        return RegistryClient(REGISTRY_URL, transport=httpx.MockTransport(self.handler), **kwargs)


class FakePrompter:
    """Prompter returning scripted answers and recording the questions."""

    def __init__(
        self,
        confirms: list[bool] | None = None,
        selects: list[str | None] | None = None,
        checkboxes: list[list[str]] | None = None,
        texts: list[str | None] | None = None,
    ) -> None:
        self.confirms = list(confirms or [])
        self.selects = list(selects or [])
        self.checkboxes = list(checkboxes or [])
        self.texts = list(texts or [])
        self.messages: list[str] = []
        self.choices: list[list[Choice]] = []

    def select(self, message: str, choices: list[Choice]) -> str | None:
        self.messages.append(message)
        self.choices.append(choices)
        return self.selects.pop(0) if self.selects else None

    def checkbox(self, message: str, choices: list[Choice]) -> list[str]:
        self.messages.append(message)
        self.choices.append(choices)
        return self.checkboxes.pop(0) if self.checkboxes else []

    def confirm(self, message: str, default: bool = False) -> bool:
        self.messages.append(message)
        return self.confirms.pop(0) if self.confirms else default

    def text(self, message: str, default: str | None = None) -> str | None:
        self.messages.append(message)
        return self.texts.pop(0) if self.texts else default

    def password(self, message: str) -> str | None:
        self.messages.append(message)
        return self.texts.pop(0) if self.texts else None


@dataclass
class FakeInstaller:
    """Records install requests instead of running a package manager."""

    calls: list[tuple[list[str], Path, bool]] = field(default_factory=list)

    def install(self, packages: list[str], *, cwd: Path, dev: bool = False) -> None:
        if packages:
            self.calls.append((list(packages), cwd, dev))


@dataclass(frozen=True)
class RecordedCommand:
    """Record a command invocation for assertions."""

    args: list[str]
    cwd: Path | None


class FakeRunner:
    """Fake command runner; ``effects`` may touch the file system per command."""

    def __init__(
        self,
        outputs: dict[tuple[str, ...], str] | None = None,
        effects: dict[tuple[str, ...], Callable[[Path | None], None]] | None = None,
    ) -> None:
        self.outputs = outputs or {}
        self.effects = effects or {}
        self.commands: list[RecordedCommand] = []

    def run(
        self, args: list[str], *, cwd: Path | None = None, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        self.commands.append(RecordedCommand(args=args, cwd=cwd))
        effect = self.effects.get(tuple(args))
        if effect is not None:
            effect(cwd)
        stdout = self.outputs.get(tuple(args), "")
        return subprocess.CompletedProcess(args=args, returncode=0, stdout=stdout, stderr="")


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest_asyncio.fixture
async def registry_client(fake_registry: FakeRegistry) -> AsyncGenerator[RegistryClient]:
    """A registry client talking to ``fake_registry``."""
    async with fake_registry.client() as client:
        yield client


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def installer() -> FakeInstaller:
    return FakeInstaller()


@pytest.fixture
def add_context(
    registry_client: RegistryClient, prompter: FakePrompter, installer: FakeInstaller
) -> AddContext:
    return AddContext(
        registry=registry_client,
        prompter=prompter,
        installer=installer,
        reporter=Reporter(silent=True),
    )


@pytest.fixture
def next_project(tmp_path: Path) -> Path:
    """A Next.js app-router project with an ``@/*`` import alias."""
    project = tmp_path.resolve() / "web"
    write_json(project / "package.json", {"name": "web", "dependencies": {"next": "15.0.0"}})
    write_json(project / "tsconfig.json", {"compilerOptions": {"paths": {"@/*": ["./*"]}}})
    (project / "next.config.mjs").write_text("export default {}\n")
    (project / "app").mkdir()
    return project


@pytest.fixture
def make_config() -> Callable[..., Config]:
    """Build a resolved config rooted at a directory without touching tsconfig."""

    def _make(cwd: Path, *, tsx: bool = True, rsc: bool = False) -> Config:
        components = cwd / "components"
        return Config(
            rsc=rsc,
            tsx=tsx,
            aliases=get_default_aliases(),
            resolved_paths=ResolvedPaths(
                cwd=cwd,
                components=components,
                contexts=cwd / "contexts",
                hooks=cwd / "hooks",
                tiptap_icons=components / "tiptap-icons",
                lib=cwd / "lib",
                tiptap_extensions=components / "tiptap-extension",
                tiptap_nodes=components / "tiptap-node",
                tiptap_ui=components / "tiptap-ui",
                tiptap_ui_primitives=components / "tiptap-ui-primitive",
                tiptap_ui_utils=components / "tiptap-ui-utils",
                styles=cwd / "styles",
            ),
        )

    return _make


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """A workspace with a Next.js app consuming a shared ``packages/ui`` package."""
    root = tmp_path.resolve() / "ws"
    write_json(root / "package.json", {"name": "ws", "private": True})

    web = root / "apps" / "web"
    write_json(web / "package.json", {"name": "web", "dependencies": {"next": "15.0.0"}})
    write_json(
        web / "tsconfig.json",
        {
            "compilerOptions": {
                "paths": {"@/*": ["./*"], "@workspace/ui/*": ["../../packages/ui/src/*"]}
            }
        },
    )
    write_json(
        web / "components.json",
        {
            "rsc": True,
            "tsx": True,
            "aliases": {
                "components": "@/components",
                "tiptapUi": "@workspace/ui/components/tiptap-ui",
            },
        },
    )
    (web / "next.config.mjs").write_text("export default {}\n")
    (web / "app").mkdir()

    ui = root / "packages" / "ui"
    write_json(ui / "package.json", {"name": "@workspace/ui"})
    write_json(
        ui / "tsconfig.json",
        {"compilerOptions": {"paths": {"@workspace/ui/*": ["./src/*"], "@/*": ["./src/*"]}}},
    )
    write_json(
        ui / "components.json",
        {"rsc": True, "tsx": True, "aliases": {"components": "@workspace/ui/components"}},
    )
    return root
