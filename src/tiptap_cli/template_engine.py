"""Template engine for files written into newly created projects."""

import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from tiptap_cli.frameworks import NewProjectFramework
from tiptap_cli.package_manager import PackageManager

logger = logging.getLogger(__name__)

SIMPLE_EDITOR_DOCS_URL = "https://tiptap.dev/docs/ui-components/templates/simple-editor"

EDITOR_PACKAGES = [
    "@tiptap/react",
    "@tiptap/starter-kit",
    "@tiptap/extension-image",
    "@tiptap/extension-task-item",
    "@tiptap/extension-task-list",
    "@tiptap/extension-text-align",
    "@tiptap/extension-typography",
]

GLOBAL_STYLES = ["_variables.scss", "_keyframes-animations.scss"]

_DEV_URLS: dict[NewProjectFramework, str] = {
    NewProjectFramework.NEXT: "http://localhost:3000",
    NewProjectFramework.VITE: "http://localhost:5173",
}


def get_templates_dir() -> Path:
    """Get the directory containing built-in templates."""
    return Path(__file__).parent / "templates"


def create_jinja_environment() -> Environment:
    """Create a Jinja2 environment with the templates directory."""
    return Environment(
        loader=FileSystemLoader(get_templates_dir()),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def get_readme_context(
    project_name: str, framework: NewProjectFramework, package_manager: PackageManager
) -> dict[str, Any]:
    """Build the template context for a new project's README."""
    manager = package_manager.value
    return {
        "project": {
            "name": project_name,
            "title": "Tiptap Editor Project",
        },
        "commands": {
            "add": "npm i" if package_manager == PackageManager.NPM else f"{manager} add",
            "install": f"{manager} install",
            "dev": f"{manager} run dev",
        },
        "packages": EDITOR_PACKAGES,
        "styles": GLOBAL_STYLES,
        "dev_url": _DEV_URLS[framework],
        "docs_url": SIMPLE_EDITOR_DOCS_URL,
    }


def render_template(env: Environment, template_name: str, context: dict[str, Any]) -> str:
    """Render a template with the given context."""
    template = env.get_template(template_name)
    return template.render(**context)


def render_readme(
    project_name: str, framework: NewProjectFramework, package_manager: PackageManager
) -> str:
    env = create_jinja_environment()
    return render_template(
        env, "README.md.j2", get_readme_context(project_name, framework, package_manager)
    )
