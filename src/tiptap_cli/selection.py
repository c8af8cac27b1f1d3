"""Interactive selection of templates and components from the registry index."""

import logging
import re
from dataclasses import dataclass, field

from tiptap_cli.models import Plan, RegistryIndexEntry, RegistryItemType
from tiptap_cli.prompts import Choice, Prompter
from tiptap_cli.registry import RegistryClient
from tiptap_cli.reporter import Reporter

logger = logging.getLogger(__name__)

PLAN_LABELS: dict[Plan, str] = {Plan.FREE: "Free", Plan.PAID: "Paid"}

PAID_WARNING = "Some components (marked as Paid) require an active subscription!"


def to_readable_name(name: str) -> str:
    """``table-button`` -> ``Table Button``."""
    return " ".join(word[:1].upper() + word[1:] for word in re.split(r"[-_]", name))


@dataclass
class RegistryCategories:
    templates: list[RegistryIndexEntry] = field(default_factory=list)
    ui: list[RegistryIndexEntry] = field(default_factory=list)
    primitives: list[RegistryIndexEntry] = field(default_factory=list)
    ui_utils: list[RegistryIndexEntry] = field(default_factory=list)
    nodes: list[RegistryIndexEntry] = field(default_factory=list)

    @property
    def has_components(self) -> bool:
        return bool(self.ui or self.nodes)


def categorize_registry_items(index: list[RegistryIndexEntry]) -> RegistryCategories:
    def of(kind: RegistryItemType) -> list[RegistryIndexEntry]:
        return [entry for entry in index if entry.type == kind]

    return RegistryCategories(
        templates=of(RegistryItemType.TEMPLATE),
        ui=of(RegistryItemType.UI),
        primitives=of(RegistryItemType.UI_PRIMITIVE),
        ui_utils=of(RegistryItemType.UI_UTILS),
        nodes=of(RegistryItemType.NODE),
    )


def component_choices(categories: RegistryCategories, free_names: list[str]) -> list[Choice]:
    """Free UI, node and primitive items grouped by section."""
    sections = (
        ("UI COMPONENTS", categories.ui),
        ("NODE COMPONENTS", categories.nodes),
        ("PRIMITIVES", categories.primitives),
    )
    choices: list[Choice] = []
    for title, items in sections:
        for item in items:
            if item.name in free_names:
                label = f"{to_readable_name(item.name)} ({PLAN_LABELS[item.plan]})"
                choices.append(Choice(value=item.name, label=label, section=title))
    return choices


def template_choices(templates: list[RegistryIndexEntry], free_names: list[str]) -> list[Choice]:
    choices: list[Choice] = []
    for template in templates:
        if template.name not in free_names:
            continue
        description = f" - {template.description}" if template.description else ""
        label = f"{to_readable_name(template.name)}{description} ({PLAN_LABELS[template.plan]})"
        choices.append(Choice(value=template.name, label=label))
    return choices


async def prompt_for_registry_components(
    client: RegistryClient, prompter: Prompter, reporter: Reporter
) -> list[str]:
    """Ask which templates or components to add; ``[]`` if none or cancelled."""
    index = await client.get_index()
    categories = categorize_registry_items(index)

    kinds: list[Choice] = []
    if categories.templates:
        kinds.append(Choice(value="templates", label="Templates"))
    if categories.has_components:
        kinds.append(Choice(value="components", label="Components"))
    if not kinds:
        reporter.error("No components or templates found")
        return []

    selection = prompter.select("What would you like to integrate:", kinds)
    if selection is None:
        reporter.error("Operation cancelled")
        return []

    free_names = await client.fetch_free_names()
    reporter.warn(PAID_WARNING)

    if selection == "templates":
        choices = template_choices(categories.templates, free_names)
        message = "Select the templates you want to add:"
    else:
        choices = component_choices(categories, free_names)
        message = "Select the components you want to add:"

    selected = prompter.checkbox(message, choices)
    logger.debug(f"Selected {selected}")
    return selected
