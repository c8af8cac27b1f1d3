"""Interactive prompts used by the CLI and the file writer."""

import logging
from dataclasses import dataclass
from typing import Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

logger = logging.getLogger(__name__)


@dataclass
class Choice:
    """An option offered by ``select``/``checkbox``."""

    value: str
    label: str
    section: str | None = None


class Prompter(Protocol):
    """Source of user answers.

    Cancelling a prompt yields the negative result (``None``, ``[]`` or
    ``False``) instead of raising.
    """

    def select(self, message: str, choices: list[Choice]) -> str | None: ...

    def checkbox(self, message: str, choices: list[Choice]) -> list[str]: ...

    def confirm(self, message: str, default: bool = False) -> bool: ...

    def text(self, message: str, default: str | None = None) -> str | None: ...

    def password(self, message: str) -> str | None: ...


class RichPrompter:
    """Terminal prompts built on ``rich.prompt``."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _print_choices(self, message: str, choices: list[Choice]) -> None:
        table = Table(show_header=False, box=None, title=f"[bold]{message}[/bold]")
        table.add_column("#", style="cyan", justify="right")
        table.add_column("Option")

        section: str | None = None
        for number, choice in enumerate(choices, start=1):
            if choice.section and choice.section != section:
                section = choice.section
                table.add_row("", f"[bold magenta]{section}[/bold magenta]")
            table.add_row(str(number), choice.label)

        self.console.print(table)

    def select(self, message: str, choices: list[Choice]) -> str | None:
        if not choices:
            return None
        self._print_choices(message, choices)
        numbers = [str(i) for i in range(1, len(choices) + 1)]
        try:
            answer = Prompt.ask("Select", choices=numbers, default="1", console=self.console)
        except (KeyboardInterrupt, EOFError):
            logger.debug(f"Prompt cancelled: {message}")
            return None
        return choices[int(answer) - 1].value

    def checkbox(self, message: str, choices: list[Choice]) -> list[str]:
        if not choices:
            return []
        self._print_choices(message, choices)
        while True:
            try:
                answer = Prompt.ask(
                    "Enter numbers separated by commas (empty for none)",
                    default="",
                    console=self.console,
                )
            except (KeyboardInterrupt, EOFError):
                logger.debug(f"Prompt cancelled: {message}")
                return []

            selected = parse_selection(answer, len(choices))
            if selected is not None:
                return [choices[i].value for i in selected]
            self.console.print("[red]Please enter valid option numbers.[/red]")

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return Confirm.ask(message, default=default, console=self.console)
        except (KeyboardInterrupt, EOFError):
            logger.debug(f"Prompt cancelled: {message}")
            return False

    def text(self, message: str, default: str | None = None) -> str | None:
        try:
            if default is None:
                return Prompt.ask(message, console=self.console)
            return Prompt.ask(message, default=default, console=self.console)
        except (KeyboardInterrupt, EOFError):
            logger.debug(f"Prompt cancelled: {message}")
            return None

    def password(self, message: str) -> str | None:
        try:
            return Prompt.ask(message, password=True, console=self.console)
        except (KeyboardInterrupt, EOFError):
            logger.debug(f"Prompt cancelled: {message}")
            return None


def parse_selection(answer: str, count: int) -> list[int] | None:
    """Parse ``"1, 3,4"`` into zero-based indices, or ``None`` if invalid."""
    indices: list[int] = []
    for part in answer.replace(" ", "").split(","):
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            return None
        index = int(part) - 1
        if index not in indices:
            indices.append(index)
    return indices
