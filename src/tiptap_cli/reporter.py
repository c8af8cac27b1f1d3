"""User-facing progress and result output."""

import contextlib
from collections.abc import Iterator

from rich.console import Console

from tiptap_cli.models import FileOperationResult


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class Reporter:
    """Prints status lines and file lists; ``silent`` mutes everything."""

    def __init__(self, console: Console | None = None, *, silent: bool = False) -> None:
        self.console = console or Console()
        self.silent = silent

    def muted(self) -> "Reporter":
        """A reporter sharing this console that prints nothing."""
        return Reporter(self.console, silent=True)

    @contextlib.contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner while the block runs."""
        if self.silent:
            yield
            return
        with self.console.status(message):
            yield

    def info(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[cyan]✔[/cyan] {message}")

    def warn(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def error(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[red]✖ {message}[/red]")

    def line(self, message: str = "") -> None:
        if not self.silent:
            self.console.print(message)

    def file_list(self, files: list[str], style: str = "") -> None:
        for file in files:
            self.line(f"  - [{style}]{file}[/{style}]" if style else f"  - {file}")

    def file_result(self, result: FileOperationResult, *, show_errors: bool = True) -> None:
        """Summarise a file-writing pass."""
        if not result.has_changes and not result.files_skipped and not result.errors:
            self.info("No files updated.")

        if result.files_created:
            self.success(f"[bold]Created {pluralize(len(result.files_created), 'file')}:[/bold]")
            self.file_list(result.files_created)

        if result.files_updated:
            self.info(f"Updated {pluralize(len(result.files_updated), 'file')}:")
            self.file_list(result.files_updated)

        if result.files_skipped:
            self.info(
                f"Skipped {pluralize(len(result.files_skipped), 'file')}: "
                "(use --overwrite to overwrite)"
            )
            self.file_list(result.files_skipped)

        if result.errors and show_errors:
            self.error(f"Failed to process {pluralize(len(result.errors), 'file')}:")
            for file_error in result.errors:
                self.line(f"  - [red]{file_error.file}: {file_error.error}[/red]")

        self.line()
