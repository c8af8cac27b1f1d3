"""Running external tools: package managers and project generators."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from tiptap_cli.errors import TiptapCliError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class CommandFailure(TiptapCliError):
    """An npm/yarn/pnpm/bun or scaffolding command did not succeed.

    ``returncode`` is ``None`` when the executable could not be started.
    """

    command: list[str]
    returncode: int | None
    stdout: str
    stderr: str

    @property
    def command_line(self) -> str:
        return shlex.join(self.command)

    def __str__(self) -> str:
        if self.returncode is None:
            reason = "could not be started"
        else:
            reason = f"exited with status {self.returncode}"
        message = f"`{self.command_line}` {reason}"
        detail = self.stderr.strip() or self.stdout.strip()
        return f"{message}:\n{detail}" if detail else message


class CommandRunner(Protocol):
    def run(
        self, args: list[str], *, cwd: Path | None = None, check: bool = True
    ) -> subprocess.CompletedProcess[str]: ...


class SubprocessRunner:
    """Runs commands with captured text output."""

    def run(
        self, args: list[str], *, cwd: Path | None = None, check: bool = True
    ) -> subprocess.CompletedProcess[str]:
        logger.debug(f"Running {shlex.join(args)} in {cwd or '.'}")
        try:
            completed = subprocess.run(args, cwd=cwd, text=True, capture_output=True)
        except OSError as exc:
            raise CommandFailure(args, None, "", f"{args[0]}: {exc.strerror or exc}") from exc

        if check and completed.returncode != 0:
            raise CommandFailure(args, completed.returncode, completed.stdout, completed.stderr)
        return completed
