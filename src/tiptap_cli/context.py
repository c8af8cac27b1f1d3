"""Collaborators shared by one command invocation."""

from dataclasses import dataclass, field

from tiptap_cli.package_manager import PackageInstaller, SubprocessInstaller
from tiptap_cli.prompts import Prompter, RichPrompter
from tiptap_cli.registry import RegistryClient
from tiptap_cli.reporter import Reporter


@dataclass
class AddContext:
    """Everything ``add_components`` talks to besides the file system."""

    registry: RegistryClient
    prompter: Prompter = field(default_factory=RichPrompter)
    installer: PackageInstaller = field(default_factory=SubprocessInstaller)
    reporter: Reporter = field(default_factory=Reporter)
