"""CLI interface for tiptap-cli."""

import asyncio
import contextlib
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tiptap_cli import __version__
from tiptap_cli.auth import (
    PackageManagerTokenStore,
    TokenStore,
    authenticate_user,
    check_auth_status,
)
from tiptap_cli.config import (
    get_config,
    get_default_aliases,
    get_project_config,
    read_raw_config,
    resolve_config_paths,
    to_raw_config,
    write_raw_config,
)
from tiptap_cli.context import AddContext
from tiptap_cli.create_project import (
    DEFAULT_PROJECT_NAME,
    ProjectCreator,
    SubprocessProjectCreator,
)
from tiptap_cli.errors import TiptapCliError
from tiptap_cli.frameworks import NewProjectFramework
from tiptap_cli.models import RawConfig, RegistryIndexEntry, RegistryItemType
from tiptap_cli.package_manager import SubprocessInstaller, get_package_manager
from tiptap_cli.preflights import preflight_add, preflight_init
from tiptap_cli.project_info import get_project_info
from tiptap_cli.prompts import Choice, Prompter, RichPrompter
from tiptap_cli.registry import RegistryClient
from tiptap_cli.reporter import Reporter
from tiptap_cli.selection import prompt_for_registry_components
from tiptap_cli.settings import (
    get_default_settings,
    get_preferred_package_manager,
    get_registry_url,
    get_settings_path,
    load_settings,
    save_settings,
)
from tiptap_cli.workspace import add_components

app = typer.Typer(
    name="tiptap",
    help="Add Tiptap UI components and templates to your project.",
    no_args_is_help=True,
)

auth_app = typer.Typer(
    name="auth",
    help="Authenticate with the Tiptap registry.",
    no_args_is_help=True,
)
app.add_typer(auth_app, name="auth")

config_app = typer.Typer(
    name="config",
    help="Manage user-level settings.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

CwdOption = Annotated[
    Path,
    typer.Option("--cwd", "-c", help="The working directory. Defaults to the current directory."),
]
SilentOption = Annotated[bool, typer.Option("--silent", "-s", help="Mute output.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")]


@contextlib.contextmanager
def _command_errors(verbose: bool) -> Iterator[None]:
    """Turn expected failures into a red message and exit code 1."""
    try:
        yield
    except TiptapCliError as e:
        rprint(f"[red]Error: {e}[/red]")
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        rprint("\n[yellow]Operation cancelled.[/yellow]")
        raise typer.Exit(1) from None
    except Exception as e:
        rprint(f"[red]Unexpected error: {e}[/red]")
        if verbose:
            import traceback

            traceback.print_exc()
        raise typer.Exit(1) from None


def _set_verbosity(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _token_store(cwd: Path) -> TokenStore:
    return PackageManagerTokenStore(get_package_manager(cwd))


def _create_registry_client(cwd: Path) -> RegistryClient:
    """Registry client for *cwd*, authenticated when a token is stored."""
    return RegistryClient(get_registry_url(), token=_token_store(cwd).get_token(cwd))


def _build_context(client: RegistryClient, silent: bool = False) -> AddContext:
    return AddContext(
        registry=client,
        prompter=RichPrompter(console),
        installer=SubprocessInstaller(package_manager=get_preferred_package_manager()),
        reporter=Reporter(console, silent=silent),
    )


def _create_prompter() -> Prompter:
    return RichPrompter(console)


@app.command("add")
def add_cmd(
    components: Annotated[
        list[str] | None, typer.Argument(help="The components to add")
    ] = None,
    overwrite: Annotated[
        bool, typer.Option("--overwrite", "-o", help="Overwrite existing files.")
    ] = False,
    cwd: CwdOption = Path("."),
    silent: SilentOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Add Tiptap components and templates to your project."""
    _set_verbosity(verbose)
    project_dir = cwd.absolute()

    with _command_errors(verbose):
        asyncio.run(_run_add(list(components or []), project_dir, overwrite, silent))


async def _run_add(components: list[str], cwd: Path, overwrite: bool, silent: bool) -> None:
    async with _create_registry_client(cwd) as client:
        ctx = _build_context(client, silent)

        if not components:
            components = await prompt_for_registry_components(client, ctx.prompter, ctx.reporter)
        if not components:
            return

        config = preflight_add(cwd)
        if config is None:
            ctx.reporter.warn(
                "Missing directory or empty project. Please create a new project first."
            )
            return

        await add_components(components, config, ctx, overwrite=overwrite, silent=silent)


@app.command("init")
def init_cmd(
    components: Annotated[
        list[str] | None, typer.Argument(help="The components to add")
    ] = None,
    framework: Annotated[
        NewProjectFramework | None,
        typer.Option("--framework", "-f", help="The framework to use for a new project."),
    ] = None,
    src_dir: Annotated[
        bool,
        typer.Option("--src-dir", help="Use a src directory when creating a Next.js project."),
    ] = False,
    cwd: CwdOption = Path("."),
    silent: SilentOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Initialize your project and install components."""
    _set_verbosity(verbose)
    project_dir = cwd.absolute()

    with _command_errors(verbose):
        initialized = asyncio.run(
            _run_init(list(components or []), project_dir, framework, src_dir, silent)
        )
        if initialized:
            rprint("[bold][cyan]Success![/cyan] Project initialization completed.[/bold]")


def _prompt_for_config(prompter: Prompter, tsx_default: bool, rsc_default: bool) -> RawConfig:
    tsx = prompter.confirm("Would you like to use TypeScript (recommended)?", default=tsx_default)
    rsc = prompter.confirm("Are you using React Server Components?", default=rsc_default)
    return RawConfig(rsc=rsc, tsx=tsx, aliases=get_default_aliases())


def _create_new_project(
    cwd: Path, framework: NewProjectFramework | None, src_dir: bool, prompter: Prompter
) -> Path | None:
    if framework is None:
        answer = prompter.select(
            f"The path {cwd} does not contain a package.json file.\n"
            "Would you like to start a new project?",
            [
                Choice(value=NewProjectFramework.NEXT.value, label="Next.js"),
                Choice(value=NewProjectFramework.VITE.value, label="Vite + React + TypeScript"),
            ],
        )
        if answer is None:
            return None
        framework = NewProjectFramework(answer)

    name = prompter.text("What is your project named?", default=DEFAULT_PROJECT_NAME)
    if not name:
        return None

    package_manager = get_package_manager(cwd, default=get_preferred_package_manager())
    with console.status(f"Creating a new {framework.value} project. This may take a few minutes."):
        creator: ProjectCreator = SubprocessProjectCreator()
        return creator.create(
            framework, name, cwd, package_manager=package_manager, src_dir=src_dir
        )


async def _run_init(
    components: list[str],
    cwd: Path,
    framework: NewProjectFramework | None,
    src_dir: bool,
    silent: bool,
) -> bool:
    prompter = _create_prompter()
    info = preflight_init(cwd)

    if info is None:
        project_path = _create_new_project(cwd, framework, src_dir, prompter)
        if project_path is None:
            return False
        cwd = project_path
        info = get_project_info(cwd)

    project_config = get_project_config(cwd, info)
    if project_config is not None:
        raw = to_raw_config(project_config)
    else:
        raw = _prompt_for_config(prompter, tsx_default=True, rsc_default=info.is_rsc)

    if read_raw_config(cwd) is None:
        write_raw_config(cwd, raw)

    async with _create_registry_client(cwd) as client:
        ctx = _build_context(client, silent)

        if not components:
            if not prompter.confirm(
                "Would you like to add a template or UI components to your project?", default=True
            ):
                return True
            components = await prompt_for_registry_components(client, ctx.prompter, ctx.reporter)
            if not components:
                return True

        config = resolve_config_paths(cwd, raw)
        await add_components(components, config, ctx, overwrite=False, silent=silent)

    return True


@app.command("list")
def list_cmd(
    item_type: Annotated[
        str | None,
        typer.Option("--type", "-t", help="Only show items of this type (e.g. ui, node, template)"),
    ] = None,
    cwd: CwdOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """List the items available in the registry."""
    _set_verbosity(verbose)

    kind: RegistryItemType | None = None
    if item_type:
        value = item_type if item_type.startswith("registry:") else f"registry:{item_type}"
        try:
            kind = RegistryItemType(value)
        except ValueError:
            valid = ", ".join(t.value.removeprefix("registry:") for t in RegistryItemType)
            rprint(f"[red]Error: Unknown type '{item_type}'. Valid: {valid}[/red]")
            raise typer.Exit(1) from None

    with _command_errors(verbose):
        index = asyncio.run(_fetch_index(cwd.absolute()))

    entries = [e for e in index if kind is None or e.type == kind]
    if not entries:
        rprint("[yellow]No registry items found.[/yellow]")
        return

    table = Table(title="Registry Items")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Plan", style="green")
    table.add_column("Description", style="dim")
    for entry in entries:
        table.add_row(
            entry.name,
            entry.type.value.removeprefix("registry:"),
            entry.plan.value,
            entry.description or "",
        )
    console.print(table)


async def _fetch_index(cwd: Path) -> list[RegistryIndexEntry]:
    async with _create_registry_client(cwd) as client:
        return await client.get_index()


@app.command("info")
def info_cmd(
    cwd: CwdOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """Show detected project information and the resolved configuration."""
    _set_verbosity(verbose)
    project_dir = cwd.absolute()

    if not project_dir.is_dir():
        rprint(f"[red]Error: Directory '{project_dir}' does not exist[/red]")
        raise typer.Exit(1)

    info = get_project_info(project_dir)
    table = Table(title="Project")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Framework", f"{info.framework.label} ({info.framework.value})")
    table.add_row("src directory", "yes" if info.is_src_dir else "no")
    table.add_row("TypeScript", "yes" if info.is_tsx else "no")
    table.add_row("React Server Components", "yes" if info.is_rsc else "no")
    table.add_row("Import alias", info.alias_prefix or "[dim]none[/dim]")
    table.add_row("Package manager", get_package_manager(project_dir).value)
    console.print(table)

    try:
        config = get_config(project_dir)
    except TiptapCliError as e:
        rprint(f"[yellow]Configuration could not be resolved: {e}[/yellow]")
        return

    paths = Table(title="Resolved Paths")
    paths.add_column("Alias", style="cyan")
    paths.add_column("Path")
    for key, value in config.resolved_paths.model_dump().items():
        paths.add_row(key, str(value))
    console.print(paths)


@auth_app.command("login")
def auth_login_cmd(
    email: Annotated[str | None, typer.Option("--email", "-e", help="Account email")] = None,
    password: Annotated[
        str | None, typer.Option("--password", "-p", help="Account password")
    ] = None,
    write_config: Annotated[
        bool,
        typer.Option(
            "--write-config/--no-write-config",
            help="Save the token to the package manager configuration",
        ),
    ] = True,
    cwd: CwdOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """Log in to the Tiptap registry."""
    _set_verbosity(verbose)
    project_dir = cwd.absolute()
    prompter = _create_prompter()

    email = email or prompter.text("Email")
    password = password or prompter.password("Password")

    with _command_errors(verbose):
        with console.status("Authenticating with Tiptap registry..."):
            token = asyncio.run(authenticate_user(email or "", password or "", get_registry_url()))

        if write_config:
            store = _token_store(project_dir)
            store.save_token(token, project_dir)
            rprint("[green]Authentication successful. Token saved.[/green]")
        else:
            rprint(
                Panel.fit(
                    f"[green]Authentication successful.[/green]\n\nToken: [cyan]{token}[/cyan]",
                    title="Tiptap Registry",
                )
            )


@auth_app.command("status")
def auth_status_cmd(
    cwd: CwdOption = Path("."),
    verbose: VerboseOption = False,
) -> None:
    """Show whether you are logged in to the Tiptap registry."""
    _set_verbosity(verbose)
    project_dir = cwd.absolute()

    with _command_errors(verbose):
        store = _token_store(project_dir)
        status = asyncio.run(check_auth_status(store.get_token(project_dir), get_registry_url()))

    if not status.authenticated:
        rprint("[yellow]Not authenticated with the Tiptap registry.[/yellow]")
        rprint("[dim]Run 'tiptap auth login' to authenticate.[/dim]")
        return

    table = Table(title="Tiptap Registry")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("User", status.user or "-")
    table.add_row("Plan", status.plan or "-")
    table.add_row("Expires", status.expires or "-")
    console.print(table)


@auth_app.command("logout")
def auth_logout_cmd(
    cwd: CwdOption = Path("."),
) -> None:
    """Remove the registry token from the project .npmrc."""
    project_dir = cwd.absolute()
    store = _token_store(project_dir)
    if store.remove_token(project_dir):
        rprint("[green]Logged out from the Tiptap registry.[/green]")
    else:
        rprint(f"[yellow]No registry token found in {project_dir / '.npmrc'}[/yellow]")


@config_app.command("show")
def config_show_cmd() -> None:
    """Show current user settings."""
    settings_path = get_settings_path()
    settings = load_settings()

    if not settings:
        rprint(f"[yellow]No user settings found at {settings_path}[/yellow]")
        rprint("[dim]Run 'tiptap config init' to create one.[/dim]")
        return

    rprint(f"[cyan]Settings file:[/cyan] {settings_path}\n")
    table = Table(title="User Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in settings.items():
        table.add_row(key, str(value))

    console.print(table)


@config_app.command("init")
def config_init_cmd(
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite existing settings")
    ] = False,
) -> None:
    """Create a default user settings file."""
    settings_path = get_settings_path()

    if settings_path.exists() and not force:
        rprint(f"[yellow]Settings already exist at {settings_path}[/yellow]")
        rprint("[dim]Use --force to overwrite.[/dim]")
        raise typer.Exit(1)

    saved_path = save_settings(get_default_settings())
    rprint(f"[green]Created default settings at {saved_path}[/green]")


@config_app.command("path")
def config_path_cmd() -> None:
    """Print the path to the user settings file."""
    rprint(str(get_settings_path()))


@app.command("version")
def version_cmd() -> None:
    """Print the tiptap-cli version."""
    rprint(__version__)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
