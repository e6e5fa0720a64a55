"""Main CLI application for vpm."""

import logging
from typing import Annotated

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from typer.core import TyperGroup

from vpm import __version__
from vpm.config.parser import ConfigError, load_settings
from vpm.config.schemas import Settings
from vpm.core.helptags import HelpTagBuilder
from vpm.core.installer import PluginInstaller
from vpm.core.manifest import ManifestEntry, read_manifest
from vpm.core.plugins import scan_plugins
from vpm.core.tasks import TaskSummary
from vpm.core.uninstaller import PluginUninstaller
from vpm.core.updater import PluginNotInstalledError, PluginUpdater
from vpm.vcs.git import GitClient

USAGE_EXIT_CODE = 1


class PluginManagerGroup(TyperGroup):
    """Command group that exits with status 1 on usage errors."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = USAGE_EXIT_CODE
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = USAGE_EXIT_CODE
            raise


# Create the main Typer app
app = typer.Typer(
    name="vpm",
    help="Plugin manager for Vim and Neovim.\n\n"
    "Without a command, removes plugins that are not in the manifest, "
    "installs the missing ones and rebuilds help tags.",
    cls=PluginManagerGroup,
    add_completion=False,
    invoke_without_command=True,
    no_args_is_help=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()
error_console = Console(stderr=True)

# Set up logger for the vpm package
logger = logging.getLogger("vpm")


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2=DEBUG, 3+=DEBUG with source paths
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logger.setLevel(level)

    # Only add handler if not already configured
    if not logger.handlers:
        handler = RichHandler(
            console=error_console,
            show_time=verbosity >= 2,
            show_path=verbosity >= 3,
            rich_tracebacks=True,
        )
        handler.setLevel(level)
        logger.addHandler(handler)
    else:
        for h in logger.handlers:
            h.setLevel(level)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]\u2713[/green] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]\u26a0[/yellow] {escape(message)}")


def get_settings() -> Settings:
    """Load settings, exiting with an error if they are invalid."""
    try:
        return load_settings()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def get_manifest(settings: Settings) -> list[ManifestEntry]:
    """Read the manifest, exiting with an error if it is missing or unreadable."""
    try:
        return read_manifest(settings.manifest_path, host=settings.host)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def report(summary: TaskSummary, action: str) -> None:
    """Print the outcome of every job that changed something or failed."""
    for outcome in summary.outcomes:
        if not outcome.success:
            logger.debug("%s failed", outcome.name, exc_info=outcome.error)
            print_error(f"Failed to {action} {outcome.name}: {outcome.message}")
        elif outcome.changed and outcome.message:
            print_success(outcome.message)
            for line in outcome.details:
                console.print(f"    {line}", markup=False, highlight=False)


def install_missing(
    settings: Settings, git: GitClient, entries: list[ManifestEntry]
) -> TaskSummary:
    summary = PluginInstaller(settings.plugins_root, git, jobs=settings.jobs).install(entries)
    report(summary, "install")
    return summary


def remove_unwanted(
    settings: Settings, git: GitClient, entries: list[ManifestEntry]
) -> TaskSummary:
    summary = PluginUninstaller(settings.plugins_root, git).uninstall(entries)
    report(summary, "remove")
    return summary


def finish(settings: Settings, summary: TaskSummary) -> None:
    """Rebuild help tags, then exit 1 if any plugin job failed."""
    HelpTagBuilder(settings.editor_root).rebuild(settings.plugins_root)

    if not summary.all_successful:
        logger.info("%d plugin job(s) failed", len(summary.failed))
        raise typer.Exit(1)


def reconcile() -> None:
    """Remove unwanted plugins, install missing ones, rebuild help tags."""
    settings = get_settings()
    entries = get_manifest(settings)
    if not entries:
        print_warning(f"No plugins listed in {settings.manifest_path}")
    git = GitClient()

    summary = remove_unwanted(settings, git, entries)
    summary.extend(install_missing(settings, git, entries))
    finish(settings, summary)


@app.callback()
def callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v info, -vv debug, -vvv trace)",
        ),
    ] = 0,
) -> None:
    """vpm - plugin manager for Vim and Neovim."""
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        reconcile()


@app.command()
def version() -> None:
    """Show the vpm version."""
    console.print(f"vpm {__version__}")


@app.command()
def edit() -> None:
    """Edit the manifest, then install and remove plugins to match it."""
    settings = get_settings()
    manifest_path = settings.manifest_path
    if not manifest_path.is_file():
        print_error(f"Manifest not found: {manifest_path}")
        raise typer.Exit(1)

    typer.edit(filename=str(manifest_path), editor=settings.editor)

    entries = get_manifest(settings)
    git = GitClient()
    summary = install_missing(settings, git, entries)
    summary.extend(remove_unwanted(settings, git, entries))
    finish(settings, summary)


@app.command()
def update(
    name: Annotated[
        str | None,
        typer.Argument(help="Plugin to update (updates all plugins if omitted)"),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Don't show the log of new commits",
        ),
    ] = False,
) -> None:
    """Update one or all installed plugins from their remotes."""
    settings = get_settings()
    get_manifest(settings)

    updater = PluginUpdater(settings.plugins_root, GitClient(), jobs=settings.jobs, quiet=quiet)
    try:
        summary = updater.update(name)
    except PluginNotInstalledError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    report(summary, "update")
    finish(settings, summary)


@app.command("list")
def list_plugins() -> None:
    """List installed plugins and manifest entries."""
    settings = get_settings()
    entries = get_manifest(settings)
    git = GitClient()

    plugins = scan_plugins(settings.plugins_root, git)
    uninstaller = PluginUninstaller(settings.plugins_root, git)
    stale = {plugin.name for plugin, _ in uninstaller.plan(entries)}
    installed_names = {plugin.name for plugin in plugins}
    missing = [e for e in entries if e.name not in installed_names]

    if not plugins and not missing:
        console.print("No plugins installed")
        return

    table = Table(title=f"Plugins in {settings.plugins_root}")
    table.add_column("Plugin", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Source", style="dim")
    table.add_column("Status")

    for plugin in plugins:
        if plugin.is_link:
            source = str(plugin.target)
        else:
            source = plugin.origin or ""
        status = "[red]remove[/red]" if plugin.name in stale else "ok"
        table.add_row(plugin.name, plugin.kind, escape(source), status)

    seen: set[str] = set()
    for entry in missing:
        if entry.name in seen:
            continue
        seen.add(entry.name)
        source = entry.remote or str(entry.source.path)
        table.add_row(entry.name, "-", escape(source), "[yellow]missing[/yellow]")

    console.print(table)


@app.command("help")
def show_help(ctx: typer.Context) -> None:
    """Show usage and exit."""
    help_text = ctx.parent.get_help() if ctx.parent is not None else ctx.get_help()
    if help_text:
        typer.echo(help_text)


if __name__ == "__main__":
    app()
