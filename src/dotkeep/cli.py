"""Command line interface for dotkeep."""

import os
from datetime import datetime, timezone
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .core.backup import BackupStore
from .core.config import get_config_path, initialize_config
from .core.errors import DotfilesError
from .core.install import InstallManager
from .core.logging import setup_logging
from .core.migrate import read_config
from .core.paths import DotfilesPaths, resolve_home_dir
from .core.report import Outcome, OperationReport
from .core.restore import RestoreManager
from .core.status import StatusManager
from .core.wipe import WipeManager

console = Console()

SUMMARY_LABELS = {
    Outcome.COPIED: ("green", "Files copied:"),
    Outcome.OVERWRITTEN: ("green", "Files overwritten:"),
    Outcome.RESTORED: ("green", "Files restored from backup:"),
    Outcome.INSTALLED_FROM_SOURCE: ("green", "Files installed from source:"),
    Outcome.REMOVED: ("green", "Files removed:"),
    Outcome.UNCHANGED: ("cyan", "Files unchanged:"),
    Outcome.SKIPPED: ("yellow", "Files skipped:"),
    Outcome.NOTHING_TO_RESTORE: ("yellow", "Nothing to restore:"),
    Outcome.FAILED: ("red", "Files failed:"),
}


def load_paths() -> DotfilesPaths:
    """Build the directory context for this invocation."""
    home_dir = resolve_home_dir(os.environ)
    config = read_config(home_dir, console)
    errors = config.validate()
    if errors:
        raise DotfilesError(f"Invalid configuration: {'; '.join(errors)}")
    return DotfilesPaths.from_environment(config.source_dir, os.environ)


def print_summary(report: OperationReport) -> None:
    """Print outcome counts and abort if any file failed."""
    counts = report.counts()
    if counts:
        console.print("\n[bold magenta]Summary:")
        for outcome, (style, label) in SUMMARY_LABELS.items():
            if counts.get(outcome):
                console.print(f"  [{style}]{label}[/] [blue]{counts[outcome]}")

    if not report.ok:
        for path, message in report.failures:
            console.print(f"[red]Error: {path}: {message}")
        raise click.Abort()


@click.group()
@click.version_option(__version__, prog_name="dotkeep")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Also write debug logs to this file",
)
def cli(debug: bool, log_file: Optional[str]) -> None:
    """Dotfiles management tool.

    Installs files from a source directory into your home directory, keeping
    timestamped backups of anything it overwrites so it can be restored later.

    Main commands:

      install    Copy dotfiles into the home directory
      uninstall  Remove installed dotfiles, restoring backups
      restore    Restore files from backups
      backups    List available backups
      reset      Remove all backups
      status     Show which dotfiles are installed
      init       Create the configuration file

    Run 'dotkeep COMMAND --help' for more information on a specific command.
    """
    setup_logging(debug=debug, log_file=log_file)


@cli.command()
@click.option("--dry-run", "-d", is_flag=True, help="Show what would be installed")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files that differ")
@click.option(
    "--backup/--no-backup",
    "-b/-B",
    default=True,
    show_default=True,
    help="Back up existing files before overwriting them",
)
@click.option("--verbose", "-v", is_flag=True, help="Display verbose output")
def install(dry_run: bool, force: bool, backup: bool, verbose: bool) -> None:
    """Install dotfiles from the configured source directory.

    Files that already exist with identical content are left alone. Files that
    differ are skipped unless --force is given, in which case the existing
    file is backed up first (unless --no-backup).

    Examples:

      # Preview an installation
      dotkeep install --dry-run

      # Overwrite changed files, keeping backups of the old versions
      dotkeep install --force
    """
    try:
        manager = InstallManager(load_paths(), console=console)
        report = manager.install(dry_run=dry_run, force=force, backup=backup, verbose=verbose)
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()
    print_summary(report)


@cli.command()
@click.option("--dry-run", "-d", is_flag=True, help="Show what would be removed")
@click.option("--force", "-f", is_flag=True, help="Also remove files that were modified")
@click.option("--keep-backups", "-k", is_flag=True, help="Keep backups after restoring them")
@click.option("--verbose", "-v", is_flag=True, help="Display verbose output")
def uninstall(dry_run: bool, force: bool, keep_backups: bool, verbose: bool) -> None:
    """Remove installed dotfiles from the home directory.

    Each file is replaced by its latest backup when one exists and deleted
    otherwise. Files that no longer match the source are skipped unless
    --force is given.
    """
    try:
        manager = InstallManager(load_paths(), console=console)
        report = manager.uninstall(
            dry_run=dry_run, force=force, verbose=verbose, keep_backups=keep_backups
        )
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()
    print_summary(report)


@cli.command()
@click.option(
    "--source-dir",
    "-s",
    default=".",
    show_default=True,
    help="Source directory containing dotfiles",
)
def init(source_dir: str) -> None:
    """Initialize the configuration file with a source directory."""
    config_path = get_config_path(resolve_home_dir(os.environ))
    console.print(
        f"[cyan]Initializing config with source directory:[/] [bold blue]{source_dir}"
    )
    try:
        initialize_config(source_dir, config_path)
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()
    console.print(f"[green]Configuration file created at[/] [bold blue]{config_path}")


@cli.command()
@click.option("--file", "-f", "file", help="File to restore, relative to the home directory")
@click.option(
    "--version",
    "-V",
    type=click.IntRange(min=0),
    help="Backup version (timestamp) to restore. Defaults to the latest",
)
@click.option("--dry-run", "-d", is_flag=True, help="Show what would be restored")
@click.option("--keep-backups", "-k", is_flag=True, help="Keep backup files after restoring")
@click.option("--yes", "-y", is_flag=True, help="Delete orphaned files without asking")
def restore(
    file: Optional[str],
    version: Optional[int],
    dry_run: bool,
    keep_backups: bool,
    yes: bool,
) -> None:
    """Restore files from backups.

    Without --file, the latest backup of every file is restored and installed
    files without a backup are removed. With an empty backup store this
    installs from the source directory instead.

    Examples:

      # Restore everything
      dotkeep restore

      # Restore one version of .bashrc
      dotkeep restore --file .bashrc --version 1700000000
    """
    try:
        manager = RestoreManager(
            load_paths(),
            console=console,
            confirm=(lambda prompt: True) if yes else None,
        )
        report = manager.restore(
            file=file, version=version, dry_run=dry_run, keep_backups=keep_backups
        )
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()
    print_summary(report)


@cli.command()
@click.option("--file", "-f", "file", help="Only list backups of this file")
def backups(file: Optional[str]) -> None:
    """List available backups."""
    try:
        store = BackupStore(load_paths().backup_dir, console)
        if file:
            groups = {file: store.find_all_versions(file)}
        else:
            groups = store.list_all()
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()

    if not any(groups.values()):
        if file:
            console.print(f"[yellow]No backups found for[/] [bold blue]{file}")
        else:
            console.print("[yellow]No backups found")
        return

    table = Table(title=f"Backup versions for {file}" if file else "All backup files")
    table.add_column("File", style="bold blue")
    table.add_column("Version", style="bold green")
    table.add_column("Date (UTC)", style="cyan")
    table.add_column("Backup", style="blue")

    for filename, entries in groups.items():
        for entry in entries:
            try:
                date = datetime.fromtimestamp(entry.version, tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S"
                )
            except (OverflowError, OSError, ValueError):
                date = str(entry.version)
            table.add_row(filename, str(entry.version), date, entry.path.name)

    console.print(table)


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
def reset(force: bool) -> None:
    """Remove all backup files."""
    try:
        WipeManager(load_paths(), console=console).wipe(force=force)
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()


@cli.command()
@click.option("--verbose", "-v", is_flag=True, help="Show line differences for modified files")
def status(verbose: bool) -> None:
    """Show the installation status of each dotfile."""
    try:
        StatusManager(load_paths(), console=console).status(verbose=verbose)
    except DotfilesError as e:
        console.print(f"[red]Error: {e}")
        raise click.Abort()


def main() -> None:
    """Entry point for the dotkeep CLI."""
    cli()


if __name__ == "__main__":
    main()
