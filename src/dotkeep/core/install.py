"""Install and uninstall dotfiles.

Both operations walk the source tree and handle each tracked file on its own.
A file is considered unchanged only when its bytes match the source exactly;
modification times are never consulted, so re-running an install does not
touch files that are already in place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .backup import BackupStore
from .commands import (
    copy_file,
    files_identical,
    iter_tracked_files,
    remove_file,
    require_source_dir,
)
from .errors import BackupNotFoundError, DotfilesError
from .paths import DotfilesPaths, ensure_parent_dirs
from .report import Outcome, OperationReport

logger = logging.getLogger(__name__)


class InstallManager:
    """Copies dotfiles into the home directory and takes them out again.

    Attributes:
        paths (DotfilesPaths): Home, backup and source directories.
        store (BackupStore): Backup store used for overwritten files.
        console (Console): Rich console for per-file output.
    """

    def __init__(
        self,
        paths: DotfilesPaths,
        store: Optional[BackupStore] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.paths = paths
        self.console = console or Console()
        self.store = store or BackupStore(paths.backup_dir, self.console)

    def install(
        self,
        dry_run: bool = False,
        force: bool = False,
        backup: bool = True,
        verbose: bool = False,
    ) -> OperationReport:
        """Install every tracked file from the source directory.

        Args:
            dry_run (bool): Report what would happen without touching the disk.
            force (bool): Overwrite targets whose content differs from the source.
            backup (bool): Back up a differing target before overwriting it.
            verbose (bool): Print per-file detail.

        Returns:
            OperationReport: One result per tracked file.

        Raises:
            MissingDirectoryError: If the source directory does not exist.
        """
        source_dir = self.paths.source_dir
        require_source_dir(source_dir)
        report = OperationReport("install", dry_run)

        if verbose:
            self.console.print(
                f"[cyan]Installing dotfiles from[/] [bold blue]{source_dir}[/] "
                f"to [bold blue]{self.paths.home_dir}[/]"
            )
            if dry_run:
                self.console.print("[bold yellow]Dry run mode: no files will be copied")
        else:
            self.console.print("[bold magenta]Installing dotfiles...")

        for relative_path in iter_tracked_files(source_dir):
            try:
                self._install_file(relative_path, report, dry_run, force, backup, verbose)
            except DotfilesError as e:
                logger.error("Failed to install %s: %s", relative_path, e)
                self.console.print(f"  [red]Failed:[/] [bold blue]{relative_path}[/] ({e})")
                report.add(relative_path, Outcome.FAILED, message=str(e))

        self.console.print("[green]Installation complete.")
        self.console.print(
            "[cyan]You can now run 'restore' to revert to original files at any time."
        )
        return report

    def _install_file(
        self,
        relative_path: Path,
        report: OperationReport,
        dry_run: bool,
        force: bool,
        backup: bool,
        verbose: bool,
    ) -> None:
        source_path = self.paths.source_dir / relative_path
        target_path = self.paths.target_for(relative_path)

        if verbose:
            self.console.print(f"  [cyan]Processing:[/] [bold blue]{source_path}[/]")
            self.console.print(
                f"    [cyan]Target path:[/] [bold blue]{self.paths.display(target_path)}[/]"
            )

        ensure_parent_dirs(target_path, dry_run)

        backup_path = None
        if target_path.exists():
            if files_identical(source_path, target_path):
                if verbose:
                    self.console.print(f"  [cyan]Unchanged:[/] [bold blue]{relative_path}[/]")
                report.add(relative_path, Outcome.UNCHANGED)
                return

            if not force:
                self.console.print(
                    f"  [yellow]Skipped:[/] [bold blue]{relative_path}[/] "
                    "(already exists, use --force to overwrite)"
                )
                report.add(relative_path, Outcome.SKIPPED, message="needs --force")
                return

            if backup:
                self.paths.ensure_backup_dir(dry_run)
                backup_path = self.store.create_backup(target_path, dry_run)
            outcome = Outcome.OVERWRITTEN
        else:
            outcome = Outcome.COPIED

        if dry_run:
            self.console.print(
                f"  [bold yellow][Dry run] Would copy:[/] [bold blue]{relative_path}[/]"
            )
        else:
            copy_file(source_path, target_path)
            self.console.print(f"  [green]Copied:[/] [bold blue]{relative_path}[/]")
        logger.debug("%s %s -> %s", outcome.value, source_path, target_path)
        report.add(relative_path, outcome, backup=backup_path)

    def uninstall(
        self,
        dry_run: bool = False,
        force: bool = False,
        verbose: bool = False,
        keep_backups: bool = False,
    ) -> OperationReport:
        """Remove installed dotfiles, putting backups back where they exist.

        Args:
            dry_run (bool): Report what would happen without touching the disk.
            force (bool): Also remove targets that differ from the source.
            verbose (bool): Print per-file detail.
            keep_backups (bool): Leave consumed backups in the store.

        Returns:
            OperationReport: One result per tracked file.
        """
        source_dir = self.paths.source_dir
        require_source_dir(source_dir)
        report = OperationReport("uninstall", dry_run)

        if verbose:
            self.console.print(
                f"[cyan]Uninstalling dotfiles from[/] [bold blue]{self.paths.home_dir}[/]"
            )
            if dry_run:
                self.console.print("[bold yellow]Dry run mode: no files will be modified")
        else:
            self.console.print("[bold magenta]Uninstalling dotfiles...")

        for relative_path in iter_tracked_files(source_dir):
            try:
                self._uninstall_file(relative_path, report, dry_run, force, verbose, keep_backups)
            except DotfilesError as e:
                logger.error("Failed to uninstall %s: %s", relative_path, e)
                self.console.print(f"  [red]Failed:[/] [bold blue]{relative_path}[/] ({e})")
                report.add(relative_path, Outcome.FAILED, message=str(e))

        if dry_run:
            self.console.print("[bold yellow]Dry run - no files were actually modified")
        else:
            self.console.print("[green]Uninstallation complete.")
        return report

    def _uninstall_file(
        self,
        relative_path: Path,
        report: OperationReport,
        dry_run: bool,
        force: bool,
        verbose: bool,
        keep_backups: bool,
    ) -> None:
        source_path = self.paths.source_dir / relative_path
        target_path = self.paths.target_for(relative_path)

        if not target_path.exists():
            if verbose:
                self.console.print(
                    f"  [yellow]Target file does not exist:[/] "
                    f"[bold blue]{self.paths.display(target_path)}[/]"
                )
            report.add(relative_path, Outcome.SKIPPED, message="not installed")
            return

        if not force and not files_identical(source_path, target_path):
            self.console.print(
                f"  [yellow]Skipped (modified):[/] [bold blue]{relative_path}[/] "
                "(use --force to remove)"
            )
            report.add(relative_path, Outcome.SKIPPED, message="modified, use --force")
            return

        try:
            entry = self.store.find_latest(relative_path)
        except BackupNotFoundError:
            entry = None

        if entry is not None:
            self.console.print(
                f"  [cyan]Uninstalling:[/] [bold blue]{relative_path}[/] (restoring backup)"
            )
            if dry_run:
                if verbose:
                    self.console.print(
                        f"  [bold yellow][Dry run] Would restore from backup:[/] "
                        f"[bold blue]{entry.path.name}[/]"
                    )
            else:
                copy_file(entry.path, target_path)
                if not keep_backups:
                    self.store.remove(entry.path)
            report.add(relative_path, Outcome.RESTORED, backup=entry.path)
            return

        self.console.print(f"  [cyan]Uninstalling:[/] [bold blue]{relative_path}[/]")
        if dry_run:
            if verbose:
                self.console.print(
                    f"  [bold yellow][Dry run] Would remove:[/] "
                    f"[bold blue]{self.paths.display(target_path)}[/]"
                )
        else:
            remove_file(target_path)
        report.add(relative_path, Outcome.REMOVED)
