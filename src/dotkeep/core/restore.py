"""Restore functionality for dotkeep."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from rich.console import Console

from .backup import BackupEntry, BackupStore
from .commands import copy_file, iter_tracked_files, remove_file
from .errors import BackupNotFoundError, DotfilesError
from .install import InstallManager
from .paths import DotfilesPaths, ensure_parent_dirs
from .report import FileResult, Outcome, OperationReport

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def console_confirm(console: Console) -> Confirm:
    """Build a confirmation callback that reads an answer from ``console``.

    Only an explicit ``yes`` counts as agreement.
    """

    def confirm(prompt: str) -> bool:
        answer = console.input(f"[yellow]{prompt} (yes/no)[/] ")
        return answer.strip().lower() == "yes"

    return confirm


class RestoreManager:
    """Manage restoring dotfiles from the backup store.

    Attributes:
        paths (DotfilesPaths): Home, backup and source directories.
        store (BackupStore): Backup store to restore from.
        console (Console): Rich console for per-file output.
        confirm (Confirm): Asked before deleting a file nothing can restore.
    """

    def __init__(
        self,
        paths: DotfilesPaths,
        store: Optional[BackupStore] = None,
        console: Optional[Console] = None,
        confirm: Optional[Confirm] = None,
    ) -> None:
        """Initialize restore manager.

        Args:
            paths: Directories to operate on.
            store: Backup store. Defaults to one rooted at ``paths.backup_dir``.
            console: Output console.
            confirm: Confirmation callback. Defaults to prompting on the console.
        """
        self.paths = paths
        self.console = console or Console()
        self.store = store or BackupStore(paths.backup_dir, self.console)
        self.confirm = confirm or console_confirm(self.console)
        logger.debug("RestoreManager initialized with backup directory: %s", paths.backup_dir)

    def restore(
        self,
        file: Optional[str] = None,
        version: Optional[int] = None,
        dry_run: bool = False,
        keep_backups: bool = False,
    ) -> OperationReport:
        """Restore one file, or everything when ``file`` is None."""
        if file is None:
            if version is not None:
                logger.warning("Ignoring version %s: no file given", version)
            return self.restore_all(dry_run=dry_run, keep_backups=keep_backups)
        return self.restore_file(file, version, dry_run, keep_backups)

    def _find_backup(self, file: str, version: Optional[int]) -> Optional[Path]:
        try:
            if version is None:
                return self.store.find_latest(file).path
            return self.store.find_by_version(file, version)
        except BackupNotFoundError as e:
            logger.debug("%s", e)
            return None

    def restore_file(
        self,
        file: str,
        version: Optional[int] = None,
        dry_run: bool = False,
        keep_backups: bool = False,
    ) -> OperationReport:
        """Restore a single file from a specific or the latest backup.

        When no matching backup exists the source copy is installed instead,
        backing up whatever currently occupies the target. If there is no
        source copy either, an existing target is deleted after confirmation.

        Args:
            file: Path of the file relative to the home directory.
            version: Backup version to restore. Latest when None.
            dry_run: Report what would happen without touching the disk.
            keep_backups: Leave the consumed backup in the store.

        Returns:
            OperationReport: A report holding the single file result.
        """
        relative_path = Path(file)
        target_path = self.paths.target_for(relative_path)
        report = OperationReport("restore", dry_run)

        backup_path = self._find_backup(file, version)
        if backup_path is not None:
            self._restore_backup(backup_path, target_path, dry_run, keep_backups)
            report.add(relative_path, Outcome.RESTORED, backup=backup_path)
            return report

        wanted = f"version {version}" if version is not None else "any backup"
        source_path = self.paths.source_dir / relative_path
        if source_path.is_file():
            self.console.print(
                f"[yellow]No backup found ({wanted}) for[/] [bold blue]{file}[/], "
                "installing from source"
            )
            created = self._install_from_source(source_path, target_path, dry_run)
            report.add(relative_path, Outcome.INSTALLED_FROM_SOURCE, backup=created)
        elif target_path.exists():
            self._remove_orphan(relative_path, target_path, dry_run, report)
        else:
            self.console.print(f"[yellow]Nothing to restore for[/] [bold blue]{file}[/]")
            report.add(relative_path, Outcome.NOTHING_TO_RESTORE)
        return report

    def _restore_backup(
        self, backup_path: Path, target_path: Path, dry_run: bool, keep_backups: bool
    ) -> None:
        if dry_run:
            self.console.print(
                f"  [bold yellow][Dry run] Would restore[/] [bold blue]{backup_path.name}[/] "
                f"to [bold blue]{self.paths.display(target_path)}[/]"
            )
            return

        ensure_parent_dirs(target_path)
        copy_file(backup_path, target_path)
        self.console.print(
            f"  [green]Restored:[/] [bold blue]{self.paths.display(target_path)}[/] "
            f"from [bold blue]{backup_path.name}[/]"
        )
        if not keep_backups:
            self.store.remove(backup_path)
        logger.info("Restored %s from %s", target_path, backup_path)

    def _install_from_source(
        self, source_path: Path, target_path: Path, dry_run: bool
    ) -> Optional[Path]:
        created = None
        if target_path.exists():
            self.paths.ensure_backup_dir(dry_run)
            created = self.store.create_backup(target_path, dry_run)

        if dry_run:
            self.console.print(
                f"  [bold yellow][Dry run] Would copy[/] [bold blue]{source_path}[/] "
                f"to [bold blue]{self.paths.display(target_path)}[/]"
            )
            return created

        ensure_parent_dirs(target_path)
        copy_file(source_path, target_path)
        self.console.print(f"  [green]Copied:[/] [bold blue]{self.paths.display(target_path)}[/]")
        return created

    def _remove_orphan(
        self, relative_path: Path, target_path: Path, dry_run: bool, report: OperationReport
    ) -> FileResult:
        display = self.paths.display(target_path)
        if dry_run:
            self.console.print(
                f"  [bold yellow][Dry run] Would ask to remove[/] [bold blue]{display}[/] "
                "(no backup or source file)"
            )
            return report.add(
                relative_path, Outcome.SKIPPED, message="would ask before deleting"
            )

        if not self.confirm(f"No backup or source file for {display}. Delete it?"):
            self.console.print(f"[yellow]Kept[/] [bold blue]{display}[/]")
            return report.add(relative_path, Outcome.SKIPPED, message="deletion declined")

        remove_file(target_path)
        self.console.print(f"  [green]Removed:[/] [bold blue]{display}[/]")
        return report.add(relative_path, Outcome.REMOVED)

    def restore_all(self, dry_run: bool = False, keep_backups: bool = False) -> OperationReport:
        """Restore the latest backup of every file in the store.

        With an empty store this falls back to a full install. Otherwise each
        file name in the store is restored to the tracked file of that name,
        then installed files that had no backup are removed from the home
        directory.
        """
        snapshot = self.store.list_all()
        if not snapshot:
            self.console.print("[yellow]No backups found, installing from source instead")
            installer = InstallManager(self.paths, self.store, self.console)
            report = installer.install(dry_run=dry_run, force=True, backup=True)
            report.operation = "restore"
            return report

        report = OperationReport("restore", dry_run)
        self.console.print("[bold magenta]Restoring dotfiles from backups...")

        locations = self._tracked_locations()
        for filename, entries in snapshot.items():
            latest = self._latest(entries)
            relative_path = self._restore_location(filename, locations)
            target_path = self.paths.target_for(relative_path)
            try:
                self._restore_backup(latest.path, target_path, dry_run, keep_backups)
            except DotfilesError as e:
                logger.error("Failed to restore %s: %s", relative_path, e)
                self.console.print(f"  [red]Failed:[/] [bold blue]{relative_path}[/] ({e})")
                report.add(relative_path, Outcome.FAILED, backup=latest.path, message=str(e))
                continue
            report.add(relative_path, Outcome.RESTORED, backup=latest.path)

        self._remove_unbacked(set(snapshot), report, dry_run)

        if dry_run:
            self.console.print("[bold yellow]Dry run - no files were actually modified")
        else:
            self.console.print("[green]Restore complete.")
        return report

    @staticmethod
    def _latest(entries: List[BackupEntry]) -> BackupEntry:
        return max(entries, key=lambda entry: entry.sort_key)

    def _tracked_locations(self) -> Dict[str, List[Path]]:
        """Group tracked source paths by file name, in walk order."""
        locations: Dict[str, List[Path]] = {}
        if not self.paths.source_dir.is_dir():
            return locations
        for relative_path in iter_tracked_files(self.paths.source_dir):
            locations.setdefault(relative_path.name, []).append(relative_path)
        return locations

    @staticmethod
    def _restore_location(filename: str, locations: Dict[str, List[Path]]) -> Path:
        """Pick the home-relative path a backup group is restored to.

        Backups are keyed by file name only, so a group maps back to the
        tracked file of that name. Without one the file goes directly into the
        home directory.
        """
        candidates = locations.get(filename)
        if not candidates:
            return Path(filename)
        if len(candidates) > 1:
            logger.warning(
                "Backups of %s match several tracked files (%s), restoring to %s",
                filename,
                ", ".join(str(path) for path in candidates),
                candidates[0],
            )
        return candidates[0]

    def _remove_unbacked(
        self, backed_up: Set[str], report: OperationReport, dry_run: bool
    ) -> None:
        """Remove installed files whose name had no entry in the backup snapshot."""
        source_dir = self.paths.source_dir
        if not source_dir.is_dir():
            logger.debug("Source directory %s missing, skipping cleanup", source_dir)
            return

        for relative_path in iter_tracked_files(source_dir):
            if relative_path.name in backed_up:
                continue
            target_path = self.paths.target_for(relative_path)
            if not target_path.is_file():
                continue
            display = self.paths.display(target_path)
            try:
                if dry_run:
                    self.console.print(
                        f"  [bold yellow][Dry run] Would remove:[/] [bold blue]{display}[/]"
                    )
                else:
                    remove_file(target_path)
                    self.console.print(f"  [cyan]Removed (no backup):[/] [bold blue]{display}[/]")
            except DotfilesError as e:
                logger.error("Failed to remove %s: %s", target_path, e)
                report.add(relative_path, Outcome.FAILED, message=str(e))
                continue
            report.add(relative_path, Outcome.REMOVED)

