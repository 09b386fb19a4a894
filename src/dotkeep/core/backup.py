"""Versioned backup store for dotfiles.

This module manages the flat directory of timestamped backups. Every backup
is a byte-for-byte copy of a file that was about to be overwritten, stored as
``<filename>.<version>`` where ``version`` is the Unix time in seconds at
which the backup was taken. Dotfiles are dot-prefixed and may contain further
dots, so backup names are always split on the *last* dot.
"""

from __future__ import annotations

import logging
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

from rich.console import Console

from .errors import (
    BackupNotFoundError,
    FileOperationError,
    InvalidPathError,
    MissingDirectoryError,
    MissingSourceError,
)

logger = logging.getLogger(__name__)

MAX_VERSION = 2**64 - 1


@dataclass(frozen=True)
class BackupEntry:
    """A single backup version of a tracked file.

    Attributes:
        filename (str): Name of the original file (``.bashrc``).
        version (int): Unix timestamp the backup was taken at.
        path (Path): Location of the backup inside the store.
    """

    filename: str
    version: int
    path: Path

    @property
    def sort_key(self) -> Tuple[int, str]:
        """Order by version, then by storage path for equal versions."""
        return self.version, str(self.path)


def backup_key(original_path: Union[str, Path]) -> str:
    """Return the store key (final path component) for a tracked file.

    Raises:
        InvalidPathError: If ``original_path`` has no file name component.
    """
    name = Path(original_path).name
    if not name or name in (".", ".."):
        raise InvalidPathError(f"Invalid file path: {original_path}")
    return name


def parse_backup_name(backup_name: str) -> Optional[Tuple[str, int]]:
    """Split a backup file name into ``(filename, version)``.

    The split happens at the last ``.``. Returns None when there is no dot or
    the suffix is not an unsigned 64-bit decimal integer.
    """
    name, dot, suffix = backup_name.rpartition(".")
    if not dot:
        return None
    if not (suffix.isascii() and suffix.isdigit()):
        return None
    version = int(suffix)
    if version > MAX_VERSION:
        return None
    return name, version


class BackupStore:
    """Manages the on-disk set of timestamped backups.

    Attributes:
        backup_dir (Path): Flat directory holding all backups.
        console (Console): Rich console for dry-run output.
        clock (Callable[[], float]): Source of the current Unix time.
    """

    def __init__(
        self,
        backup_dir: Path,
        console: Optional[Console] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.backup_dir = Path(backup_dir)
        self.console = console or Console()
        self.clock = clock

    def backup_path(self, filename: str, version: int) -> Path:
        """Get the storage path for ``filename`` at ``version``."""
        return self.backup_dir / f"{filename}.{version}"

    def create_backup(self, target_path: Path, dry_run: bool = False) -> Path:
        """Back up the current content of ``target_path``.

        Args:
            target_path (Path): File about to be overwritten.
            dry_run (bool): If True, only report the backup that would be made.

        Returns:
            Path: Location of the new (or would-be) backup.

        Raises:
            MissingDirectoryError: If the backup directory does not exist.
            MissingSourceError: If ``target_path`` does not exist.
            FileOperationError: If the copy fails.
        """
        filename = backup_key(target_path)
        version = int(self.clock())
        backup_path = self.backup_path(filename, version)

        if dry_run:
            self.console.print(f"  [bold yellow][Dry run] Would create backup at[/] {backup_path}")
            return backup_path

        if not self.backup_dir.is_dir():
            raise MissingDirectoryError(
                f"Backup directory {self.backup_dir} does not exist", self.backup_dir
            )
        if not target_path.exists():
            raise MissingSourceError(f"Source file {target_path} does not exist", target_path)

        try:
            shutil.copy2(target_path, backup_path)
        except OSError as e:
            raise FileOperationError(
                f"Failed to create backup at {backup_path}: {e}", backup_path
            ) from e

        logger.debug("Backed up %s to %s", target_path, backup_path)
        return backup_path

    def find_by_version(self, original_path: Union[str, Path], version: int) -> Path:
        """Find the backup of ``original_path`` taken at ``version``.

        Raises:
            BackupNotFoundError: If no such backup exists.
        """
        backup_path = self.backup_path(backup_key(original_path), version)
        if backup_path.is_file():
            return backup_path
        raise BackupNotFoundError(
            f"Backup version {version} not found for {original_path}", backup_path
        )

    def find_latest(self, original_path: Union[str, Path]) -> BackupEntry:
        """Find the most recent backup of ``original_path``.

        Raises:
            BackupNotFoundError: If the file has no backups.
        """
        versions = self.find_all_versions(original_path)
        if not versions:
            raise BackupNotFoundError(f"No backups found for {original_path}")
        return versions[-1]

    def find_all_versions(self, original_path: Union[str, Path]) -> List[BackupEntry]:
        """List every backup of ``original_path``, oldest first."""
        filename = backup_key(original_path)
        return self.list_all().get(filename, [])

    def list_all(self) -> Dict[str, List[BackupEntry]]:
        """Group every backup in the store by original file name.

        Entries that are not files or whose names do not parse are skipped.
        Each group is sorted oldest first. A missing store yields ``{}``.
        """
        groups: Dict[str, List[BackupEntry]] = {}
        if not self.backup_dir.is_dir():
            return groups

        for path in self.backup_dir.iterdir():
            if not path.is_file():
                continue
            parsed = parse_backup_name(path.name)
            if parsed is None:
                logger.debug("Ignoring unrecognised file in backup store: %s", path.name)
                continue
            filename, version = parsed
            groups.setdefault(filename, []).append(BackupEntry(filename, version, path))

        for entries in groups.values():
            entries.sort(key=lambda entry: entry.sort_key)
        return dict(sorted(groups.items()))

    def remove(self, backup_path: Path, dry_run: bool = False) -> None:
        """Delete a consumed backup."""
        if dry_run:
            return
        try:
            backup_path.unlink()
        except OSError as e:
            raise FileOperationError(
                f"Failed to delete backup file {backup_path}: {e}", backup_path
            ) from e
        logger.debug("Deleted backup %s", backup_path)
