"""Shared file helpers for dotkeep operations."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterator, Sequence

from .config import CONFIG_FILENAME
from .errors import FileOperationError, MissingDirectoryError

logger = logging.getLogger(__name__)

# Substrings that exclude a relative path from every operation
BLACKLIST = (".git", CONFIG_FILENAME, "README.md", "node_modules", ".DS_Store")


def is_blacklisted(relative_path: Path, blacklist: Sequence[str] = BLACKLIST) -> bool:
    """Check whether any blacklist pattern occurs in ``relative_path``.

    This is a plain substring test, so ``mynode_modules.txt`` is excluded too.
    """
    path_str = str(relative_path)
    return any(pattern in path_str for pattern in blacklist)


def require_source_dir(source_dir: Path) -> None:
    """Raise if the configured source directory is missing."""
    if not source_dir.is_dir():
        raise MissingDirectoryError(f"Source directory '{source_dir}' does not exist", source_dir)


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every file below ``root`` as a path relative to ``root``.

    Directories are visited in name order so repeated runs report files in the
    same order.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        current = Path(dirpath)
        for filename in sorted(filenames):
            path = current / filename
            if path.is_file():
                yield path.relative_to(root)


def iter_tracked_files(
    source_dir: Path, blacklist: Sequence[str] = BLACKLIST
) -> Iterator[Path]:
    """Yield relative paths of all non-blacklisted files in the source tree."""
    for relative_path in walk_files(source_dir):
        if is_blacklisted(relative_path, blacklist):
            logger.debug("Skipping blacklisted path: %s", relative_path)
            continue
        yield relative_path


def files_identical(first: Path, second: Path) -> bool:
    """Compare two files byte for byte.

    Unreadable files compare as different instead of raising.
    """
    try:
        if first.stat().st_size != second.stat().st_size:
            return False
        return first.read_bytes() == second.read_bytes()
    except OSError as e:
        logger.debug("Could not compare %s and %s: %s", first, second, e)
        return False


def copy_file(source: Path, destination: Path) -> None:
    """Copy ``source`` over ``destination``, preserving metadata.

    A directory at ``destination`` is an error; it is never copied into.
    """
    if destination.is_dir():
        raise FileOperationError(
            f"Failed to copy {source} to {destination}: destination is a directory",
            destination,
        )
    try:
        shutil.copy2(source, destination)
    except OSError as e:
        raise FileOperationError(
            f"Failed to copy {source} to {destination}: {e}", destination
        ) from e


def remove_file(path: Path) -> None:
    """Delete a single file."""
    try:
        path.unlink()
    except OSError as e:
        raise FileOperationError(f"Failed to remove file {path}: {e}", path) from e
