"""Exception types raised by the dotkeep core."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class DotfilesError(Exception):
    """Base class for all dotkeep errors.

    Attributes:
        path (Optional[Path]): Path the failed operation was working on, if any.
    """

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class MissingDirectoryError(DotfilesError):
    """A required directory (backup or source) does not exist."""


class MissingSourceError(DotfilesError):
    """A file that should be copied or backed up does not exist."""


class BackupNotFoundError(DotfilesError):
    """No backup matches the requested file and version."""


class FileOperationError(DotfilesError):
    """A copy, remove or mkdir failed in the underlying filesystem."""


class InvalidPathError(DotfilesError):
    """A file name could not be extracted from a path."""


class ConfigError(DotfilesError):
    """The configuration file could not be read or is invalid."""
