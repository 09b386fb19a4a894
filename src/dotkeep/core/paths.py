"""Directory resolution for dotkeep.

Everything the core needs to know about where files live is collected in a
:class:`DotfilesPaths` object. It is built once per command from the
environment and the configuration, then passed to every manager, so core
code never looks at ``HOME`` or the working directory itself.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import FileOperationError

logger = logging.getLogger(__name__)

# Backup store location relative to the home directory
BACKUP_SUBDIR = Path(".local") / "share" / "dotkeep" / "backup"


def resolve_home_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the home directory.

    Uses ``HOME`` from ``environ`` (``os.environ`` when omitted) and falls back
    to :meth:`Path.home` when it is unset or empty.
    """
    env = os.environ if environ is None else environ
    home = env.get("HOME")
    if home:
        return Path(home)
    return Path.home()


def ensure_dir(path: Path, dry_run: bool = False) -> bool:
    """Create ``path`` and its parents if missing.

    Returns:
        bool: True if the directory had to be created (or would be, on a dry run).
    """
    if path.is_dir():
        return False
    if dry_run:
        return True
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"Failed to create directory {path}: {e}", path) from e
    logger.debug("Created directory %s", path)
    return True


def ensure_parent_dirs(path: Path, dry_run: bool = False) -> bool:
    """Create the parent directory of ``path`` if it is missing."""
    return ensure_dir(path.parent, dry_run)


@dataclass(frozen=True)
class DotfilesPaths:
    """The three directories every operation works with.

    Attributes:
        home_dir (Path): Root the dotfiles are installed into.
        backup_dir (Path): Flat directory holding timestamped backups.
        source_dir (Path): Directory containing the canonical dotfiles.
    """

    home_dir: Path
    backup_dir: Path
    source_dir: Path

    @classmethod
    def from_home(
        cls,
        home_dir: Path,
        source_dir: Path,
        backup_dir: Optional[Path] = None,
    ) -> "DotfilesPaths":
        """Build paths for ``home_dir`` using the default backup location."""
        return cls(
            home_dir=Path(home_dir),
            backup_dir=Path(backup_dir) if backup_dir else Path(home_dir) / BACKUP_SUBDIR,
            source_dir=Path(source_dir),
        )

    @classmethod
    def from_environment(
        cls,
        source_dir: str,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DotfilesPaths":
        """Build paths from the environment and a configured source directory.

        A relative ``source_dir`` is resolved against the current working
        directory and ``~`` is expanded against the resolved home directory.
        """
        home_dir = resolve_home_dir(environ)
        if source_dir == "~" or source_dir.startswith("~/"):
            source = home_dir / source_dir[2:]
        else:
            source = Path(source_dir)
        return cls.from_home(home_dir, source.absolute())

    def ensure_backup_dir(self, dry_run: bool = False) -> bool:
        """Create the backup directory on demand."""
        created = ensure_dir(self.backup_dir, dry_run)
        if created and not dry_run:
            logger.info("Created backup directory: %s", self.backup_dir)
        return created

    def target_for(self, relative_path: Path) -> Path:
        """Return the home-tree path for a tracked file."""
        return self.home_dir / relative_path

    def display(self, path: Path) -> str:
        """Format ``path`` for output, abbreviating the home directory to ``~``."""
        try:
            return f"~/{path.relative_to(self.home_dir)}"
        except ValueError:
            return str(path)
