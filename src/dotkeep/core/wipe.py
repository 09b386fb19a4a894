"""Reset functionality for dotkeep: removal of the whole backup store."""

from __future__ import annotations

import logging
import shutil
from typing import Optional

from rich.console import Console

from .errors import FileOperationError
from .paths import DotfilesPaths
from .restore import Confirm, console_confirm

logger = logging.getLogger(__name__)


class WipeManager:
    """Wipe manager class."""

    def __init__(
        self,
        paths: DotfilesPaths,
        console: Optional[Console] = None,
        confirm: Optional[Confirm] = None,
    ) -> None:
        """Initialize wipe manager."""
        self.paths = paths
        self.console = console or Console()
        self.confirm = confirm or console_confirm(self.console)

    def wipe(self, force: bool = False) -> bool:
        """Delete every backup.

        Args:
            force: Skip the confirmation prompt.

        Returns:
            True if the backup directory was removed.
        """
        backup_dir = self.paths.backup_dir
        display = self.paths.display(backup_dir)

        if not backup_dir.exists():
            self.console.print(f"[yellow]No backups directory found at[/] [bold blue]{display}")
            return False

        if not force:
            self.console.print(
                "[yellow]Warning: This will permanently delete all backup files in[/] "
                f"[bold blue]{display}"
            )
            if not self.confirm("Are you sure you want to continue?"):
                self.console.print("[yellow]Backup clearing cancelled.")
                return False

        self.console.print(f"[cyan]Clearing backups in[/] [bold blue]{display}[/]...")
        try:
            shutil.rmtree(backup_dir)
        except OSError as e:
            raise FileOperationError(
                f"Failed to remove backup directory {backup_dir}: {e}", backup_dir
            ) from e

        logger.info("Removed backup directory %s", backup_dir)
        self.console.print("[green]All backups cleared.")
        return True
