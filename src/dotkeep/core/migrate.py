"""Migration of the legacy JSON configuration to YAML."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .config import Config, get_config_path, get_legacy_config_path, write_config
from .errors import FileOperationError

logger = logging.getLogger(__name__)


class MigrateManager:
    """Converts ``~/.dotkeeprc`` (JSON) into ``~/.dotkeeprc.yaml``."""

    def __init__(self, home_dir: Path, console: Optional[Console] = None):
        """Initialize migrate manager."""
        self.home_dir = home_dir
        self.console = console or Console()
        self.config_path = get_config_path(home_dir)
        self.legacy_path = get_legacy_config_path(home_dir)

    def needs_migration(self) -> bool:
        """Check whether only the legacy config is present."""
        return not self.config_path.exists() and self.legacy_path.is_file()

    def load_legacy(self) -> Optional[Config]:
        """Parse the legacy JSON config, returning None if it is unusable."""
        try:
            data = json.loads(self.legacy_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise FileOperationError(
                f"Failed to read old config file at {self.legacy_path}: {e}", self.legacy_path
            ) from e
        except ValueError as e:
            logger.warning("Ignoring unparsable legacy config %s: %s", self.legacy_path, e)
            return None

        if not isinstance(data, dict) or "source_dir" not in data:
            logger.warning("Ignoring legacy config %s: no source_dir set", self.legacy_path)
            return None

        config = Config()
        try:
            config.load_from_dict(data)
        except ValueError as e:
            logger.warning("Ignoring invalid legacy config %s: %s", self.legacy_path, e)
            return None
        return config

    def migrate(self) -> Optional[Config]:
        """Convert the legacy config and delete it.

        Returns:
            Optional[Config]: The migrated configuration, or None if there was
            nothing usable to migrate.
        """
        if not self.needs_migration():
            return None

        config = self.load_legacy()
        if config is None:
            return None

        self.console.print("Converting old JSON config to YAML format...")
        write_config(config, self.config_path)
        self.console.print(
            f"Old config file has been converted to YAML format at {self.config_path}"
        )
        try:
            self.legacy_path.unlink()
        except OSError as e:
            logger.warning("Could not remove old config file %s: %s", self.legacy_path, e)
        return config


def read_config(home_dir: Path, console: Optional[Console] = None) -> Config:
    """Load the configuration for ``home_dir``.

    Falls back to the legacy JSON file (converting it once) and then to the
    defaults when no config file exists.
    """
    config_path = get_config_path(home_dir)
    if config_path.exists():
        return Config(config_path)

    migrated = MigrateManager(home_dir, console).migrate()
    if migrated is not None:
        return migrated

    logger.debug("No configuration found in %s, using defaults", home_dir)
    return Config()
