"""Configuration management for dotkeep."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, FileOperationError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".dotkeeprc.yaml"
LEGACY_CONFIG_FILENAME = ".dotkeeprc"

DEFAULT_CONFIG: Dict[str, Any] = {
    "source_dir": ".",
}


def get_config_path(home_dir: Path) -> Path:
    """Get the YAML config path for ``home_dir``."""
    return home_dir / CONFIG_FILENAME


def get_legacy_config_path(home_dir: Path) -> Path:
    """Get the path of the pre-YAML JSON config for ``home_dir``."""
    return home_dir / LEGACY_CONFIG_FILENAME


class Config:
    """Configuration class for dotkeep.

    Attributes:
        config (Dict[str, Any]): Raw merged configuration.
        source_dir (str): Directory containing the dotfiles to install.
        config_path (Optional[Path]): File the configuration was loaded from.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """Initialize configuration, loading ``config_path`` if it exists."""
        self.config: Dict[str, Any] = {}
        self.source_dir: str = "."
        self.config_path = config_path
        self.load_config(config_path)

    def load_config(self, config_file: Optional[Path] = None) -> None:
        """Load configuration from file."""
        # Start with default configuration
        self._merge_config(DEFAULT_CONFIG)

        if config_file is None or not config_file.exists():
            return

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(
                f"Failed to parse YAML config file at {config_file}: {e}", config_file
            ) from e

        if user_config:
            try:
                self._merge_config(user_config)
            except ValueError as e:
                raise ConfigError(f"Invalid config file at {config_file}: {e}", config_file) from e
        logger.debug("Loaded configuration from %s", config_file)

    def _merge_config(self, config: Dict[str, Any]) -> None:
        """Merge configuration with current configuration."""
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a dictionary")

        if "source_dir" in config:
            if not isinstance(config["source_dir"], str):
                raise ValueError("source_dir must be a string")
            self.source_dir = config["source_dir"]

        self.config.update(config)

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if not isinstance(self.source_dir, str):
            errors.append("source_dir must be a string")
        elif not self.source_dir:
            errors.append("source_dir must not be empty")
        return errors

    def load_from_dict(self, config_data: Dict[str, Any]) -> None:
        """Load configuration from a dictionary.

        Example:
            ```python
            config = Config()
            config.load_from_dict({"source_dir": "~/dotfiles"})
            ```
        """
        self._merge_config(config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Return the serialisable form of the configuration."""
        return {"source_dir": self.source_dir}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.config.get(key, default)


def write_config(config: Config, config_path: Path) -> None:
    """Write ``config`` to ``config_path`` as YAML."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False)
    except OSError as e:
        raise FileOperationError(
            f"Failed to write config file at {config_path}: {e}", config_path
        ) from e
    config.config_path = config_path
    logger.debug("Wrote configuration to %s", config_path)


def initialize_config(source_dir: str, config_path: Path) -> Config:
    """Create a config file pointing at ``source_dir``."""
    config = Config()
    config.load_from_dict({"source_dir": source_dir})
    write_config(config, config_path)
    return config
