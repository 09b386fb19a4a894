"""Test configuration."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from dotkeep.core.backup import BackupStore
from dotkeep.core.install import InstallManager
from dotkeep.core.paths import DotfilesPaths
from dotkeep.core.restore import RestoreManager

from .helpers import FixedClock


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """Create a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Create a temporary dotfiles source directory."""
    source = tmp_path / "dotfiles"
    source.mkdir()
    return source


@pytest.fixture
def paths(home_dir: Path, source_dir: Path) -> DotfilesPaths:
    """Directories for a test run, using the default backup location."""
    return DotfilesPaths.from_home(home_dir, source_dir)


@pytest.fixture
def backup_dir(paths: DotfilesPaths) -> Path:
    """Create the backup directory."""
    paths.backup_dir.mkdir(parents=True)
    return paths.backup_dir


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def clock() -> FixedClock:
    """Settable clock for predictable backup versions."""
    return FixedClock()


@pytest.fixture
def store(paths: DotfilesPaths, console: Console, clock: FixedClock) -> BackupStore:
    """Create a backup store for testing."""
    return BackupStore(paths.backup_dir, console, clock)


@pytest.fixture
def install_manager(
    paths: DotfilesPaths, store: BackupStore, console: Console
) -> InstallManager:
    """Create an install manager for testing."""
    return InstallManager(paths, store, console)


@pytest.fixture
def restore_manager(
    paths: DotfilesPaths, store: BackupStore, console: Console
) -> RestoreManager:
    """Create a restore manager that refuses every confirmation."""
    return RestoreManager(paths, store, console, confirm=lambda prompt: False)
