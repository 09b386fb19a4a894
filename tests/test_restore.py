"""Tests for restore functionality."""

from pathlib import Path
from typing import List

from rich.console import Console

from dotkeep.core.backup import BackupStore
from dotkeep.core.install import InstallManager
from dotkeep.core.paths import DotfilesPaths
from dotkeep.core.report import Outcome
from dotkeep.core.restore import RestoreManager

from .helpers import snapshot_tree, write_file


def test_restore_specific_version(
    restore_manager: RestoreManager, home_dir: Path, backup_dir: Path
) -> None:
    """Test restoring an explicit backup version."""
    write_file(home_dir / ".vimrc", "current")
    write_file(backup_dir / ".vimrc.100", "v1")
    write_file(backup_dir / ".vimrc.200", "v2")

    report = restore_manager.restore(file=".vimrc", version=100)

    assert (home_dir / ".vimrc").read_text() == "v1"
    assert not (backup_dir / ".vimrc.100").exists()
    assert (backup_dir / ".vimrc.200").exists()
    assert report.results[0].outcome is Outcome.RESTORED


def test_restore_latest_version(
    restore_manager: RestoreManager, home_dir: Path, backup_dir: Path
) -> None:
    """Test restoring the newest backup when no version is given."""
    write_file(backup_dir / ".vimrc.100", "v1")
    write_file(backup_dir / ".vimrc.200", "v2")

    restore_manager.restore(file=".vimrc", keep_backups=True)

    assert (home_dir / ".vimrc").read_text() == "v2"
    assert (backup_dir / ".vimrc.200").exists()


def test_restore_nested_file_creates_parents(
    restore_manager: RestoreManager, home_dir: Path, backup_dir: Path
) -> None:
    """Test that restoring into a missing directory creates it."""
    write_file(backup_dir / "init.vim.100", "set number")

    restore_manager.restore(file=".config/nvim/init.vim")

    assert (home_dir / ".config" / "nvim" / "init.vim").read_text() == "set number"


def test_restore_missing_version_falls_back_to_source(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, backup_dir: Path
) -> None:
    """Test the paranoid install used when the version does not exist."""
    write_file(source_dir / ".bashrc", "source")
    write_file(home_dir / ".bashrc", "local edits")
    write_file(backup_dir / ".bashrc.100", "v1")

    report = restore_manager.restore(file=".bashrc", version=999)

    assert (home_dir / ".bashrc").read_text() == "source"
    new_backup = backup_dir / ".bashrc.1700000000"
    assert new_backup.read_text() == "local edits"
    assert (backup_dir / ".bashrc.100").read_text() == "v1"
    assert report.results[0].outcome is Outcome.INSTALLED_FROM_SOURCE
    assert report.results[0].backup == new_backup


def test_restore_fallback_creates_backup_directory(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, paths: DotfilesPaths
) -> None:
    """Test that the fallback creates the backup store when needed."""
    write_file(source_dir / ".bashrc", "source")
    write_file(home_dir / ".bashrc", "local edits")

    restore_manager.restore(file=".bashrc")

    assert (paths.backup_dir / ".bashrc.1700000000").read_text() == "local edits"


def test_restore_fallback_without_existing_target(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, paths: DotfilesPaths
) -> None:
    """Test the fallback when nothing occupies the target yet."""
    write_file(source_dir / ".bashrc", "source")

    report = restore_manager.restore(file=".bashrc")

    assert (home_dir / ".bashrc").read_text() == "source"
    assert report.results[0].backup is None
    assert not paths.backup_dir.exists()


def test_restore_orphan_declined(restore_manager: RestoreManager, home_dir: Path) -> None:
    """Test that an orphaned target survives a declined confirmation."""
    write_file(home_dir / ".orphan", "x")

    report = restore_manager.restore(file=".orphan")

    assert (home_dir / ".orphan").exists()
    assert report.results[0].outcome is Outcome.SKIPPED


def test_restore_orphan_confirmed(
    paths: DotfilesPaths, store: BackupStore, console: Console, home_dir: Path
) -> None:
    """Test that an orphaned target is deleted after confirmation."""
    prompts: List[str] = []

    def confirm(prompt: str) -> bool:
        prompts.append(prompt)
        return True

    manager = RestoreManager(paths, store, console, confirm=confirm)
    write_file(home_dir / ".orphan", "x")

    report = manager.restore(file=".orphan")

    assert not (home_dir / ".orphan").exists()
    assert len(prompts) == 1
    assert report.results[0].outcome is Outcome.REMOVED


def test_restore_nothing_to_restore(restore_manager: RestoreManager) -> None:
    """Test restoring a file that exists nowhere."""
    report = restore_manager.restore(file=".nothing")
    assert report.results[0].outcome is Outcome.NOTHING_TO_RESTORE


def test_restore_single_dry_run(
    restore_manager: RestoreManager,
    source_dir: Path,
    home_dir: Path,
    backup_dir: Path,
    tmp_path: Path,
) -> None:
    """Test single-file restore dry runs."""
    write_file(source_dir / ".bashrc", "source")
    write_file(home_dir / ".bashrc", "local")
    write_file(home_dir / ".orphan", "x")
    write_file(backup_dir / ".vimrc.100", "v1")
    before = snapshot_tree(tmp_path)

    restore_manager.restore(file=".vimrc", dry_run=True)
    restore_manager.restore(file=".bashrc", version=5, dry_run=True)
    restore_manager.restore(file=".orphan", dry_run=True)

    assert snapshot_tree(tmp_path) == before


def test_restore_all(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, backup_dir: Path
) -> None:
    """Test restoring every file and cleaning up files without backups."""
    write_file(source_dir / ".vimrc", "installed vimrc")
    write_file(source_dir / ".bashrc", "installed bashrc")
    write_file(home_dir / ".vimrc", "installed vimrc")
    write_file(home_dir / ".bashrc", "installed bashrc")
    write_file(backup_dir / ".vimrc.100", "v1")
    write_file(backup_dir / ".vimrc.200", "v2")

    report = restore_manager.restore()

    assert (home_dir / ".vimrc").read_text() == "v2"
    assert not (home_dir / ".bashrc").exists()
    assert not (backup_dir / ".vimrc.200").exists()
    assert (backup_dir / ".vimrc.100").exists()
    assert report.paths(Outcome.RESTORED) == [Path(".vimrc")]
    assert report.paths(Outcome.REMOVED) == [Path(".bashrc")]


def test_restore_all_keep_backups(
    restore_manager: RestoreManager, home_dir: Path, backup_dir: Path
) -> None:
    """Test restore-all leaving the store intact."""
    write_file(backup_dir / ".vimrc.100", "v1")
    write_file(backup_dir / ".zshrc.50", "z")

    restore_manager.restore(keep_backups=True)

    assert (home_dir / ".vimrc").read_text() == "v1"
    assert (home_dir / ".zshrc").read_text() == "z"
    assert sorted(p.name for p in backup_dir.iterdir()) == [".vimrc.100", ".zshrc.50"]


def test_restore_all_without_backups_installs(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, paths: DotfilesPaths
) -> None:
    """Test that an empty store falls back to a full install."""
    write_file(source_dir / ".vimrc", "A")
    write_file(source_dir / ".bashrc", "new")
    write_file(home_dir / ".bashrc", "old")

    report = restore_manager.restore()

    assert (home_dir / ".vimrc").read_text() == "A"
    assert (home_dir / ".bashrc").read_text() == "new"
    assert (paths.backup_dir / ".bashrc.1700000000").read_text() == "old"
    assert report.operation == "restore"


def test_restore_all_dry_run(
    restore_manager: RestoreManager,
    source_dir: Path,
    home_dir: Path,
    backup_dir: Path,
    tmp_path: Path,
) -> None:
    """Test restore-all dry run."""
    write_file(source_dir / ".bashrc", "installed")
    write_file(home_dir / ".bashrc", "installed")
    write_file(backup_dir / ".vimrc.100", "v1")
    before = snapshot_tree(tmp_path)

    report = restore_manager.restore(dry_run=True)

    assert snapshot_tree(tmp_path) == before
    assert report.paths(Outcome.RESTORED) == [Path(".vimrc")]
    assert report.paths(Outcome.REMOVED) == [Path(".bashrc")]


def test_restore_all_nested_file_returns_to_its_path(
    install_manager: InstallManager,
    restore_manager: RestoreManager,
    source_dir: Path,
    home_dir: Path,
    paths: DotfilesPaths,
) -> None:
    """Test that restore-all puts a nested backup back where it came from."""
    nested = Path(".config") / "nvim" / "init.vim"
    write_file(source_dir / nested, "new")
    write_file(home_dir / nested, "user original")
    install_manager.install(force=True, backup=True)
    assert (home_dir / nested).read_text() == "new"

    report = restore_manager.restore()

    assert (home_dir / nested).read_text() == "user original"
    assert not (home_dir / "init.vim").exists()
    assert report.paths(Outcome.RESTORED) == [nested]
    assert report.paths(Outcome.REMOVED) == []
    assert list(paths.backup_dir.iterdir()) == []


def test_restore_all_untracked_backup_goes_to_home(
    restore_manager: RestoreManager, source_dir: Path, home_dir: Path, backup_dir: Path
) -> None:
    """Test that a backup with no tracked file of its name lands in the home root."""
    write_file(source_dir / ".config" / "app" / "settings", "x")
    write_file(backup_dir / ".profile.100", "profile")

    report = restore_manager.restore(keep_backups=True)

    assert (home_dir / ".profile").read_text() == "profile"
    assert report.paths(Outcome.RESTORED) == [Path(".profile")]


def test_restore_orphan_dry_run_is_not_reported_removed(
    restore_manager: RestoreManager, home_dir: Path
) -> None:
    """Test that a dry run never claims an orphan would be deleted."""
    write_file(home_dir / ".orphan", "x")

    report = restore_manager.restore(file=".orphan", dry_run=True)

    assert (home_dir / ".orphan").exists()
    assert report.results[0].outcome is Outcome.SKIPPED
    assert report.results[0].message == "would ask before deleting"
