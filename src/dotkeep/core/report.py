"""Per-file outcomes and operation summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple


class Outcome(str, Enum):
    """Terminal state of one file within one operation."""

    COPIED = "copied"
    OVERWRITTEN = "overwritten"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    RESTORED = "restored"
    REMOVED = "removed"
    INSTALLED_FROM_SOURCE = "installed from source"
    NOTHING_TO_RESTORE = "nothing to restore"
    FAILED = "failed"


class FileStatus(str, Enum):
    """Installation state reported by ``status``."""

    INSTALLED = "installed"
    MODIFIED = "modified"
    MISSING = "missing"


@dataclass
class FileResult:
    """Outcome for a single tracked file.

    Attributes:
        path (Path): Path relative to the source or home root.
        outcome (Outcome): What happened to the file.
        backup (Optional[Path]): Backup created or consumed, if any.
        message (str): Extra detail, e.g. the error text for failures.
    """

    path: Path
    outcome: Outcome
    backup: Optional[Path] = None
    message: str = ""


@dataclass
class OperationReport:
    """Collected results of an install, uninstall or restore run."""

    operation: str
    dry_run: bool = False
    results: List[FileResult] = field(default_factory=list)

    def add(
        self,
        path: Path,
        outcome: Outcome,
        backup: Optional[Path] = None,
        message: str = "",
    ) -> FileResult:
        result = FileResult(path, outcome, backup, message)
        self.results.append(result)
        return result

    def paths(self, outcome: Outcome) -> List[Path]:
        return [r.path for r in self.results if r.outcome is outcome]

    def counts(self) -> Dict[Outcome, int]:
        counts: Dict[Outcome, int] = {}
        for result in self.results:
            counts[result.outcome] = counts.get(result.outcome, 0) + 1
        return counts

    @property
    def failures(self) -> List[Tuple[Path, str]]:
        return [(r.path, r.message) for r in self.results if r.outcome is Outcome.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class StatusEntry:
    """Status of one entry directly below the source root."""

    path: Path
    status: FileStatus
    is_dir: bool = False
    line_counts: Optional[Tuple[int, int]] = None
    differences: List[Tuple[int, str, str]] = field(default_factory=list)


@dataclass
class StatusReport:
    """Result of a ``status`` run."""

    source_dir: Path
    entries: List[StatusEntry] = field(default_factory=list)

    def count(self, status: FileStatus) -> int:
        return sum(1 for entry in self.entries if entry.status is status)

    @property
    def total(self) -> int:
        return len(self.entries)
