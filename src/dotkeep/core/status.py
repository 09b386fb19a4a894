"""Installation status of the dotfiles in the source directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console

from .commands import files_identical, is_blacklisted, require_source_dir
from .paths import DotfilesPaths
from .report import FileStatus, StatusEntry, StatusReport

logger = logging.getLogger(__name__)

MAX_DIFFS = 3
MAX_LINE_LEN = 60


def _snippet(line: str) -> str:
    if len(line) > MAX_LINE_LEN:
        return f"{line[:MAX_LINE_LEN]}..."
    return line


def split_lines(text: str) -> List[str]:
    r"""Split on ``\n`` only, dropping a trailing ``\r`` from each line.

    Other separators such as form feeds stay part of the line. A final newline
    does not start an extra empty line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def line_differences(
    source_text: str, target_text: str, limit: int = MAX_DIFFS
) -> Tuple[Tuple[int, int], List[Tuple[int, str, str]]]:
    """Compare two texts line by line at the same positions.

    Only the first ``min(len(source), len(target))`` lines are compared; this is
    not a diff, so an inserted line shows up as a difference on every line after
    it.

    Returns:
        ((source_line_count, target_line_count), [(line_number, source, target), ...])
    """
    source_lines = split_lines(source_text)
    target_lines = split_lines(target_text)
    differences = []
    for index, (source_line, target_line) in enumerate(zip(source_lines, target_lines)):
        if len(differences) >= limit:
            break
        if source_line != target_line:
            differences.append((index + 1, _snippet(source_line), _snippet(target_line)))
    return (len(source_lines), len(target_lines)), differences


class StatusManager:
    """Reports which dotfiles are installed, modified or missing."""

    def __init__(self, paths: DotfilesPaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console()

    def check(self, verbose: bool = False) -> StatusReport:
        """Classify every entry directly below the source directory."""
        source_dir = self.paths.source_dir
        require_source_dir(source_dir)
        report = StatusReport(source_dir)

        for source_path in sorted(source_dir.iterdir(), key=lambda p: p.name):
            relative_path = source_path.relative_to(source_dir)
            if is_blacklisted(relative_path):
                continue
            target_path = self.paths.target_for(relative_path)

            if source_path.is_dir():
                status = FileStatus.INSTALLED if target_path.is_dir() else FileStatus.MISSING
                report.entries.append(StatusEntry(relative_path, status, is_dir=True))
                continue
            if not source_path.is_file():
                continue

            if not target_path.exists():
                entry = StatusEntry(relative_path, FileStatus.MISSING)
            elif files_identical(source_path, target_path):
                entry = StatusEntry(relative_path, FileStatus.INSTALLED)
            else:
                entry = StatusEntry(relative_path, FileStatus.MODIFIED)
                if verbose:
                    self._add_differences(entry, source_path, target_path)
            report.entries.append(entry)

        return report

    @staticmethod
    def _add_differences(entry: StatusEntry, source_path: Path, target_path: Path) -> None:
        try:
            # Keep carriage returns intact for split_lines
            source_text = source_path.read_bytes().decode("utf-8")
            target_text = target_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot show differences for %s: %s", entry.path, e)
            return
        entry.line_counts, entry.differences = line_differences(source_text, target_text)

    def status(self, verbose: bool = False) -> StatusReport:
        """Print the status of every dotfile and a summary."""
        report = self.check(verbose)
        self.console.print(
            f"[bold magenta]Dotfiles Status[/] [cyan](source: {report.source_dir})[/]"
        )

        for entry in report.entries:
            if entry.status is FileStatus.INSTALLED:
                self.console.print(f"  [green]✓[/] [bold blue]{entry.path}[/] [green]Installed")
            elif entry.status is FileStatus.MISSING:
                self.console.print(f"  [red]✗[/] [bold blue]{entry.path}[/] [red]Not installed")
            else:
                self.console.print(f"  [yellow]![/] [bold blue]{entry.path}[/] [yellow]Modified")
                if verbose and entry.line_counts is not None:
                    source_count, target_count = entry.line_counts
                    self.console.print(
                        f"    [cyan]Source:[/] {source_count} lines, "
                        f"[cyan]Target:[/] {target_count} lines",
                        highlight=False,
                    )
                    for line_number, source_line, target_line in entry.differences:
                        self.console.print(f"    Line {line_number}:", highlight=False)
                        self.console.print(f"      Source: {source_line}", markup=False)
                        self.console.print(f"      Target: {target_line}", markup=False)
                    self.console.print()

        self.console.print("\n[bold magenta]Summary:")
        self.console.print(f"  [cyan]Total files and directories:[/] [blue]{report.total}")
        self.console.print(
            f"  [green]Installed:[/] [blue]{report.count(FileStatus.INSTALLED)}"
        )
        self.console.print(f"  [yellow]Modified:[/] [blue]{report.count(FileStatus.MODIFIED)}")
        self.console.print(f"  [red]Not installed:[/] [blue]{report.count(FileStatus.MISSING)}")
        return report
