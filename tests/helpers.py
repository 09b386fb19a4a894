"""Helpers shared by the test modules."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple


class FixedClock:
    """Clock returning a settable Unix time."""

    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return float(self.now)


def write_file(path: Path, content: str) -> Path:
    """Create ``path`` (and its parents) with ``content``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def snapshot_tree(root: Path) -> Dict[str, Tuple[bool, bytes, int]]:
    """Record every path below ``root`` with its content and mtime."""
    state = {}
    for path in sorted(root.rglob("*")):
        if path.is_dir():
            state[str(path.relative_to(root))] = (True, b"", 0)
        else:
            state[str(path.relative_to(root))] = (
                False,
                path.read_bytes(),
                path.stat().st_mtime_ns,
            )
    return state
