"""Data classes for parsed git output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple


@dataclass
class FileStat:
    """Line counts for one file from `git diff --numstat`."""

    insertions: int = 0
    deletions: int = 0


@dataclass
class DiffTotals:
    """Running totals across every file of a numstat block."""

    insertions: int = 0
    deletions: int = 0
    lines: int = 0
    files: int = 0

    def add(self, stat: FileStat) -> None:
        self.insertions += stat.insertions
        self.deletions += stat.deletions
        self.lines = self.insertions + self.deletions
        self.files += 1


@dataclass
class DiffStats:
    """Parsed `git diff --numstat` output."""

    total: DiffTotals = field(default_factory=DiffTotals)
    files: dict[str, FileStat] = field(default_factory=dict)

    def summary(self) -> str:
        """Get a summary string."""
        if not self.files:
            return "No changes"
        return (
            f"{self.total.files} file(s) changed, "
            f"{self.total.insertions} insertions(+), {self.total.deletions} deletions(-)"
        )


@dataclass
class DiffEntry:
    """One line of `git diff-index` / `git diff-files` raw output."""

    mode_index: str
    mode_repo: str
    path: str
    sha_repo: str
    sha_index: str
    type: str


@dataclass
class TreeEntry:
    """A blob or subtree from `git ls-tree`."""

    mode: str
    sha: str


@dataclass
class IndexEntry:
    """A staged file from `git ls-files --stage`."""

    path: str
    mode_index: str
    sha_index: str
    stage: str


class BranchEntry(NamedTuple):
    """A branch name and whether it is checked out."""

    name: str
    current: bool = False


class StashEntry(NamedTuple):
    """A stash slot and its description."""

    index: int
    message: str
