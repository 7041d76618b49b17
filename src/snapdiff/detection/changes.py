"""Classify differences between two snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Mapping

from snapdiff.state.models import ROOT_KEY, FileRecord


class ChangeKind(str, Enum):
    """Category assigned to a changed path."""

    ADDED = "ADDED"
    REMOVED = "REMOVED"
    MODIFIED = "MODIFIED"


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Differences between a previous and a current snapshot.

    Each list is sorted lexicographically by path and no path appears in more
    than one list.

    Attributes:
        added: Paths present only in the current snapshot.
        removed: Paths present only in the previous snapshot.
        modified: Paths present in both whose size or modification time differ.
    """

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.added) + len(self.removed) + len(self.modified)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
        }

    def entries(self) -> Iterator[tuple[ChangeKind, str]]:
        """Yield ``(kind, path)`` pairs: added first, then removed, then modified."""
        for path in self.added:
            yield ChangeKind.ADDED, path
        for path in self.removed:
            yield ChangeKind.REMOVED, path
        for path in self.modified:
            yield ChangeKind.MODIFIED, path


def _differs(before: FileRecord, after: FileRecord, include_type_changes: bool) -> bool:
    if before.size != after.size or before.mod_time != after.mod_time:
        return True
    return include_type_changes and before.is_dir != after.is_dir


def detect_changes(
    previous: Mapping[str, FileRecord],
    current: Mapping[str, FileRecord],
    *,
    include_type_changes: bool = False,
) -> ChangeSet:
    """Compare two snapshots and classify every differing path.

    The scan root (``"."``) is never reported as modified. A path that only
    switched between file and directory is not reported unless
    ``include_type_changes`` is set.

    Args:
        previous: Snapshot from the earlier run.
        current: Snapshot from the current run.
        include_type_changes: Also report paths whose directory flag flipped.

    Returns:
        ChangeSet: Sorted added, removed, and modified paths.
    """
    added = sorted(path for path in current if path not in previous)
    removed = sorted(path for path in previous if path not in current)
    modified = sorted(
        path
        for path, after in current.items()
        if path != ROOT_KEY
        and path in previous
        and _differs(previous[path], after, include_type_changes)
    )
    return ChangeSet(added=added, removed=removed, modified=modified)
