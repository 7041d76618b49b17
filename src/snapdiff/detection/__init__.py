"""Snapshot comparison for snapdiff."""

from .changes import ChangeKind, ChangeSet, detect_changes

__all__ = ["ChangeKind", "ChangeSet", "detect_changes"]
