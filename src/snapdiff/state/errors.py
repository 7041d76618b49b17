"""Snapshot storage errors."""


class SnapshotError(Exception):
    """Base exception for snapshot store operations."""


class SnapshotMissingError(SnapshotError):
    """Raised when no snapshot has been saved yet for a scan target."""


class SnapshotCorruptError(SnapshotError):
    """Raised when a stored snapshot cannot be decoded."""


class PersistError(SnapshotError):
    """Raised when a snapshot cannot be written to disk."""
