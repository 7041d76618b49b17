"""Directory scanning errors."""

from __future__ import annotations

from pathlib import Path


class ScanError(Exception):
    """Raised when a filesystem entry cannot be accessed during a scan.

    Attributes:
        path: Filesystem path of the offending entry.
        reason: Description of the underlying failure.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Error accessing path {self.path}: {reason}")
