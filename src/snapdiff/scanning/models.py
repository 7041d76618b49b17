"""Scan result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from snapdiff.state.models import Snapshot


@dataclass(slots=True)
class ScanResult:
    """Outcome of a directory scan.

    Attributes:
        root: Root directory that was scanned.
        snapshot: Records keyed by path relative to ``root``.
        errors: Relative paths skipped in lenient mode mapped to the failure message.
        elapsed_seconds: Wall-clock duration of the scan.
    """

    root: Path
    snapshot: Snapshot = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    elapsed_seconds: float = 0.0
