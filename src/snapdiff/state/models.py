"""Snapshot data models describing scanned directory trees."""

from __future__ import annotations

from typing import Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

ROOT_KEY = "."
BYTES_PER_MB = 1024 * 1024


class FileRecord(BaseModel):
    """Metadata describing one filesystem entry within a snapshot.

    Attributes:
        path: Path relative to the scan root using forward slashes.
        size: Size in bytes; always zero for directories.
        mod_time: Modification time in whole unix seconds.
        is_dir: Whether the entry is a directory.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    path: str = Field(alias="Path")
    size: int = Field(default=0, ge=0, alias="Size")
    mod_time: int = Field(default=0, alias="ModTime")
    is_dir: bool = Field(default=False, alias="IsDir")


Snapshot = Dict[str, FileRecord]


def total_size(snapshot: Mapping[str, FileRecord]) -> int:
    """Return the aggregate size in bytes of every file in the snapshot."""
    return sum(record.size for record in snapshot.values() if not record.is_dir)


def total_size_mb(snapshot: Mapping[str, FileRecord]) -> float:
    return total_size(snapshot) / BYTES_PER_MB


def count_entries(snapshot: Mapping[str, FileRecord]) -> dict[str, int]:
    """Return file and directory counts, excluding the root entry.

    Args:
        snapshot: Snapshot to summarize.

    Returns:
        dict[str, int]: Mapping with ``files`` and ``directories`` counts.
    """
    files = 0
    directories = 0
    for key, record in snapshot.items():
        if key == ROOT_KEY:
            continue
        if record.is_dir:
            directories += 1
        else:
            files += 1
    return {"files": files, "directories": directories}


__all__ = [
    "ROOT_KEY",
    "BYTES_PER_MB",
    "FileRecord",
    "Snapshot",
    "total_size",
    "total_size_mb",
    "count_entries",
]
