"""Snapshot persistence helpers for the snapdiff CLI."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from .errors import PersistError, SnapshotCorruptError, SnapshotError, SnapshotMissingError
from .models import ROOT_KEY, FileRecord, Snapshot

LOGGER = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_DIR = Path("~/.snapdiff/snapshots")


def default_snapshot_path(root: Path, directory: Path | str = DEFAULT_SNAPSHOT_DIR) -> Path:
    """Return the per-root snapshot file location inside ``directory``.

    Each scan target gets its own file named after a digest of its resolved
    path, so independent trees never share history.

    Args:
        root: Root directory being scanned.
        directory: Directory that holds snapshot files.

    Returns:
        Path: Location of the snapshot file for ``root``.
    """
    resolved = str(Path(root).expanduser().resolve())
    digest = hashlib.sha1(resolved.encode("utf-8")).hexdigest()[:16]
    return Path(directory).expanduser() / f"{digest}.json"


class SnapshotStore:
    """Read and write snapshots for a single scan target."""

    def __init__(self, path: Path | str) -> None:
        """Initialize the store with the file that backs it.

        Args:
            path: Location of the snapshot file.
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        """Return the snapshot file location.

        Returns:
            Path: File the store reads from and writes to.
        """
        return self._path

    def exists(self) -> bool:
        """Return True when a snapshot file is present at the store path."""
        return self._path.is_file()

    def last_saved(self) -> datetime | None:
        """Return when the snapshot file was last written, if it exists."""
        try:
            stamp = self._path.stat().st_mtime
        except (FileNotFoundError, NotADirectoryError):
            return None
        return datetime.fromtimestamp(stamp, tz=timezone.utc)

    def load(self) -> Snapshot:
        """Load the previously saved snapshot.

        Returns:
            Snapshot: Mapping of relative paths to file records.

        Raises:
            SnapshotMissingError: If no snapshot file is present.
            SnapshotCorruptError: If stored data cannot be decoded.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise SnapshotMissingError(f"No snapshot found at {self._path}") from exc
        except OSError as exc:
            raise SnapshotError(f"Unable to read snapshot {self._path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SnapshotCorruptError(f"Invalid snapshot data in {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise SnapshotCorruptError(
                f"Invalid snapshot data in {self._path}: expected a JSON object."
            )

        # Keys are kept as decoded so undecodable filenames (lone surrogates) survive.
        snapshot: Snapshot = {}
        for key, value in data.items():
            try:
                record = FileRecord.model_validate(value)
            except ValidationError as exc:
                raise SnapshotCorruptError(
                    f"Invalid snapshot record {key!r} in {self._path}: {exc}"
                ) from exc
            if record.path != key:
                raise SnapshotCorruptError(
                    f"Invalid snapshot record {key!r} in {self._path}: "
                    f"path {record.path!r} does not match its key."
                )
            snapshot[key] = record

        LOGGER.debug("Loaded %d snapshot entries from %s", len(snapshot), self._path)
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        """Persist ``snapshot``, replacing any previous file in full.

        Args:
            snapshot: Snapshot to serialize.

        Raises:
            PersistError: If the file cannot be written.
        """
        payload = {key: record.model_dump(by_alias=True) for key, record in snapshot.items()}
        serialized = json.dumps(payload, indent=2, sort_keys=True)
        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(serialized)
                    handle.write("\n")
                os.replace(temp_name, self._path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistError(f"Unable to write snapshot {self._path}: {exc}") from exc

        LOGGER.debug("Saved %d snapshot entries to %s", len(snapshot), self._path)


__all__ = [
    "SnapshotStore",
    "DEFAULT_SNAPSHOT_DIR",
    "default_snapshot_path",
    "ROOT_KEY",
    "FileRecord",
    "Snapshot",
    "SnapshotError",
    "SnapshotMissingError",
    "SnapshotCorruptError",
    "PersistError",
]
