"""Directory traversal producing metadata snapshots."""

from __future__ import annotations

import logging
import os
import stat
import time
from pathlib import Path

from snapdiff.state.models import ROOT_KEY, FileRecord, Snapshot

from .errors import ScanError
from .models import ScanResult

LOGGER = logging.getLogger(__name__)


def _record(relative: str, info: os.stat_result) -> FileRecord:
    is_dir = stat.S_ISDIR(info.st_mode)
    return FileRecord(
        path=relative,
        size=0 if is_dir else info.st_size,
        mod_time=info.st_mtime_ns // 1_000_000_000,
        is_dir=is_dir,
    )


class DirectoryScanner:
    """Walk a directory tree and collect metadata for every entry."""

    def __init__(self, *, fail_fast: bool = True, follow_symlinks: bool = False) -> None:
        self.fail_fast = fail_fast
        self.follow_symlinks = follow_symlinks

    def scan(self, root: Path) -> ScanResult:
        """Scan ``root`` recursively and return its snapshot.

        The root itself is recorded under ``"."``. Directories are traversed
        depth-first with entries visited in name order.

        Args:
            root: Directory to scan.

        Returns:
            ScanResult: Snapshot of the tree plus any entries skipped in lenient mode.

        Raises:
            ScanError: If the root is unusable, or if any entry cannot be
                accessed while ``fail_fast`` is enabled.
        """
        root = Path(root).expanduser()
        started = time.perf_counter()
        LOGGER.debug("Scanning %s (fail_fast=%s)", root, self.fail_fast)

        try:
            root_info = root.stat()
        except OSError as exc:
            raise ScanError(root, exc.strerror or str(exc)) from exc
        if not stat.S_ISDIR(root_info.st_mode):
            raise ScanError(root, "not a directory")

        result = ScanResult(root=root)
        result.snapshot[ROOT_KEY] = _record(ROOT_KEY, root_info)

        stack: list[tuple[Path, str]] = [(root, "")]
        while stack:
            directory, prefix = stack.pop()
            children = self._scan_directory(directory, prefix, result)
            stack.extend(reversed(children))

        result.elapsed_seconds = time.perf_counter() - started
        LOGGER.debug(
            "Scanned %d entries under %s in %.3fs",
            len(result.snapshot),
            root,
            result.elapsed_seconds,
        )
        return result

    def _scan_directory(
        self, directory: Path, prefix: str, result: ScanResult
    ) -> list[tuple[Path, str]]:
        """Record the entries of one directory and return subdirectories to descend into."""
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            self._handle_error(directory, prefix.rstrip("/") or ROOT_KEY, exc, result)
            return []

        children: list[tuple[Path, str]] = []
        snapshot: Snapshot = result.snapshot
        for entry in entries:
            relative = f"{prefix}{entry.name}"
            try:
                info = entry.stat(follow_symlinks=self.follow_symlinks)
            except OSError as exc:
                self._handle_error(Path(entry.path), relative, exc, result)
                continue

            record = _record(relative, info)
            snapshot[relative] = record
            if record.is_dir:
                children.append((Path(entry.path), f"{relative}/"))
        return children

    def _handle_error(self, path: Path, relative: str, exc: OSError, result: ScanResult) -> None:
        reason = exc.strerror or str(exc)
        if self.fail_fast:
            raise ScanError(path, reason) from exc
        LOGGER.warning("Skipping %s: %s", path, reason)
        result.errors[relative] = reason
