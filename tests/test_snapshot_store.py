"""Snapshot store tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import requires_raw_filenames, write_raw_name
from snapdiff.scanning import DirectoryScanner
from snapdiff.state import (
    PersistError,
    SnapshotCorruptError,
    SnapshotMissingError,
    SnapshotStore,
    default_snapshot_path,
)
from snapdiff.state.models import FileRecord, count_entries, total_size


def test_scan_save_load_round_trip(tree: Path, tmp_path: Path) -> None:
    """Ensure a scanned snapshot survives a save/load cycle unchanged.

    Args:
        tree: Sample directory tree.
        tmp_path: Temporary directory provided by pytest.
    """
    snapshot = DirectoryScanner().scan(tree).snapshot
    store = SnapshotStore(tmp_path / "state" / "snapshot.json")

    store.save(snapshot)
    loaded = store.load()

    assert loaded == snapshot
    assert store.exists()
    assert store.last_saved() is not None


def test_saved_file_uses_wire_field_names(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "snapshot.json")
    record = FileRecord(path="a.txt", size=2**40, mod_time=1_700_000_000, is_dir=False)

    store.save({"a.txt": record})

    data = json.loads(store.path.read_text(encoding="utf-8"))
    assert data == {
        "a.txt": {"Path": "a.txt", "Size": 2**40, "ModTime": 1_700_000_000, "IsDir": False}
    }


def test_save_overwrites_previous_content(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "snapshot.json")
    store.save({"old.txt": FileRecord(path="old.txt")})

    store.save({"new.txt": FileRecord(path="new.txt")})

    assert set(store.load()) == {"new.txt"}
    assert list(tmp_path.iterdir()) == [store.path]


def test_load_missing_snapshot_raises(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "absent.json")

    assert store.last_saved() is None
    with pytest.raises(SnapshotMissingError):
        store.load()


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[1, 2, 3]",
        '{"a.txt": {"Path": "a.txt", "Size": -1, "ModTime": 0, "IsDir": false}}',
        '{"a.txt": {"Path": "a.txt", "Size": "big", "ModTime": 0, "IsDir": false}}',
    ],
)
def test_load_corrupt_snapshot_raises(tmp_path: Path, content: str) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SnapshotCorruptError):
        SnapshotStore(path).load()


def test_load_rejects_record_stored_under_another_key(tmp_path: Path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text(
        '{"a.txt": {"Path": "b.txt", "Size": 1, "ModTime": 0, "IsDir": false}}',
        encoding="utf-8",
    )

    with pytest.raises(SnapshotCorruptError, match="does not match its key"):
        SnapshotStore(path).load()


@requires_raw_filenames
def test_undecodable_filename_survives_save_and_load(tree: Path, tmp_path: Path) -> None:
    """Ensure names that are not valid UTF-8 keep their exact key across a save/load cycle.

    Args:
        tree: Sample directory tree.
        tmp_path: Temporary directory provided by pytest.
    """
    name = write_raw_name(tree, b"bad\xff.txt")
    snapshot = DirectoryScanner().scan(tree).snapshot
    store = SnapshotStore(tmp_path / "state" / "snapshot.json")

    store.save(snapshot)
    loaded = store.load()

    assert name == "bad\udcff.txt"
    assert name in loaded
    assert loaded[name].path == name
    assert loaded == snapshot


def test_save_failure_raises_persist_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = SnapshotStore(blocker / "snapshot.json")

    with pytest.raises(PersistError):
        store.save({"a.txt": FileRecord(path="a.txt")})


def test_default_snapshot_path_is_unique_per_root(tmp_path: Path) -> None:
    first = default_snapshot_path(tmp_path / "one", tmp_path / "snapshots")
    second = default_snapshot_path(tmp_path / "two", tmp_path / "snapshots")

    assert first != second
    assert first.parent == tmp_path / "snapshots"
    assert first == default_snapshot_path(tmp_path / "one", tmp_path / "snapshots")


def test_totals_exclude_directories(tree: Path) -> None:
    snapshot = DirectoryScanner().scan(tree).snapshot

    assert total_size(snapshot) == 10 + 5 + 100
    assert count_entries(snapshot) == {"files": 3, "directories": 2}
