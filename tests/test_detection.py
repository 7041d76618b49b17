"""Change detector tests."""

from __future__ import annotations

from copy import deepcopy

from snapdiff.detection import ChangeKind, ChangeSet, detect_changes
from snapdiff.state.models import ROOT_KEY, FileRecord, Snapshot


def _snapshot(*records: FileRecord) -> Snapshot:
    root = FileRecord(path=ROOT_KEY, mod_time=100, is_dir=True)
    return {record.path: record for record in (root, *records)}


def _file(path: str, size: int = 10, mod_time: int = 100) -> FileRecord:
    return FileRecord(path=path, size=size, mod_time=mod_time)


def test_size_change_and_new_file() -> None:
    previous = _snapshot(_file("a.txt", size=10))
    current = _snapshot(_file("a.txt", size=20), _file("b.txt", size=5))

    changes = detect_changes(previous, current)

    assert changes.added == ["b.txt"]
    assert changes.removed == []
    assert changes.modified == ["a.txt"]


def test_removed_file() -> None:
    previous = _snapshot(_file("a.txt"), _file("b.txt"))
    current = _snapshot(_file("a.txt"))

    changes = detect_changes(previous, current)

    assert changes.removed == ["b.txt"]
    assert changes.added == []
    assert changes.modified == []


def test_modification_time_change_is_reported() -> None:
    previous = _snapshot(_file("a.txt", mod_time=100))
    current = _snapshot(_file("a.txt", mod_time=101))

    assert detect_changes(previous, current).modified == ["a.txt"]


def test_identical_snapshots_have_no_changes() -> None:
    snapshot = _snapshot(_file("a.txt"), FileRecord(path="docs", is_dir=True), _file("docs/b.txt"))

    changes = detect_changes(snapshot, deepcopy(snapshot))

    assert changes.is_empty
    assert changes.total == 0


def test_root_is_never_modified() -> None:
    previous = _snapshot(_file("a.txt"))
    current = dict(previous)
    current[ROOT_KEY] = FileRecord(path=ROOT_KEY, size=4096, mod_time=999, is_dir=True)

    changes = detect_changes(previous, current)

    assert ROOT_KEY not in changes.modified
    assert changes.is_empty


def test_type_change_alone_is_ignored_by_default() -> None:
    previous = _snapshot(FileRecord(path="item", size=0, mod_time=100, is_dir=False))
    current = _snapshot(FileRecord(path="item", size=0, mod_time=100, is_dir=True))

    assert detect_changes(previous, current).is_empty
    assert detect_changes(previous, current, include_type_changes=True).modified == ["item"]


def test_results_are_sorted_and_disjoint() -> None:
    previous = _snapshot(_file("z.txt"), _file("m.txt"), _file("c.txt", size=1), _file("b.txt"))
    current = _snapshot(_file("y.txt"), _file("a.txt"), _file("c.txt", size=2), _file("b.txt"))

    changes = detect_changes(previous, current)

    assert changes.added == ["a.txt", "y.txt"]
    assert changes.removed == ["m.txt", "z.txt"]
    assert changes.modified == ["c.txt"]
    added, removed, modified = map(set, (changes.added, changes.removed, changes.modified))
    assert not added & removed
    assert not added & modified
    assert not removed & modified
    assert all(path in previous and path in current for path in modified)


def test_inputs_are_not_mutated() -> None:
    previous = _snapshot(_file("a.txt"), _file("gone.txt"))
    current = _snapshot(_file("a.txt", size=99), _file("new.txt"))
    before = (deepcopy(previous), deepcopy(current))

    first = detect_changes(previous, current)
    second = detect_changes(previous, current)

    assert (previous, current) == before
    assert first == second


def test_empty_previous_reports_everything_added() -> None:
    current = _snapshot(_file("a.txt"))

    changes = detect_changes({}, current)

    assert changes.added == [ROOT_KEY, "a.txt"]
    assert changes.removed == []


def test_entries_order_and_counts() -> None:
    changes = ChangeSet(added=["n.txt"], removed=["o.txt"], modified=["m.txt"])

    assert list(changes.entries()) == [
        (ChangeKind.ADDED, "n.txt"),
        (ChangeKind.REMOVED, "o.txt"),
        (ChangeKind.MODIFIED, "m.txt"),
    ]
    assert changes.counts() == {"added": 1, "removed": 1, "modified": 1}
