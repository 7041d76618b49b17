"""Shared fixtures for snapdiff tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

FIXED_MTIME = 1_700_000_000

requires_raw_filenames = pytest.mark.skipif(
    sys.platform != "linux", reason="filesystem must accept filenames that are not UTF-8"
)


def write_file(path: Path, content: str, *, mtime: int = FIXED_MTIME) -> Path:
    """Create ``path`` with ``content`` and pin its modification time.

    Args:
        path: File to create; parent directories are created as needed.
        content: Text written to the file.
        mtime: Modification time applied to the file.

    Returns:
        Path: The written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """Return a small directory tree with nested files."""
    root = tmp_path / "tree"
    write_file(root / "a.txt", "0123456789")
    write_file(root / "docs" / "readme.md", "hello")
    write_file(root / "docs" / "nested" / "deep.bin", "x" * 100)
    return root


def write_raw_name(directory: Path, name: bytes, content: bytes = b"data") -> str:
    """Create a file named by raw ``name`` bytes inside ``directory``.

    Returns:
        str: The file name as ``os.scandir`` reports it (undecodable bytes become
        lone surrogates).
    """
    target = os.path.join(os.fsencode(directory), name)
    with open(target, "wb") as handle:
        handle.write(content)
    os.utime(target, (FIXED_MTIME, FIXED_MTIME))
    return os.fsdecode(name)
