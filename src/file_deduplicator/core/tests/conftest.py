"""Shared fixtures for core tests."""

import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from ..models import FileEntry


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing files under tmp_path, optionally with a fixed mtime."""

    def _make(name: str, content: bytes, mtime: float | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def entry_for() -> Callable[[Path], FileEntry]:
    """Return a factory snapshotting an existing file as a FileEntry."""

    def _entry(path: Path) -> FileEntry:
        stat = path.stat()
        return FileEntry(
            file_path=path,
            filename=path.name,
            size_bytes=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime),
        )

    return _entry
