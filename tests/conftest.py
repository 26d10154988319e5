"""Shared fixtures: store paths and fake filesystem backends."""

from __future__ import annotations

import errno
import os
from typing import TYPE_CHECKING

import pytest

from filekv.backend import FileBackend

if TYPE_CHECKING:
    from pathlib import Path


class DeniedBackend(FileBackend):
    """Reports every existing file as not readable/writable."""

    def accessible(self, path: Path) -> bool:
        return False


class StatFailsBackend(FileBackend):
    def __init__(self, exc: OSError) -> None:
        self.exc = exc

    def stat(self, path: Path) -> os.stat_result:
        raise self.exc


class WriteFailsBackend(FileBackend):
    """Loads normally, fails every write with EIO."""

    def __init__(self) -> None:
        self.attempts = 0

    def write(self, path: Path, data: bytes, *, atomic: bool = True) -> None:
        self.attempts += 1
        raise OSError(errno.EIO, "simulated write failure", str(path))


class RecordingBackend(FileBackend):
    """Real filesystem, but remembers every payload written."""

    def __init__(self) -> None:
        self.writes: list[bytes] = []

    def write(self, path: Path, data: bytes, *, atomic: bool = True) -> None:
        self.writes.append(data)
        super().write(path, data, atomic=atomic)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "db.json"


@pytest.fixture
def recording_backend() -> RecordingBackend:
    return RecordingBackend()
