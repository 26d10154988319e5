"""FileBackend: the filesystem operations a Store needs, and nothing else.

Kept behind a small class so tests (and unusual platforms) can substitute
their own stat/read/write behaviour.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from stat import S_IMODE


class FileBackend:
    """Platform filesystem access for a single store file."""

    def stat(self, path: Path) -> os.stat_result:
        """Raises FileNotFoundError for the fresh-store case."""
        return path.stat()

    def accessible(self, path: Path) -> bool:
        """True when the current process may both read and write path."""
        return os.access(path, os.R_OK | os.W_OK)

    def read(self, path: Path) -> bytes:
        return path.read_bytes()

    def write(self, path: Path, data: bytes, *, atomic: bool = True) -> None:
        """Replace the full content of path with data.

        With atomic=True the bytes go to a sibling temp file which is then
        renamed over path, so readers see either the old or the new content.
        The replacement keeps the permission bits of the file it replaces.
        If the directory refuses the temp file but path itself exists, the
        content is overwritten in place instead.
        """
        if not atomic:
            self._write_in_place(path, data)
            return

        try:
            mode: int | None = S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            mode = None

        tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            f = tmp.open("wb")
        except PermissionError:
            if mode is None:
                raise
            self._write_in_place(path, data)
            return
        try:
            with f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            if mode is not None:
                os.chmod(tmp, mode)
            tmp.replace(path)
        except BaseException:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise

    def _write_in_place(self, path: Path, data: bytes) -> None:
        with path.open("wb") as f:
            f.write(data)
