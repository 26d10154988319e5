"""Store: an in-memory dict mirrored to a single JSON file.

    store = Store("settings.json", indent=2)
    store.set("theme", "dark")              # written through to disk
    store.get("theme", "font")              # {"theme": "dark", "font": None}
    store.remove("theme")
    store.clear()

Load rules (nothing is ever written while opening):
    missing file            -> empty table ("fresh store")
    exists, not rw          -> AccessDeniedError
    exists, empty           -> empty table
    exists, undecodable     -> CorruptStoreError, file left untouched
    any other OSError       -> StoreIOError

With sync_on_write (default) every set/remove/clear rewrites the whole file.
With async_write the encoded snapshot is handed to a background thread and
the call returns at once. Failures of such detached writes are NOT raised
to the caller: they are only logged and kept on ``last_error``. Call
``flush()`` when durability matters.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from filekv.backend import FileBackend
from filekv.config import DEFAULT_OPTIONS, StoreOptions
from filekv.errors import (
    AccessDeniedError,
    CorruptStoreError,
    EncodeError,
    InvalidArgumentError,
    StoreIOError,
)
from filekv.writer import BackgroundWriter

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from types import TracebackType

logger = logging.getLogger("filekv.store")


def _detached(value: Any) -> Any:
    """Deep copy so callers never share mutable state with the table.

    Values that refuse to be copied are kept as-is; they cannot be encoded
    either, so the next sync reports them.
    """
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error) as exc:
        logger.debug("storing uncopyable %s by reference: %s", type(value).__name__, exc)
        return value


class Store:
    """Write-through key-value store backed by one file."""

    def __init__(
        self,
        path: Path | str,
        options: StoreOptions | Mapping[str, Any] | None = None,
        *,
        backend: FileBackend | None = None,
        **overrides: Any,
    ) -> None:
        if not path or not Path(path).parts:
            msg = "Missing file path argument."
            raise InvalidArgumentError(msg)
        self._path = Path(path)
        if isinstance(options, StoreOptions):
            base = options
        else:
            base = DEFAULT_OPTIONS.merge(**(options or {}))
        self._options = base.merge(**overrides)
        self._backend = backend or FileBackend()
        self._writer: BackgroundWriter | None = None
        self._table: dict[str, Any] = {}
        self._load()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def options(self) -> StoreOptions:
        return self._options

    @property
    def last_error(self) -> BaseException | None:
        """Most recent failure of a detached write, if any."""
        if self._writer is None:
            return None
        return self._writer.last_error

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def _load(self) -> None:
        path = self._path
        try:
            st = self._backend.stat(path)
        except FileNotFoundError:
            logger.debug("no store file at %s, starting fresh", path)
            return
        except PermissionError as exc:
            raise AccessDeniedError(path) from exc
        except OSError as exc:
            raise StoreIOError(path, exc) from exc

        if not self._backend.accessible(path):
            raise AccessDeniedError(path)
        if st.st_size == 0:
            logger.debug("store file %s is empty, starting fresh", path)
            return

        try:
            data = self._backend.read(path)
        except PermissionError as exc:
            raise AccessDeniedError(path) from exc
        except OSError as exc:
            raise StoreIOError(path, exc) from exc

        try:
            table = self._options.decode(data)
        except Exception as exc:
            logger.error("store file %s is not empty and its content is not valid", path)
            raise CorruptStoreError(path, exc) from exc
        if not isinstance(table, dict):
            cause = TypeError(f"decoded {type(table).__name__}, expected a mapping")
            logger.error("store file %s does not hold a mapping", path)
            raise CorruptStoreError(path, cause)

        self._table = table
        logger.debug("loaded %d keys from %s", len(table), path)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, *keys: str) -> dict[str, Any]:
        """Return a copy of the whole table, or of just the given keys.

        Requested keys that are not stored map to None.
        """
        if not keys:
            return _detached(self._table)
        return {key: _detached(self._table.get(key)) for key in keys}

    def keys(self) -> list[str]:
        return list(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._table))

    # ------------------------------------------------------------------
    # Mutate
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Create or overwrite key. Serializability is checked at the next sync."""
        if not isinstance(key, str):
            msg = f"keys must be str, got {type(key).__name__}"
            raise TypeError(msg)
        self._table[key] = _detached(value)
        self._after_write()

    def remove(self, *keys: str) -> None:
        """Delete each key that is present. Absent keys are ignored."""
        for key in keys:
            self._table.pop(key, None)
        self._after_write()

    def clear(self) -> None:
        self._table = {}
        self._after_write()

    def _after_write(self) -> None:
        if self._options.sync_on_write:
            self.sync()

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync(self) -> None:
        """Write the current table to disk.

        Synchronous mode raises EncodeError or StoreIOError. In async mode
        the write is queued and any failure is only logged.
        """
        try:
            data = self._options.encode(self._table, self._options.indent)
        except Exception as exc:
            if not self._options.async_write:
                raise EncodeError(self._path, exc) from exc
            logger.error("cannot encode store %s, detached write skipped: %s", self._path, exc)
            self._get_writer().last_error = EncodeError(self._path, exc)
            return

        if self._options.async_write:
            self._get_writer().submit(data)
            return

        try:
            self._write(data)
        except OSError as exc:
            raise StoreIOError(self._path, exc) from exc
        logger.debug("synced %d keys to %s", len(self._table), self._path)

    def flush(self) -> None:
        """Wait until all detached writes issued so far have been applied."""
        if self._writer is not None:
            self._writer.flush()

    def close(self) -> None:
        """Flush pending detached writes and stop the writer thread.

        Does not sync: unsynced changes stay in memory only.
        """
        if self._writer is not None:
            self._writer.close()

    def _write(self, data: bytes) -> None:
        self._backend.write(self._path, data, atomic=self._options.atomic_write)

    def _get_writer(self) -> BackgroundWriter:
        if self._writer is None:
            self._writer = BackgroundWriter(self._write, name=f"filekv-writer:{self._path.name}")
        return self._writer

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> Store:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Store({str(self._path)!r}, keys={len(self._table)})"


def open_store(
    path: Path | str,
    options: StoreOptions | Mapping[str, Any] | None = None,
    *,
    backend: FileBackend | None = None,
    **overrides: Any,
) -> Store:
    """Open (or start) the store at path."""
    return Store(path, options, backend=backend, **overrides)
