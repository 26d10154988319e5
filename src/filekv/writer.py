"""BackgroundWriter: detached, ordered writes for async_write stores.

One daemon thread drains a FIFO queue, so writes land on disk in exactly the
order they were submitted. An older snapshot can never overwrite a newer one.

Failures never reach the submitting caller. They are logged, kept on
``last_error`` and passed to ``on_error`` when one is given.

The worker is a daemon thread, so an atexit hook drains every live writer:
writes submitted before a normal interpreter exit still reach the disk.
A hard kill (SIGKILL, os._exit) drops whatever is still queued.
"""

from __future__ import annotations

import atexit
import logging
import queue
import threading
import weakref
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("filekv.writer")

_STOP = object()

# Writers with a running worker thread, drained at interpreter exit.
_live: weakref.WeakSet[BackgroundWriter] = weakref.WeakSet()


class BackgroundWriter:
    """Single-worker write queue. The thread starts lazily on first submit."""

    def __init__(
        self,
        write: Callable[[bytes], None],
        *,
        name: str = "filekv-writer",
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._write = write
        self._name = name
        self._on_error = on_error
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.last_error: BaseException | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        """Approximate number of writes not yet applied."""
        return self._queue.unfinished_tasks

    def submit(self, data: bytes) -> None:
        """Queue data for writing and return immediately."""
        self._ensure_thread()
        self._queue.put(data)

    def flush(self) -> None:
        """Block until every write submitted so far has been applied (or failed)."""
        if self._thread is None:
            return
        self._queue.join()

    def close(self) -> None:
        """Flush, then stop the worker. A later submit starts a new one."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(_STOP)
            thread.join()
            self._thread = None

    def _ensure_thread(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, daemon=True, name=self._name)
            self._thread.start()
            _live.add(self)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._apply(item)  # type: ignore[arg-type]
            finally:
                self._queue.task_done()

    def _apply(self, data: bytes) -> None:
        try:
            self._write(data)
        except Exception as exc:
            self.last_error = exc
            logger.exception("background write failed (%d bytes dropped)", len(data))
            if self._on_error is not None:
                try:
                    self._on_error(exc)
                except Exception:
                    logger.exception("on_error callback raised")
        else:
            logger.debug("background write applied (%d bytes)", len(data))


@atexit.register
def _drain_at_exit() -> None:
    for writer in list(_live):
        if writer.pending:
            logger.debug("draining %d pending write(s) at exit", writer.pending)
        writer.close()
