"""Single-file, write-through JSON key-value store.

    from filekv import Store
    store = Store("state.json")
    store.set("last_run", "2026-10-18")
    store.get("last_run")        # {"last_run": "2026-10-18"}

The whole table lives in memory and is rewritten to the file after each
mutation (sync_on_write), either inline or on a background thread
(async_write). See filekv.store for the load rules and error behaviour.
"""

from filekv.config import StoreOptions, load_options
from filekv.errors import (
    AccessDeniedError,
    CorruptStoreError,
    EncodeError,
    InvalidArgumentError,
    StoreError,
    StoreIOError,
)
from filekv.store import Store, open_store

__all__ = [
    "AccessDeniedError",
    "CorruptStoreError",
    "EncodeError",
    "InvalidArgumentError",
    "Store",
    "StoreError",
    "StoreIOError",
    "StoreOptions",
    "load_options",
    "open_store",
]
