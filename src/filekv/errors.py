"""Exceptions raised by the store.

Every error carries the store ``path`` it concerns and chains the
underlying exception (``raise ... from exc``) when there is one.
"""

from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """Base class for all filekv errors."""

    def __init__(self, msg: str, path: Path | str | None = None) -> None:
        super().__init__(msg)
        self.path = Path(path) if path else None


class InvalidArgumentError(StoreError, ValueError):
    """Missing store path or an out-of-range option."""


class AccessDeniedError(StoreError, PermissionError):
    """The store file exists but the process cannot both read and write it."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(f'Cannot access path "{path}".', path)


class CorruptStoreError(StoreError):
    """The store file is not empty and its content could not be decoded."""

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        super().__init__(f'Store file "{path}" is not empty and its content is not valid: {cause}', path)
        self.cause = cause


class StoreIOError(StoreError, OSError):
    """Any other filesystem failure while probing, reading or writing."""

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        super().__init__(f'I/O error on "{path}": {cause}', path)
        self.cause = cause


class EncodeError(StoreError, TypeError):
    """A stored value could not be serialized at sync time."""

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        super().__init__(f'Cannot encode store "{path}": {cause}', path)
        self.cause = cause
