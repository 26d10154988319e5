"""StoreOptions: immutable configuration snapshot for a Store.

Options are resolved once per Store and never change afterwards. Defaults
can be overridden per call, or loaded from a project-local filekv.toml:

    [store]
    async_write = false     # dispatch writes to a background thread
    sync_on_write = true    # write the whole table after every mutation
    indent = 4              # JSON indentation; 0 = compact
    atomic_write = true     # write a temp file, then rename over the store

Environment variables FILEKV_ASYNC_WRITE, FILEKV_SYNC_ON_WRITE,
FILEKV_INDENT and FILEKV_ATOMIC_WRITE take precedence over the file.
"""

from __future__ import annotations

import dataclasses
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from filekv.codec import json_decode, json_encode
from filekv.errors import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from filekv.codec import Decoder, Encoder

_CONFIG_FILENAME = "filekv.toml"
_ENV_PREFIX = "FILEKV_"
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class StoreOptions:
    """Resolved options for one Store."""

    async_write: bool = False
    sync_on_write: bool = True
    indent: int = 4
    atomic_write: bool = True
    encode: Encoder = json_encode
    decode: Decoder = json_decode

    def __post_init__(self) -> None:
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 0:
            msg = f"indent must be a non-negative integer, got {self.indent!r}"
            raise InvalidArgumentError(msg)
        if not callable(self.encode) or not callable(self.decode):
            msg = "encode and decode must be callables"
            raise InvalidArgumentError(msg)

    def merge(self, **overrides: Any) -> StoreOptions:
        """Return a copy with the given fields replaced. None values are ignored."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = set(overrides) - known
        if unknown:
            msg = f"Unknown store option(s): {', '.join(sorted(unknown))}"
            raise InvalidArgumentError(msg)
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self


DEFAULT_OPTIONS = StoreOptions()


def _parse_bool(name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    msg = f"{name}: expected a boolean, got {raw!r}"
    raise InvalidArgumentError(msg)


def _parse_int(name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        msg = f"{name}: expected an integer, got {raw!r}"
        raise InvalidArgumentError(msg)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        msg = f"{name}: expected an integer, got {raw!r}"
        raise InvalidArgumentError(msg) from exc


_PARSERS = {
    "async_write": _parse_bool,
    "sync_on_write": _parse_bool,
    "indent": _parse_int,
    "atomic_write": _parse_bool,
}


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for filekv.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def options_from_mapping(section: Mapping[str, Any], base: StoreOptions = DEFAULT_OPTIONS) -> StoreOptions:
    """Build options from a [store] table; unrecognized keys are rejected."""
    values: dict[str, Any] = {}
    for key, raw in section.items():
        parser = _PARSERS.get(key)
        if parser is None:
            msg = f"Unknown store option in config: {key}"
            raise InvalidArgumentError(msg)
        values[key] = parser(key, raw)
    return base.merge(**values)


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, parser in _PARSERS.items():
        env_key = _ENV_PREFIX + key.upper()
        if env_key in environ:
            values[key] = parser(env_key, environ[env_key])
    return values


def load_options(
    root: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> StoreOptions:
    """Load filekv.toml from root (or search upward from cwd), then apply env overrides."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid {_CONFIG_FILENAME} at {config_path}: {exc}"
            raise InvalidArgumentError(msg, config_path) from exc

    options = options_from_mapping(raw.get("store", {}))
    env = os.environ if environ is None else environ
    return options.merge(**_env_overrides(env))
