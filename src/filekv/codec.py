"""Default JSON codec: the encode/decode pair a Store uses unless told otherwise.

A codec is just two callables:

    encode(table: dict, indent: int) -> bytes     # raises on unserializable input
    decode(data: bytes) -> dict                   # raises on malformed input

Any pair with those signatures can be passed through StoreOptions.
"""

from __future__ import annotations

import json
from typing import Any, Protocol


class Encoder(Protocol):
    def __call__(self, table: dict[str, Any], indent: int) -> bytes: ...


class Decoder(Protocol):
    def __call__(self, data: bytes) -> dict[str, Any]: ...


def json_encode(table: dict[str, Any], indent: int) -> bytes:
    """Serialize table as UTF-8 JSON. indent=0 gives compact single-line output."""
    if indent > 0:
        text = json.dumps(table, indent=indent, ensure_ascii=False, allow_nan=False)
    else:
        text = json.dumps(table, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return text.encode("utf-8")


def json_decode(data: bytes) -> dict[str, Any]:
    obj = json.loads(data.decode("utf-8"))
    if not isinstance(obj, dict):
        msg = f"expected a JSON object at top level, got {type(obj).__name__}"
        raise ValueError(msg)
    return obj
