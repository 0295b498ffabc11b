"""Content hashing for FreqList/SrcList primary keys.

The key of a child row is FNV-1a (64 bit) over a canonical serialization of
its fields, reinterpreted as a signed 64-bit integer so it fits a ``BIGINT``
column. The serialization is:

* each value rendered as text: integers in decimal, timestamps as integer
  epoch seconds, booleans as ``0``/``1``, ``None`` as the empty string;
* values joined with the ASCII unit separator ``0x1F`` in the declared field
  order (owning call key first);
* the result encoded as UTF-8.

Changing any of the above changes every stored key.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF
FIELD_SEPARATOR = "\x1f"


def fnv1a_64(data: bytes) -> int:
    """Return the unsigned 64-bit FNV-1a hash of ``data``."""

    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & _MASK_64
    return value


def to_signed_64(value: int) -> int:
    """Reinterpret an unsigned 64-bit integer as two's complement."""

    return value - (1 << 64) if value >= (1 << 63) else value


def canonical_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, datetime):
        return str(int(value.timestamp()))
    return str(value)


def canonical_bytes(values: Iterable[Any]) -> bytes:
    return FIELD_SEPARATOR.join(canonical_value(value) for value in values).encode("utf-8")


def content_hash(values: Iterable[Any]) -> int:
    """Signed 64-bit content hash of the ordered ``values``."""

    return to_signed_64(fnv1a_64(canonical_bytes(values)))


__all__ = [
    "FIELD_SEPARATOR",
    "canonical_bytes",
    "canonical_value",
    "content_hash",
    "fnv1a_64",
    "to_signed_64",
]
