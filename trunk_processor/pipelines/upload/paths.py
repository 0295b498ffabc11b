"""Storage path derivation.

A call is stored under ``<suffix>/<YYYY>/<MM>/<DD>/<audio filename>`` where
``suffix`` is the last ``-`` delimited token of the system short name and the
date is the call's start time in UTC. The same string is the call's primary
key, so the JSON artifact and the database row can always be found from the
audio object and vice versa.
"""

from __future__ import annotations

from datetime import timezone

from trunk_processor.errors import PathParseError
from trunk_processor.views import CallMetadata

_RESERVED_SEGMENTS = {"", ".", ".."}


def derive_prefix(meta: CallMetadata) -> str:
    short_name = meta.short_name
    if not short_name:
        raise PathParseError("short_name is empty")

    suffix = short_name.rsplit("-", 1)[-1]
    if suffix in _RESERVED_SEGMENTS or "/" in suffix:
        raise PathParseError(f"short_name {meta.short_name!r} has no usable suffix")

    try:
        start = meta.start_time.astimezone(timezone.utc)
    except (OverflowError, ValueError) as exc:
        raise PathParseError(f"start_time {meta.start_time!r} is not a calendar date") from exc

    return f"{suffix}/{start:%Y/%m/%d}"


def object_key(prefix: str, filename: str) -> str:
    """Join ``prefix`` and a client supplied filename into one object key."""

    if filename in _RESERVED_SEGMENTS or "/" in filename or "\\" in filename:
        raise PathParseError(f"filename {filename!r} is not a valid object name")
    return f"{prefix}/{filename}"


def storage_key(meta: CallMetadata, audio_filename: str) -> str:
    """Primary key for the call: the audio artifact's object key."""

    return object_key(derive_prefix(meta), audio_filename)


__all__ = ["derive_prefix", "object_key", "storage_key"]
