"""Metadata normalization stage."""

from __future__ import annotations

from pydantic import ValidationError

from trunk_processor.errors import JsonParsingError
from trunk_processor.views import CallMetadata


def parse_metadata(raw: bytes) -> CallMetadata:
    """Parse a trunk-recorder call document into :class:`CallMetadata`."""

    try:
        return CallMetadata.model_validate_json(raw)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_input=False)
        summary = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in errors[:5]
        )
        if len(errors) > 5:
            summary += f" (+{len(errors) - 5} more)"
        raise JsonParsingError(summary) from exc


__all__ = ["parse_metadata"]
