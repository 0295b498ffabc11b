"""Multipart intake and validation (first stage of the upload pipeline)."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from trunk_processor.config import UploadConfig
from trunk_processor.errors import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidMultipartError,
    MissingFieldError,
)

from .types import UploadData, UploadedFile

JSON_FIELD = "json"
AUDIO_FIELD = "audio"


def validate_part(
    field: Optional[str],
    filename: Optional[str],
    data: bytes,
    config: UploadConfig,
) -> UploadedFile:
    """Check one part's name, filename, size and extension."""

    if not field:
        raise InvalidMultipartError("Field missing name")
    if not filename:
        raise MissingFieldError(f"Missing filename for field: {field}")

    if len(data) > config.max_file_size:
        raise FileTooLargeError(len(data), config.max_file_size)

    if field == JSON_FIELD:
        if not filename.endswith(".json"):
            raise InvalidFileTypeError("JSON file must have .json extension")
    elif field == AUDIO_FIELD:
        if not filename.endswith(tuple(config.audio_extensions)):
            allowed = ", ".join(config.audio_extensions)
            raise InvalidFileTypeError(f"Audio file must have one of: {allowed}")
    else:
        raise InvalidFileTypeError("Filename must match 'audio' or 'json'")

    return UploadedFile(name=filename, data=data)


def build_upload(files: dict[str, UploadedFile]) -> UploadData:
    """Require both parts; a repeated part keeps its last occurrence."""

    json_file = files.get(JSON_FIELD)
    if json_file is None:
        raise MissingFieldError(JSON_FIELD)
    audio_file = files.get(AUDIO_FIELD)
    if audio_file is None:
        raise MissingFieldError(AUDIO_FIELD)
    return UploadData(json=json_file, audio=audio_file)


def collect_parts(
    parts: Iterable[tuple[Optional[str], Optional[str], bytes]],
    config: UploadConfig,
) -> UploadData:
    """Validate ``(field, filename, data)`` triples into an :class:`UploadData`."""

    files: dict[str, UploadedFile] = {}
    for field, filename, data in parts:
        files[field] = validate_part(field, filename, data, config)
    return build_upload(files)


async def _read_part(value: Any, config: UploadConfig) -> tuple[Optional[str], bytes]:
    if isinstance(value, UploadFile):
        try:
            # The form parser has already spooled the part and recorded its size.
            if value.size is not None and value.size > config.max_file_size:
                raise FileTooLargeError(value.size, config.max_file_size)
            data = await value.read()
        finally:
            await value.close()
        return value.filename, data
    # Plain form fields carry no filename.
    return None, str(value).encode("utf-8")


async def read_upload(request: Request, config: UploadConfig) -> UploadData:
    """Parse and validate the multipart body of ``request``."""

    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise InvalidMultipartError(
            f"expected multipart/form-data, got {content_type or 'no content type'}"
        )

    try:
        form = await request.form()
    except MultiPartException as exc:
        raise InvalidMultipartError(exc.message) from exc
    except StarletteHTTPException as exc:
        raise InvalidMultipartError(str(exc.detail)) from exc

    parts: list[tuple[Optional[str], Optional[str], bytes]] = []
    try:
        for field, value in form.multi_items():
            filename, data = await _read_part(value, config)
            parts.append((field, filename, data))
    finally:
        await form.close()

    return collect_parts(parts, config)


__all__ = [
    "AUDIO_FIELD",
    "JSON_FIELD",
    "build_upload",
    "collect_parts",
    "read_upload",
    "validate_part",
]
