"""Typed containers shared across the upload pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class UploadedFile:
    """One validated multipart file part, fully buffered."""

    name: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadData:
    """The metadata document and its recording, as received."""

    json: UploadedFile
    audio: UploadedFile

    def files(self) -> tuple[UploadedFile, UploadedFile]:
        return self.json, self.audio


class ExecutionPath(str, Enum):
    """Branch taken for one upload."""

    ARCHIVE = "archive"
    TRANSCRIBE = "transcribe"


@dataclass(frozen=True)
class UploadResult:
    """Summary of a stored upload."""

    filename: str
    path: ExecutionPath
    object_keys: tuple[str, ...]
    transcription: str | None = None
