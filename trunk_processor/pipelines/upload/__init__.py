"""Call upload pipeline package.

Stages, in the order ``POST /upload`` runs them:

1. ``intake`` - validate the multipart parts and buffer their bytes.
2. ``normalization`` - parse the call document into ``CallMetadata``.
3. ``paths`` - derive the storage prefix and the call's primary key.
4. ``filtering`` - choose the archive or transcribe path.
5. ``orchestrator`` - store artifacts, transcribe, persist and notify.
6. ``persistence`` - upsert reference rows, the call and its observations.
"""

from .filtering import decide_transcription, should_transcribe
from .intake import collect_parts, read_upload, validate_part
from .normalization import parse_metadata
from .orchestrator import UploadProcessor
from .paths import derive_prefix, object_key, storage_key
from .persistence import CallRepository
from .types import ExecutionPath, UploadData, UploadedFile, UploadResult

__all__ = [
    "CallRepository",
    "ExecutionPath",
    "UploadData",
    "UploadProcessor",
    "UploadResult",
    "UploadedFile",
    "collect_parts",
    "decide_transcription",
    "derive_prefix",
    "object_key",
    "parse_metadata",
    "read_upload",
    "should_transcribe",
    "storage_key",
    "validate_part",
]
