"""Per-upload orchestration.

One upload takes exactly one of two paths:

* **archive**: store both artifacts and persist the call (transcription left
  unset) concurrently;
* **transcribe**: store the artifacts and transcribe the audio concurrently,
  then persist the call and post the webhook notification concurrently.

Concurrent pairs are joined fail-fast with :func:`asyncio.gather`: the first
failure propagates at once and the sibling is not cancelled. Objects already
written to storage are never removed when a later stage fails.
"""

from __future__ import annotations

import asyncio
import logging
import time

from trunk_processor.config import FilterConfig
from trunk_processor.errors import ProcessorError
from trunk_processor.services import BlobUploader, TranscriptionClient, WebhookNotifier
from trunk_processor.telemetry import observe_upload
from trunk_processor.views import CallMetadata

from .filtering import decide_transcription
from .normalization import parse_metadata
from .paths import derive_prefix, object_key, storage_key
from .persistence import CallRepository
from .types import ExecutionPath, UploadData, UploadResult

logger = logging.getLogger("trunk_processor.pipeline")


class UploadProcessor:
    """Run one validated upload through storage, transcription and persistence."""

    def __init__(
        self,
        storage: BlobUploader,
        transcriber: TranscriptionClient,
        notifier: WebhookNotifier,
        repository: CallRepository,
        filter_config: FilterConfig,
    ) -> None:
        self._storage = storage
        self._transcriber = transcriber
        self._notifier = notifier
        self._repository = repository
        self._filter = filter_config

    async def process(self, upload: UploadData, *, archive: bool = False) -> UploadResult:
        started = time.perf_counter()
        path = ExecutionPath.ARCHIVE
        try:
            meta = parse_metadata(upload.json.data)
            prefix = derive_prefix(meta)
            objects = [
                (object_key(prefix, item.name), item.data) for item in upload.files()
            ]
            filename = storage_key(meta, upload.audio.name)
            meta.assign_storage_key(filename)

            if decide_transcription(meta, self._filter, archive=archive):
                path = ExecutionPath.TRANSCRIBE
                transcription = await self._transcribe_path(meta, upload, objects)
            else:
                transcription = None
                await self._archive_path(meta, objects)
        except ProcessorError as exc:
            observe_upload(path.value, exc.kind)
            logger.warning(
                "Upload failed path=%s json=%s audio=%s after %.1fms: %s",
                path.value,
                upload.json.name,
                upload.audio.name,
                (time.perf_counter() - started) * 1000,
                exc.detail,
            )
            raise

        observe_upload(path.value, "stored")
        logger.info(
            "Stored call=%s path=%s talkgroup=%s in %.1fms",
            filename,
            path.value,
            meta.talkgroup,
            (time.perf_counter() - started) * 1000,
        )
        return UploadResult(
            filename=filename,
            path=path,
            object_keys=tuple(key for key, _ in objects),
            transcription=transcription,
        )

    async def _archive_path(
        self,
        meta: CallMetadata,
        objects: list[tuple[str, bytes]],
    ) -> None:
        await asyncio.gather(
            self._storage.upload_all(objects),
            self._repository.save(meta),
        )

    async def _transcribe_path(
        self,
        meta: CallMetadata,
        upload: UploadData,
        objects: list[tuple[str, bytes]],
    ) -> str:
        _, transcription = await asyncio.gather(
            self._storage.upload_all(objects),
            self._transcriber.transcribe(upload.audio.name, upload.audio.data),
        )
        meta.set_transcription(transcription)
        await asyncio.gather(
            self._repository.save(meta),
            self._notifier.notify(meta, transcription, upload.audio.name, upload.audio.data),
        )
        return transcription


__all__ = ["UploadProcessor"]
