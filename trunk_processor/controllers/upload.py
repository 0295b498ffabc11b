"""Call upload endpoint.

``POST /upload`` takes a multipart body with a ``json`` part (the
trunk-recorder call document) and an ``audio`` part (the recording). See
``trunk_processor.pipelines.upload`` for the stages it runs. The presence of
an ``archive`` header skips transcription and notification.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from trunk_processor.controllers.dependencies import ProcessorDep, SettingsDep
from trunk_processor.pipelines.upload import read_upload

router = APIRouter(tags=["upload"])

logger = logging.getLogger(__name__)

ARCHIVE_HEADER = "archive"
SUCCESS_BODY = "Upload successful"


@router.post("/upload", response_class=PlainTextResponse)
async def upload_call(
    request: Request,
    processor: ProcessorDep,
    settings: SettingsDep,
) -> PlainTextResponse:
    """Validate, store and index one recorded call."""

    upload = await read_upload(request, settings.upload)
    archive = ARCHIVE_HEADER in request.headers
    logger.debug(
        "Received upload json=%s audio=%s (%d bytes) archive=%s",
        upload.json.name,
        upload.audio.name,
        upload.audio.size,
        archive,
    )

    await processor.process(upload, archive=archive)
    return PlainTextResponse(SUCCESS_BODY)
