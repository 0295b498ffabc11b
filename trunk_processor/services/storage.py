"""S3 storage for uploaded call artifacts."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from trunk_processor.errors import ObjectStorageUploadError
from trunk_processor.telemetry import increment_storage_retry
from trunk_processor.utils import RetryPolicy

logger = logging.getLogger(__name__)

_RETRYABLE_ERRORS = (BotoCoreError, ClientError)


class BlobUploader:
    """Write raw artifacts to a bucket, retrying each object independently."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._retry = retry_policy or RetryPolicy()

    async def put_object(self, key: str, data: bytes) -> str:
        """Upload one object, returning its key."""

        async def _put() -> None:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
            )

        def _log_retry(attempt: int, delay: float, exc: BaseException) -> None:
            increment_storage_retry()
            logger.warning(
                "S3 put failed key=%s attempt=%d retry_in=%.3fs error=%s",
                key,
                attempt,
                delay,
                exc,
            )

        try:
            await self._retry.run(_put, retry_on=_RETRYABLE_ERRORS, on_retry=_log_retry)
        except _RETRYABLE_ERRORS as exc:
            raise ObjectStorageUploadError(
                f"{key} after {self._retry.max_attempts} attempts: {exc}"
            ) from exc

        logger.info("Uploaded object to S3: %s (%d bytes)", key, len(data))
        return key

    async def upload_all(self, objects: Sequence[tuple[str, bytes]]) -> list[str]:
        """Upload every ``(key, data)`` pair concurrently.

        The first permanent failure is raised as soon as it is known; uploads
        already in flight are left to finish and their outcome is discarded.
        Nothing is deleted when only some objects made it.
        """

        return list(
            await asyncio.gather(*(self.put_object(key, data) for key, data in objects))
        )


__all__ = ["BlobUploader"]
