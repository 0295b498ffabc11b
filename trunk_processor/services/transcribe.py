"""Speech-to-text client for an OpenAI-compatible transcription endpoint."""

from __future__ import annotations

import logging

import httpx

from trunk_processor.errors import ConfigurationError, ExternalServiceCallError

logger = logging.getLogger(__name__)


class TranscriptionClient:
    """Post audio to the configured endpoint and return the transcript text.

    A failed call is not retried.
    """

    language = "en"
    response_format = "text"

    def __init__(self, http_client: httpx.AsyncClient, endpoint: str, model_name: str) -> None:
        self._http = http_client
        self._endpoint = endpoint
        self._model_name = model_name

    async def transcribe(self, filename: str, audio_bytes: bytes) -> str:
        if not self._endpoint:
            raise ConfigurationError("TRANSCRIPTION_ENDPOINT is not configured")

        files = {"file": (filename, audio_bytes, "application/octet-stream")}
        data = {
            "model": self._model_name,
            "language": self.language,
            "response_format": self.response_format,
        }
        try:
            response = await self._http.post(self._endpoint, data=data, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceCallError(
                "transcription",
                f"endpoint returned {exc.response.status_code}",
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceCallError("transcription", str(exc) or repr(exc)) from exc

        transcript = response.text.strip()
        logger.info("Transcription complete file=%s length=%d", filename, len(transcript))
        return transcript


__all__ = ["TranscriptionClient"]
