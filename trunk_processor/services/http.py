"""Shared outbound HTTP client."""

from __future__ import annotations

import httpx

from trunk_processor.config import Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Client used for the transcription endpoint and the webhook."""

    timeout = httpx.Timeout(settings.http_timeout, connect=settings.http_connect_timeout)
    return httpx.AsyncClient(timeout=timeout)


__all__ = ["create_http_client"]
