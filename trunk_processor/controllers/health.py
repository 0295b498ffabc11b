"""Liveness endpoint."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from trunk_processor.utils import format_timestamp
from trunk_processor.views import HealthResponse

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)

SERVICE_NAME = "trunk-processor"


@router.get("/healthz", response_model=HealthResponse)
async def healthz(request: Request) -> HealthResponse:
    logger.info(
        "Health check from user-agent=%s",
        request.headers.get("user-agent", "unknown"),
    )
    return HealthResponse(
        status="healthy",
        timestamp=format_timestamp(datetime.now(timezone.utc)),
        service=SERVICE_NAME,
    )
