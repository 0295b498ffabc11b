"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from trunk_processor.telemetry import observe_request

UPLOAD_ROUTE = "/upload"
UNHANDLED_KIND = "Unhandled"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Record request metrics, labelling failures with their error kind.

    The ``ProcessorError`` handler leaves the kind on ``request.state.error_kind``;
    the state lives in the ASGI scope, which the handler shares with this
    middleware.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            self._observe(request, 500, start_time, UNHANDLED_KIND)
            raise

        error_kind = getattr(request.state, "error_kind", None)
        if error_kind is None and response.status_code >= 500:
            error_kind = UNHANDLED_KIND
        self._observe(request, response.status_code, start_time, error_kind)
        return response

    def _observe(
        self,
        request: Request,
        status_code: int,
        start_time: float,
        error_kind: Optional[str],
    ) -> None:
        route = self._resolve_route(request)
        observe_request(
            request.method,
            route,
            status_code,
            time.perf_counter() - start_time,
            error_kind=error_kind,
            body_bytes=self._declared_length(request) if route == UPLOAD_ROUTE else None,
        )

    @staticmethod
    def _declared_length(request: Request) -> Optional[int]:
        value = request.headers.get("content-length", "")
        return int(value) if value.isdigit() else None

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Return the matched route template, falling back to the raw path."""

        scope_route: Any = request.scope.get("route")
        if scope_route is not None:
            path = getattr(scope_route, "path", None)
            if path:
                return path

        return request.url.path
