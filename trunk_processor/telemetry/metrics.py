"""Prometheus metrics for the upload service.

Request level series are labelled with the matched route template. Failed
requests are additionally counted by their error kind (``MissingField``,
``ObjectStorageUpload`` ...), the same token that prefixes the response body.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import Counter, Histogram

# A transcribed upload waits on storage, the speech-to-text endpoint and the
# webhook in sequence, so the tail reaches into minutes.
LATENCY_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0)

# Call audio ranges from a few KiB for a key-up to tens of MiB for long calls.
BODY_SIZE_BUCKETS = tuple(float(1 << shift) for shift in range(12, 27, 2))

REQUEST_COUNT = Counter(
    "trunk_http_requests_total",
    "HTTP requests by method, route and status",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "trunk_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("route",),
    buckets=LATENCY_BUCKETS,
)

REQUEST_ERRORS = Counter(
    "trunk_request_errors_total",
    "Failed requests by route and error kind",
    ("route", "kind"),
)

UPLOAD_BODY_BYTES = Histogram(
    "trunk_upload_request_bytes",
    "Declared size of multipart upload bodies",
    buckets=BODY_SIZE_BUCKETS,
)

UPLOAD_COUNTER = Counter(
    "trunk_uploads_total",
    "Processed uploads by execution path and outcome",
    ("path", "outcome"),
)

STORAGE_RETRY_COUNTER = Counter(
    "trunk_storage_retries_total",
    "Object storage writes retried after a failed attempt",
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
    *,
    error_kind: Optional[str] = None,
    body_bytes: Optional[int] = None,
) -> None:
    """Record one completed request.

    ``error_kind`` is counted for any request that failed, client or server
    side. ``body_bytes`` is only given for upload requests.
    """

    route = route or "unknown"
    REQUEST_COUNT.labels(method=method or "UNKNOWN", route=route, status=str(status_code)).inc()
    REQUEST_LATENCY.labels(route=route).observe(max(duration_seconds, 0.0))

    if error_kind is not None:
        REQUEST_ERRORS.labels(route=route, kind=error_kind).inc()
    if body_bytes is not None:
        UPLOAD_BODY_BYTES.observe(body_bytes)


def observe_upload(path: str, outcome: str) -> None:
    """Count one upload that finished on ``path`` ("archive" or "transcribe")."""

    UPLOAD_COUNTER.labels(path=path, outcome=outcome).inc()


def increment_storage_retry() -> None:
    STORAGE_RETRY_COUNTER.inc()
