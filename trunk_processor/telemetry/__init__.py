"""Telemetry helpers and metrics."""

from .metrics import (
    REQUEST_COUNT,
    REQUEST_ERRORS,
    REQUEST_LATENCY,
    STORAGE_RETRY_COUNTER,
    UPLOAD_BODY_BYTES,
    UPLOAD_COUNTER,
    increment_storage_retry,
    observe_request,
    observe_upload,
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "STORAGE_RETRY_COUNTER",
    "UPLOAD_BODY_BYTES",
    "UPLOAD_COUNTER",
    "increment_storage_retry",
    "observe_request",
    "observe_upload",
]
