"""Service layer helpers for external integrations."""

from .aws import create_s3_client
from .http import create_http_client
from .notifier import WebhookNotifier, build_webhook
from .storage import BlobUploader
from .transcribe import TranscriptionClient

__all__ = [
    "BlobUploader",
    "TranscriptionClient",
    "WebhookNotifier",
    "build_webhook",
    "create_http_client",
    "create_s3_client",
]
