"""Pydantic schemas for parsed uploads, notifications and responses."""

from .common import HealthResponse
from .metadata import CallMetadata, FreqEntry, HashedEntry, SrcEntry
from .webhook import EmbedField, EmbedFieldType, Webhook, WebhookEmbed

__all__ = [
    "CallMetadata",
    "EmbedField",
    "EmbedFieldType",
    "FreqEntry",
    "HashedEntry",
    "HealthResponse",
    "SrcEntry",
    "Webhook",
    "WebhookEmbed",
]
