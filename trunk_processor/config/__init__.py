"""Configuration objects built once at startup and passed to every component."""

from .settings import (
    DatabaseConfig,
    FilterConfig,
    S3Config,
    Settings,
    TranscriptionConfig,
    UploadConfig,
    WebhookConfig,
    load_settings,
)

__all__ = [
    "DatabaseConfig",
    "FilterConfig",
    "S3Config",
    "Settings",
    "TranscriptionConfig",
    "UploadConfig",
    "WebhookConfig",
    "load_settings",
]
