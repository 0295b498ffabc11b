"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from trunk_processor.config import S3Config


def create_s3_client(config: S3Config) -> Any:
    """Instantiate a boto3 S3 client from configuration.

    botocore's own retries are disabled; uploads retry through
    :class:`trunk_processor.utils.RetryPolicy` instead.
    """

    boto_config = Config(
        signature_version="s3v4",
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
        retries={"max_attempts": 1, "mode": "standard"},
    )
    client_kwargs: dict[str, Any] = {
        "region_name": config.region,
        "config": boto_config,
    }
    if config.access_key and config.secret_key:
        client_kwargs["aws_access_key_id"] = config.access_key
        client_kwargs["aws_secret_access_key"] = config.secret_key
    if config.endpoint_url:
        client_kwargs["endpoint_url"] = config.endpoint_url
    return boto3.client("s3", **client_kwargs)


__all__ = ["create_s3_client"]
