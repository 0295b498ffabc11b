"""Small, dependency-free helpers shared across the pipeline."""

from .formatting import format_timestamp
from .hashing import content_hash, fnv1a_64
from .retry import RetryPolicy

__all__ = ["RetryPolicy", "content_hash", "fnv1a_64", "format_timestamp"]
