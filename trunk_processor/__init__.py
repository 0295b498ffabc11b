"""Ingestion service for trunk-recorder call uploads."""

__version__ = "0.1.0"
