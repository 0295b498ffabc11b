"""FastAPI routers acting as controllers."""

from . import health, upload

__all__ = ["health", "upload"]
