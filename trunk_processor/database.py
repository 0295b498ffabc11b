"""Database engine and session management."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from trunk_processor.config import DatabaseConfig

# Import models so they are attached to Base.metadata before table creation
from trunk_processor.models import Base  # noqa: F401 - ensures metadata is registered

logger = logging.getLogger(__name__)


def create_database_engine(config: DatabaseConfig, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine with a bounded connection pool.

    The pool never overflows and waits at most ``pool_timeout`` seconds for a
    free connection, so exhaustion surfaces as an error instead of a queue.
    """

    url = make_url(config.url)
    engine_options: dict[str, Any] = {
        "echo": echo,
        "pool_pre_ping": True,
    }

    if url.get_backend_name() != "sqlite":
        engine_options.update(
            pool_size=config.pool_size,
            max_overflow=0,
            pool_timeout=config.pool_timeout,
        )

    return create_async_engine(url, **engine_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create database tables if they do not exist."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Ensured database tables in default schema.")


async def dispose_engine(engine: AsyncEngine) -> None:
    """Dispose of the engine and release pooled connections."""

    await engine.dispose()


__all__ = [
    "create_database_engine",
    "create_session_factory",
    "dispose_engine",
    "init_models",
]
