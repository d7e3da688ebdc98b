"""Async database session management for SQLAlchemy 2.0+.

PostgreSQL through asyncpg in production; any async URL works, which the
test-suite uses to run against SQLite.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chatproxy.app.core.config import settings
from chatproxy.app.core.logging import get_logger

logger = get_logger(__name__)

# Global session maker instance
_AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


@lru_cache(maxsize=1)
def get_async_engine(database_url: str | None = None) -> AsyncEngine:
    """Get or create the async database engine (cached singleton).

    Args:
        database_url: Optional database URL. Uses settings if not provided.
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=False)
        logger.info("Created SQLite async engine")
        return engine

    engine = create_async_engine(
        url,
        echo=False,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
    )
    logger.info(
        f"Created PostgreSQL async engine (pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow})"
    )
    return engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession]:
    global _AsyncSessionLocal
    if _AsyncSessionLocal is None:
        _AsyncSessionLocal = async_sessionmaker(
            bind=get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _AsyncSessionLocal


def set_async_session_maker(maker: async_sessionmaker[AsyncSession] | None) -> None:
    """Replace the session maker, e.g. to bind sessions to a test database."""
    global _AsyncSessionLocal
    _AsyncSessionLocal = maker


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Async context manager for database sessions.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(...)
    """
    session_maker = get_async_session_maker()
    async with session_maker() as session:
        yield session


async def close_async_engine() -> None:
    """Dispose the engine on shutdown to release connections."""
    global _AsyncSessionLocal

    engine = get_async_engine()
    try:
        await engine.dispose()
        logger.debug("Async engine disposed successfully")
    except RuntimeError:
        # Event loop mismatch; the connections are already gone
        logger.debug("Engine dispose encountered RuntimeError (event loop mismatch)")

    get_async_engine.cache_clear()
    _AsyncSessionLocal = None


async def verify_connection() -> bool:
    try:
        async with get_async_session() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Successful requests are committed; on exceptions the session is rolled
    back and the exception re-raised.
    """
    async with get_async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# Type alias for FastAPI dependency injection
SessionDep = Annotated[AsyncSession, Depends(get_db)]
