"""Database initialization utilities."""

from sqlalchemy.ext.asyncio import AsyncEngine

from chatproxy.app.core.logging import get_logger
from chatproxy.app.db.async_session import get_async_engine
from chatproxy.app.db.base import Base
from chatproxy.app.db import models  # noqa: F401 - import to register models

logger = get_logger(__name__)


async def init_database(engine: AsyncEngine | None = None, drop_first: bool = False) -> None:
    """Create all tables (optionally dropping them first)."""
    if engine is None:
        engine = get_async_engine()

    async with engine.begin() as conn:
        if drop_first:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables ready", extra={"tables": sorted(Base.metadata.tables)})
