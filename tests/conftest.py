"""Shared fixtures: isolated settings, a temporary SQLite database and sessions."""

import asyncio
import os
from datetime import datetime, timezone

# Settings are built at import time and refuse to start without a secret
os.environ.setdefault("AUTH_SECRET", "test-session-signing-secret-0123456789")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from chatproxy.app.core.cache import reset_cache
from chatproxy.app.core.config import settings
from chatproxy.app.db import models  # noqa: F401 - import to register models
from chatproxy.app.db.async_session import set_async_session_maker
from chatproxy.app.db.base import Base
from chatproxy.app.db.crud.usage import get_usage_count_by_user_id
from chatproxy.app.db.models import UsageCounter
from chatproxy.app.main import app
from chatproxy.app.middleware.auth import SessionUser, require_user

VENICE_BASE_URL = "https://api.venice.ai/api/v1"
BLOB_BASE_URL = "https://blob.example-storage.com"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    monkeypatch.setattr(settings, "venice_api_key", "test-venice-key")
    monkeypatch.setattr(settings, "venice_base_url", VENICE_BASE_URL)
    monkeypatch.setattr(settings, "blob_read_write_token", "test-blob-token")
    monkeypatch.setattr(settings, "blob_base_url", BLOB_BASE_URL)
    monkeypatch.setattr(settings, "cache_enabled", True)
    monkeypatch.setattr(settings, "redis_enabled", False)
    reset_cache()
    yield
    reset_cache()
    app.dependency_overrides.clear()


def _make_session_maker(url: str):
    engine = create_async_engine(url, poolclass=NullPool)
    maker = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    return engine, maker


async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def session_maker(tmp_path):
    """Bind the application to a fresh SQLite file (for synchronous tests)."""
    engine, maker = _make_session_maker(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    asyncio.run(_create_tables(engine))
    set_async_session_maker(maker)
    yield maker
    set_async_session_maker(None)
    asyncio.run(engine.dispose())


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """An AsyncSession on a fresh SQLite file (for async tests)."""
    engine, maker = _make_session_maker(f"sqlite+aiosqlite:///{tmp_path / 'async.db'}")
    await _create_tables(engine)
    async with maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def client(session_maker):
    return TestClient(app)


@pytest.fixture
def seed_usage(session_maker):
    """Write a usage counter for a user, e.g. to put them at their limit."""
    def _seed(user_id: str, count: int, window_start: datetime | None = None) -> None:
        async def _write():
            async with session_maker() as session:
                session.add(UsageCounter(
                    user_id=user_id,
                    count=count,
                    window_start=window_start or datetime.now(timezone.utc),
                ))
                await session.commit()

        asyncio.run(_write())

    return _seed


@pytest.fixture
def read_usage(session_maker):
    def _read(user_id: str) -> int:
        async def _query():
            async with session_maker() as session:
                return await get_usage_count_by_user_id(session, user_id)

        return asyncio.run(_query())

    return _read


@pytest.fixture
def login_as():
    """Stand in for a session issued by the external auth provider."""
    def _login(user: SessionUser) -> None:
        app.dependency_overrides[require_user] = lambda: user

    return _login
