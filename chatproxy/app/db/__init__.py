"""Database package for chatproxy.

This package provides:
- Database models (User, UsageCounter)
- Asynchronous session management and the FastAPI session dependency
- CRUD operations for users and usage counters
"""

from chatproxy.app.db.base import Base
from chatproxy.app.db.models import UsageCounter, User
from chatproxy.app.db.async_session import (
    SessionDep,
    close_async_engine,
    get_async_engine,
    get_async_session,
    get_async_session_maker,
    get_db,
    set_async_session_maker,
)
from chatproxy.app.db.crud import (
    create_guest_user,
    get_usage_count_by_user_id,
    get_user_by_id,
    increment_usage,
)

__all__ = [
    "Base",
    "UsageCounter",
    "User",
    "SessionDep",
    "close_async_engine",
    "get_async_engine",
    "get_async_session",
    "get_async_session_maker",
    "get_db",
    "set_async_session_maker",
    "create_guest_user",
    "get_usage_count_by_user_id",
    "get_user_by_id",
    "increment_usage",
]
