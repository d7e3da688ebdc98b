"""User CRUD operations."""
from __future__ import annotations

import time
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatproxy.app.db.models import User, utcnow


async def get_user_by_id(session: AsyncSession, user_id: str) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_guest_user(session: AsyncSession, auto_commit: bool = True) -> User:
    """Create a user row for an anonymous visitor.

    Guest emails are synthetic (``guest-<epoch-ms>-<suffix>``) so they never
    collide with accounts managed by the auth provider.
    """
    user_id = str(uuid.uuid4())
    user = User(
        id=user_id,
        email=f"guest-{int(time.time() * 1000)}-{user_id[:8]}",
        type="guest",
        created_at=utcnow(),
    )
    session.add(user)
    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    return user
