"""Usage counter CRUD operations."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatproxy.app.core.config import settings
from chatproxy.app.db.models import UsageCounter


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _window() -> timedelta:
    return timedelta(hours=settings.usage_window_hours)


def is_window_expired(window_start: datetime, now: datetime) -> bool:
    return _as_utc(now) >= _as_utc(window_start) + _window()


async def get_usage_counter(
    session: AsyncSession,
    user_id: str,
) -> UsageCounter | None:
    # populate_existing: the increment path updates count with a bare UPDATE
    result = await session.execute(
        select(UsageCounter)
        .where(UsageCounter.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_usage_count_by_user_id(
    session: AsyncSession,
    user_id: str,
    now: datetime | None = None,
) -> int:
    """Get the number of actions a user has taken in the current window.

    Args:
        session: Database session from FastAPI dependency
        user_id: The user ID
        now: Reference time (defaults to the current UTC time)

    Returns:
        The count inside the window, 0 if there is no counter or the
        window has elapsed
    """
    now = now or datetime.now(timezone.utc)
    counter = await get_usage_counter(session, user_id)
    if counter is None or is_window_expired(counter.window_start, now):
        return 0
    return counter.count


async def increment_usage(
    session: AsyncSession,
    user_id: str,
    now: datetime | None = None,
    auto_commit: bool = True,
) -> int:
    """Record one quota-consuming action for a user.

    Starts a new window at count 1 when no counter exists or the previous
    window has elapsed; otherwise adds one inside the current window.

    Args:
        session: Database session from FastAPI dependency
        user_id: The user ID
        now: Reference time (defaults to the current UTC time)
        auto_commit: Whether to commit the transaction

    Returns:
        The count after the increment
    """
    now = now or datetime.now(timezone.utc)
    counter = await get_usage_counter(session, user_id)

    if counter is None:
        counter = UsageCounter(user_id=user_id, count=1, window_start=now)
        session.add(counter)
        new_count = 1
    elif is_window_expired(counter.window_start, now):
        counter.count = 1
        counter.window_start = now
        new_count = 1
    else:
        await session.execute(
            update(UsageCounter)
            .where(UsageCounter.id == counter.id)
            .values(count=UsageCounter.count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(
            select(UsageCounter.count).where(UsageCounter.id == counter.id)
        )
        new_count = result.scalar_one()

    if auto_commit:
        await session.commit()
    else:
        await session.flush()
    return new_count
