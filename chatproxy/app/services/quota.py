"""Daily quota checks backed by the persisted usage counter.

The check and the increment are separate statements: two concurrent
requests from one user can both pass the check before either increments.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from chatproxy.app.core.logging import get_logger, get_log_context
from chatproxy.app.exceptions import RateLimitError, UnauthorizedError
from chatproxy.app.db.crud.usage import get_usage_count_by_user_id, increment_usage
from chatproxy.app.middleware.auth import SessionUser
from chatproxy.app.services.entitlements import check_quota, get_entitlements

logger = get_logger(__name__)


async def check_daily_quota(
    session: AsyncSession,
    user: SessionUser,
    surface: str = "chat",
) -> int:
    """Check the user's usage against their entitlement.

    Returns:
        Remaining actions in the current window

    Raises:
        UnauthorizedError: If the user class is not in the entitlement table
        RateLimitError: If the daily maximum has been reached
    """
    count = await get_usage_count_by_user_id(session, user.id)
    try:
        return check_quota(user.type, count, surface=surface)
    except (RateLimitError, UnauthorizedError):
        logger.info(
            "Request denied by daily quota",
            extra=get_log_context(user_id=user.id, user_type=user.type, count=count),
        )
        raise


async def record_usage(session: AsyncSession, user: SessionUser) -> int:
    """Count one successful quota-consuming action; returns the new count."""
    count = await increment_usage(session, user.id)
    logger.debug(
        "Usage recorded",
        extra=get_log_context(user_id=user.id, user_type=user.type, count=count),
    )
    return count


async def get_usage_summary(session: AsyncSession, user: SessionUser) -> dict:
    """Usage, limit and remaining actions for the user's current window."""
    used = await get_usage_count_by_user_id(session, user.id)
    entitlements = get_entitlements(user.type)
    limit = entitlements.max_messages_per_day if entitlements else 0
    return {
        "userType": user.type,
        "used": used,
        "limit": limit,
        "remaining": max(0, limit - used),
    }
