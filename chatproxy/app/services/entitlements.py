"""Per-user-class entitlements and the daily quota decision."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from chatproxy.app.exceptions import RateLimitError, UnauthorizedError


class UserType(str, Enum):
    GUEST = "guest"
    REGULAR = "regular"
    PREMIUM = "premium"


@dataclass(frozen=True)
class Entitlements:
    max_messages_per_day: int
    available_chat_model_ids: frozenset[str]


_ALL_CHAT_MODELS = frozenset({
    "chat-model",
    "fastest-model",
    "code-model",
    "vision-model",
    "uncensored-model",
    "chat-model-reasoning",
})


ENTITLEMENTS_BY_USER_TYPE: Mapping[UserType, Entitlements] = MappingProxyType({
    # Users without an account
    UserType.GUEST: Entitlements(
        max_messages_per_day=10,
        available_chat_model_ids=_ALL_CHAT_MODELS,
    ),
    # Users with an account
    UserType.REGULAR: Entitlements(
        max_messages_per_day=50,
        available_chat_model_ids=_ALL_CHAT_MODELS,
    ),
    # Users with a paid membership
    UserType.PREMIUM: Entitlements(
        max_messages_per_day=500,
        available_chat_model_ids=_ALL_CHAT_MODELS,
    ),
})


def parse_user_type(value: object) -> UserType | None:
    """Return the UserType for ``value``, or None for unknown classes."""
    if isinstance(value, UserType):
        return value
    try:
        return UserType(value)
    except ValueError:
        return None


def get_entitlements(user_type: object) -> Entitlements | None:
    parsed = parse_user_type(user_type)
    if parsed is None:
        return None
    return ENTITLEMENTS_BY_USER_TYPE.get(parsed)


def is_admitted(user_type: object, count: int) -> bool:
    """Admit iff the class is known and ``count`` is below its daily maximum."""
    entitlements = get_entitlements(user_type)
    if entitlements is None:
        return False
    return count < entitlements.max_messages_per_day


def check_quota(user_type: object, count: int, surface: str = "chat") -> int:
    """Check a usage count against the class's entitlement.

    Args:
        user_type: The session's user class
        count: Actions already taken in the current window
        surface: Error surface reported to the client

    Returns:
        Remaining actions in the current window

    Raises:
        UnauthorizedError: If the user class is not in the entitlement table
        RateLimitError: If the daily maximum has been reached
    """
    entitlements = get_entitlements(user_type)
    if entitlements is None:
        raise UnauthorizedError(surface, f"Unknown user type: {user_type!r}")

    limit = entitlements.max_messages_per_day
    if count >= limit:
        raise RateLimitError(
            surface,
            f"Daily limit reached. Limit: {limit}, Used: {count}",
            limit=limit,
            used=count,
        )
    return limit - count


def is_model_available(user_type: object, chat_model_id: str) -> bool:
    entitlements = get_entitlements(user_type)
    if entitlements is None:
        return False
    return chat_model_id in entitlements.available_chat_model_ids
