"""CRUD operations package.

- user.py: guest account creation and lookup
- usage.py: daily usage counters
"""

from chatproxy.app.db.crud.user import create_guest_user, get_user_by_id
from chatproxy.app.db.crud.usage import (
    get_usage_count_by_user_id,
    get_usage_counter,
    increment_usage,
    is_window_expired,
)

__all__ = [
    "create_guest_user",
    "get_user_by_id",
    "get_usage_count_by_user_id",
    "get_usage_counter",
    "increment_usage",
    "is_window_expired",
]
