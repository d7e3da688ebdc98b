"""Middleware package for chatproxy."""

from chatproxy.app.middleware.auth import SessionUser, get_session_user, require_user
from chatproxy.app.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "SessionUser",
    "get_session_user",
    "require_user",
    "RequestIdMiddleware",
    "get_request_id",
]
