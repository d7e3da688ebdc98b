"""Session guard.

Identity is read from the signed session cookie maintained by Starlette's
SessionMiddleware. Regular and premium sessions are written by the auth
provider; guest sessions are created by ``POST /api/auth/guest``.
"""

from dataclasses import asdict, dataclass
from typing import Any, Optional

from fastapi import Request

from chatproxy.app.exceptions import UnauthorizedError

SESSION_USER_KEY = "user"


@dataclass(frozen=True)
class SessionUser:
    id: str
    type: str
    email: Optional[str] = None

    @property
    def is_guest(self) -> bool:
        return self.type == "guest"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def get_session_user(request: Request) -> Optional[SessionUser]:
    """Return the session's user, or None if there is no usable session."""
    if "session" not in request.scope:
        return None
    data = request.session.get(SESSION_USER_KEY)
    if not isinstance(data, dict):
        return None

    user_id = data.get("id")
    user_type = data.get("type")
    if not user_id or not user_type:
        return None
    return SessionUser(id=str(user_id), type=str(user_type), email=data.get("email"))


def set_session_user(request: Request, user: SessionUser) -> None:
    request.session[SESSION_USER_KEY] = user.to_dict()


def clear_session(request: Request) -> None:
    request.session.clear()


def require_user(request: Request) -> SessionUser:
    """FastAPI dependency rejecting requests without a session.

    Raises:
        UnauthorizedError: If the request carries no valid session
    """
    user = get_session_user(request)
    if user is None:
        raise UnauthorizedError("chat", "No active session")
    return user
