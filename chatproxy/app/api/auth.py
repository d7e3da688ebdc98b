"""Session endpoints: guest sign-in, current session, sign-out."""

from typing import Any

from fastapi import APIRouter, Request

from chatproxy.app.core.logging import get_logger, get_log_context
from chatproxy.app.db.async_session import SessionDep
from chatproxy.app.db.crud.user import create_guest_user
from chatproxy.app.middleware.auth import (
    SessionUser,
    clear_session,
    get_session_user,
    set_session_user,
)

router = APIRouter(prefix="/api/auth")
logger = get_logger(__name__)


@router.post("/guest")
async def sign_in_guest(request: Request, session: SessionDep) -> dict[str, Any]:
    """Create a guest account and start a session for it.

    An existing session is returned unchanged.
    """
    current = get_session_user(request)
    if current is not None:
        return {"user": current.to_dict()}

    user = await create_guest_user(session)
    session_user = SessionUser(id=user.id, type=user.type, email=user.email)
    set_session_user(request, session_user)
    logger.info("Guest session created", extra=get_log_context(user_id=user.id, user_type="guest"))
    return {"user": session_user.to_dict()}


@router.get("/session")
async def read_session(request: Request) -> dict[str, Any]:
    user = get_session_user(request)
    return {"user": user.to_dict() if user else None}


@router.post("/signout")
async def sign_out(request: Request) -> dict[str, bool]:
    clear_session(request)
    return {"ok": True}
