"""Tests for the session guard and session endpoints."""

import asyncio
import base64
import json

import itsdangerous
import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from starlette.middleware.sessions import SessionMiddleware

from chatproxy.app.core.config import settings
from chatproxy.app.db.crud.user import get_user_by_id
from chatproxy.app.exceptions import ChatProxyException
from chatproxy.app.middleware.auth import (
    SESSION_USER_KEY,
    SessionUser,
    get_session_user,
    require_user,
)


@pytest.fixture
def guard_client():
    """A bare app whose session content is set directly by the test."""
    app = FastAPI()
    app.add_middleware(SessionMiddleware, secret_key="test-secret")

    @app.post("/login")
    async def login(request: Request):
        request.session[SESSION_USER_KEY] = await request.json()
        return {"ok": True}

    @app.get("/whoami")
    async def whoami(user: SessionUser = Depends(require_user)):
        return user.to_dict()

    @app.get("/peek")
    async def peek(request: Request):
        user = get_session_user(request)
        return {"user": user.to_dict() if user else None}

    @app.exception_handler(ChatProxyException)
    async def handler(request, exc):
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    return TestClient(app)


class TestSessionGuard:
    def test_no_session_is_unauthorized(self, guard_client):
        response = guard_client.get("/whoami")

        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized:chat"

    def test_session_user_is_resolved(self, guard_client):
        guard_client.post("/login", json={"id": "u-1", "type": "premium", "email": "p@example.com"})
        response = guard_client.get("/whoami")

        assert response.status_code == 200
        assert response.json() == {"id": "u-1", "type": "premium", "email": "p@example.com"}

    @pytest.mark.parametrize(
        "payload",
        [{"type": "regular"}, {"id": "u-1"}, {"id": "", "type": "regular"}, "not-a-dict"],
    )
    def test_incomplete_session_is_ignored(self, guard_client, payload):
        guard_client.post("/login", json=payload)

        assert guard_client.get("/peek").json() == {"user": None}
        assert guard_client.get("/whoami").status_code == 401

    def test_tampered_cookie_is_ignored(self, guard_client):
        guard_client.cookies.set("session", "forged-value")
        assert guard_client.get("/whoami").status_code == 401

    def test_guest_flag(self):
        assert SessionUser(id="g", type="guest").is_guest
        assert not SessionUser(id="r", type="regular").is_guest


class TestSessionEndpoints:
    def test_no_session(self, client):
        assert client.get("/api/auth/session").json() == {"user": None}

    def test_guest_sign_in(self, client):
        response = client.post("/api/auth/guest")

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["type"] == "guest"
        assert user["email"].startswith("guest-")
        assert client.get("/api/auth/session").json() == {"user": user}

    def test_guest_sign_in_reuses_session(self, client):
        first = client.post("/api/auth/guest").json()["user"]
        second = client.post("/api/auth/guest").json()["user"]
        assert first == second

    def test_sign_out(self, client):
        client.post("/api/auth/guest")
        assert client.post("/api/auth/signout").json() == {"ok": True}
        assert client.get("/api/auth/session").json() == {"user": None}

    def test_guest_session_can_read_usage(self, client):
        client.post("/api/auth/guest")
        response = client.get("/api/usage")

        assert response.status_code == 200
        assert response.json()["limit"] == 10
        assert response.json()["used"] == 0


def test_guest_row_is_persisted(client, session_maker):
    user = client.post("/api/auth/guest").json()["user"]

    async def load():
        async with session_maker() as session:
            return await get_user_by_id(session, user["id"])

    row = asyncio.run(load())
    assert row is not None
    assert row.type == "guest"
    assert row.email == user["email"]


def signed_session_cookie(secret: str, user: dict) -> str:
    """Encode a session the way Starlette's SessionMiddleware does."""
    data = base64.b64encode(json.dumps({SESSION_USER_KEY: user}).encode("utf-8"))
    return itsdangerous.TimestampSigner(secret).sign(data).decode("utf-8")


class TestSessionCookieSigning:
    PREMIUM = {"id": "someone", "type": "premium"}

    def test_cookie_signed_with_another_key_is_rejected(self, client):
        forged = signed_session_cookie("development-secret-change-me", self.PREMIUM)
        client.cookies.set(settings.session_cookie_name, forged)

        assert client.get("/api/usage").status_code == 401

    def test_cookie_signed_with_configured_key_is_accepted(self, client):
        cookie = signed_session_cookie(settings.auth_secret, self.PREMIUM)
        client.cookies.set(settings.session_cookie_name, cookie)

        response = client.get("/api/usage")
        assert response.status_code == 200
        assert response.json()["limit"] == 500
