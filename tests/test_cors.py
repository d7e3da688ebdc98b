"""Tests for cross-origin access to the session-authenticated API."""

import pytest
from fastapi.testclient import TestClient

from chatproxy.app.core.config import settings
from chatproxy.app.main import create_app

PREFLIGHT = {"Origin": "https://elsewhere.example", "Access-Control-Request-Method": "GET"}


@pytest.fixture(autouse=True)
def offline_venice(isolated_settings, monkeypatch):
    # /health would otherwise call Venice
    monkeypatch.setattr(settings, "venice_api_key", "")


def test_no_origin_is_allowed_by_default(session_maker, monkeypatch):
    monkeypatch.setattr(settings, "cors_origins", [])
    app_client = TestClient(create_app())

    resp = app_client.options("/api/usage", headers=PREFLIGHT)
    assert "access-control-allow-origin" not in resp.headers

    resp = app_client.get("/health", headers={"Origin": "https://elsewhere.example"})
    assert "access-control-allow-origin" not in resp.headers


def test_configured_origin_gets_credentials(session_maker, monkeypatch):
    monkeypatch.setattr(settings, "cors_origins", ["https://chat.example"])
    app_client = TestClient(create_app())

    resp = app_client.get("/health", headers={"Origin": "https://chat.example"})
    assert resp.headers["access-control-allow-origin"] == "https://chat.example"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_wildcard_origin_never_allows_credentials(session_maker, monkeypatch):
    monkeypatch.setattr(settings, "cors_origins", ["*"])
    app_client = TestClient(create_app())

    resp = app_client.get("/health", headers={"Origin": "https://elsewhere.example"})
    assert resp.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in resp.headers
