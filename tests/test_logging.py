"""Tests for structured logging configuration."""

import json
import logging

from chatproxy.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logging_config,
)


def make_record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_context_fields_are_top_level(self):
        record = make_record(user_id="u-1", user_type="guest", provider="venice")
        data = json.loads(JSONFormatter().format(record))

        assert data["user_id"] == "u-1"
        assert data["user_type"] == "guest"
        assert data["provider"] == "venice"

    def test_other_extras_are_nested(self):
        data = json.loads(JSONFormatter().format(make_record(model="venice-sd35")))
        assert data["extra"] == {"model": "venice-sd35"}

    def test_unset_context_is_omitted(self):
        record = make_record()
        ContextFilter().filter(record)
        data = json.loads(JSONFormatter().format(record))

        assert "request_id" not in data
        assert "extra" not in data


class TestContextFilter:
    def test_adds_defaults(self):
        record = make_record()
        assert ContextFilter().filter(record) is True
        assert record.request_id is None
        assert record.duration_ms is None

    def test_keeps_existing_values(self):
        record = make_record(request_id="abc")
        ContextFilter().filter(record)
        assert record.request_id == "abc"


class TestLoggingConfig:
    def test_json_format(self, monkeypatch):
        from chatproxy.app.core.config import settings

        monkeypatch.setattr(settings, "log_format", "json")
        config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"
        assert "chatproxy" in config["loggers"]

    def test_text_format(self, monkeypatch):
        from chatproxy.app.core.config import settings

        monkeypatch.setattr(settings, "log_format", "text")
        assert get_logging_config()["handlers"]["console"]["formatter"] == "standard"


def test_get_log_context_drops_none():
    context = get_log_context(user_id="u-1", provider=None, count=3)
    assert context == {"user_id": "u-1", "count": 3}
