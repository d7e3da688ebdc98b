"""Tests for the rolling-window usage counter."""

from datetime import datetime, timedelta, timezone

import pytest

from chatproxy.app.db.crud.usage import (
    get_usage_count_by_user_id,
    get_usage_counter,
    increment_usage,
    is_window_expired,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestWindow:
    def test_inside_window(self):
        assert not is_window_expired(NOW, NOW + timedelta(hours=23, minutes=59))

    def test_window_elapses_after_24_hours(self):
        assert is_window_expired(NOW, NOW + timedelta(hours=24))

    def test_naive_datetimes_are_treated_as_utc(self):
        naive = NOW.replace(tzinfo=None)
        assert not is_window_expired(naive, NOW + timedelta(hours=1))

    def test_window_length_follows_settings(self, monkeypatch):
        from chatproxy.app.core.config import settings

        monkeypatch.setattr(settings, "usage_window_hours", 1)
        assert is_window_expired(NOW, NOW + timedelta(hours=1))


class TestUsageCounter:
    @pytest.mark.asyncio
    async def test_missing_counter_reads_zero(self, db_session):
        assert await get_usage_count_by_user_id(db_session, "user-1", now=NOW) == 0

    @pytest.mark.asyncio
    async def test_first_increment_starts_window(self, db_session):
        count = await increment_usage(db_session, "user-1", now=NOW)

        assert count == 1
        counter = await get_usage_counter(db_session, "user-1")
        assert counter.count == 1
        assert not is_window_expired(counter.window_start, NOW)

    @pytest.mark.asyncio
    async def test_increments_inside_window(self, db_session):
        for i in range(3):
            await increment_usage(db_session, "user-1", now=NOW + timedelta(minutes=i))

        later = NOW + timedelta(hours=5)
        assert await get_usage_count_by_user_id(db_session, "user-1", now=later) == 3

    @pytest.mark.asyncio
    async def test_expired_window_reads_zero(self, db_session):
        await increment_usage(db_session, "user-1", now=NOW)
        await increment_usage(db_session, "user-1", now=NOW)

        tomorrow = NOW + timedelta(hours=25)
        assert await get_usage_count_by_user_id(db_session, "user-1", now=tomorrow) == 0

    @pytest.mark.asyncio
    async def test_increment_after_expiry_restarts_at_one(self, db_session):
        await increment_usage(db_session, "user-1", now=NOW)
        await increment_usage(db_session, "user-1", now=NOW)

        tomorrow = NOW + timedelta(hours=25)
        assert await increment_usage(db_session, "user-1", now=tomorrow) == 1
        assert await increment_usage(db_session, "user-1", now=tomorrow) == 2
        assert await get_usage_count_by_user_id(db_session, "user-1", now=tomorrow) == 2

    @pytest.mark.asyncio
    async def test_counters_are_per_user(self, db_session):
        await increment_usage(db_session, "user-1", now=NOW)
        await increment_usage(db_session, "user-2", now=NOW)
        await increment_usage(db_session, "user-2", now=NOW)

        assert await get_usage_count_by_user_id(db_session, "user-1", now=NOW) == 1
        assert await get_usage_count_by_user_id(db_session, "user-2", now=NOW) == 2
