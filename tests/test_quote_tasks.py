"""Tests for the expired quote purge task."""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.tasks import quote_tasks
from app.tasks.quote_tasks import _purge_expired_quotes_async, purge_expired_quotes

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _session_factory(session):
    @asynccontextmanager
    async def factory():
        yield session
    return factory


@pytest.fixture
def purge_session(mock_db):
    result = MagicMock()
    result.rowcount = 3
    mock_db.execute = AsyncMock(return_value=result)
    return mock_db


class TestPurgeExpiredQuotes:

    @pytest.mark.asyncio
    async def test_deletes_before_retention_cutoff(self, purge_session, monkeypatch):
        monkeypatch.setattr(quote_tasks.settings, "PRICING_QUOTE_RETENTION_HOURS", 24)

        result = await _purge_expired_quotes_async(_session_factory(purge_session), now=NOW)

        assert result == {
            "purged_count": 3,
            "cutoff": (NOW - timedelta(hours=24)).isoformat(),
        }
        purge_session.execute.assert_awaited_once()
        purge_session.commit.assert_awaited_once()

        statement = purge_session.execute.call_args.args[0]
        assert statement.table.name == "pricing_quotes"

    @pytest.mark.asyncio
    async def test_nothing_to_purge(self, mock_db):
        result = MagicMock()
        result.rowcount = None
        mock_db.execute = AsyncMock(return_value=result)

        outcome = await _purge_expired_quotes_async(_session_factory(mock_db), now=NOW)
        assert outcome["purged_count"] == 0

    def test_celery_task_runs_async_body(self):
        expected = {"purged_count": 2, "cutoff": NOW.isoformat()}
        with patch.object(
            quote_tasks, "_purge_expired_quotes_async", AsyncMock(return_value=expected),
        ):
            assert purge_expired_quotes() == expected

    def test_celery_task_reraises(self):
        with patch.object(
            quote_tasks, "_purge_expired_quotes_async",
            AsyncMock(side_effect=RuntimeError("db down")),
        ):
            with pytest.raises(RuntimeError):
                purge_expired_quotes()

    def test_beat_schedule(self):
        from app.tasks.celery_app import celery_app

        entry = celery_app.conf.beat_schedule["purge-expired-quotes"]
        assert entry["task"] == "app.tasks.quote_tasks.purge_expired_quotes"
