"""Tests for quote locks — creation, lazy expiry and the status machine."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from app.models.pricing_quote import VALID_TRANSITIONS, PricingQuote
from app.pricing_engine.errors import (
    QuoteNotFoundError,
    QuoteNotRedeemableError,
    UnauthenticatedError,
)
from app.pricing_engine.quote_assembler import price_quote
from app.pricing_engine.snapshots import QuoteStatus
from app.services.quote_lock_service import QuoteLockService

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def quote(make_rule, make_fx_rule, make_request, rate_source):
    return await price_quote(make_request(), [make_rule()], [make_fx_rule()], rate_source)


def _make_lock(**overrides) -> PricingQuote:
    defaults = {
        "user_id": "user-1",
        "request": {"txType": "TRANSFER"},
        "result": {"netTo": "641900"},
        "rule_applied": {"ruleId": "r1", "version": 1, "priority": 0},
        "fx_rule_applied": None,
        "rule_id": "r1",
        "rule_version": 1,
        "expires_at": NOW + timedelta(minutes=10),
    }
    defaults.update(overrides)
    return PricingQuote(**defaults)


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class TestPricingQuoteModel:

    def test_defaults(self):
        lock = _make_lock()
        assert lock.status == QuoteStatus.ACTIVE
        assert len(lock.quote_id) == 36

    def test_quote_ids_are_unique(self):
        ids = {PricingQuote.generate_quote_id() for _ in range(100)}
        assert len(ids) == 100

    def test_active_before_expiry(self):
        assert _make_lock().effective_status(NOW) == QuoteStatus.ACTIVE

    def test_boundary_is_still_active(self):
        lock = _make_lock(expires_at=NOW)
        assert lock.effective_status(NOW) == QuoteStatus.ACTIVE

    def test_lazy_expiry_does_not_rewrite_status(self):
        lock = _make_lock()
        later = NOW + timedelta(minutes=11)
        assert lock.effective_status(later) == QuoteStatus.EXPIRED
        assert lock.status == QuoteStatus.ACTIVE
        assert lock.to_dict(later)["status"] == "EXPIRED"

    def test_used_stays_used_after_expiry(self):
        lock = _make_lock(status=QuoteStatus.USED)
        assert lock.effective_status(NOW + timedelta(days=1)) == QuoteStatus.USED

    def test_naive_expiry_treated_as_utc(self):
        lock = _make_lock(expires_at=datetime(2026, 10, 18, 12, 10))
        assert lock.effective_status(NOW) == QuoteStatus.ACTIVE
        assert lock.effective_status(NOW + timedelta(minutes=11)) == QuoteStatus.EXPIRED


class TestTransitions:

    def test_terminal_states(self):
        assert VALID_TRANSITIONS[QuoteStatus.USED] == set()
        assert VALID_TRANSITIONS[QuoteStatus.EXPIRED] == set()

    def test_active_to_used(self):
        lock = _make_lock()
        lock.transition_to(QuoteStatus.USED, NOW)
        assert lock.status == QuoteStatus.USED

    def test_used_cannot_be_reused(self):
        lock = _make_lock(status=QuoteStatus.USED)
        with pytest.raises(ValueError, match="Invalid transition"):
            lock.transition_to(QuoteStatus.USED, NOW)

    def test_expired_lock_cannot_be_used(self):
        lock = _make_lock()
        with pytest.raises(ValueError, match="EXPIRED -> USED"):
            lock.transition_to(QuoteStatus.USED, NOW + timedelta(minutes=11))

    def test_stale_active_can_be_marked_expired(self):
        lock = _make_lock()
        lock.transition_to(QuoteStatus.EXPIRED, NOW + timedelta(minutes=11))
        assert lock.status == QuoteStatus.EXPIRED


# ---------------------------------------------------------------------------
# QuoteLockService
# ---------------------------------------------------------------------------


class TestCreateLock:

    @pytest.mark.asyncio
    async def test_persists_active_lock(self, mock_db, quote):
        lock = await QuoteLockService(mock_db).create("user-1", quote, now=NOW)

        mock_db.add.assert_called_once_with(lock)
        mock_db.flush.assert_awaited_once()
        assert lock.status == QuoteStatus.ACTIVE
        assert lock.user_id == "user-1"
        assert lock.expires_at == NOW + timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_snapshot_matches_quote(self, mock_db, quote):
        lock = await QuoteLockService(mock_db).create("user-1", quote, now=NOW)
        data = quote.to_dict()

        assert lock.request == data["request"]
        assert lock.result == data["result"]
        assert lock.rule_applied == data["ruleApplied"]
        assert lock.fx_rule_applied == data["fxRuleApplied"]
        assert lock.rule_id == "rule-eur-xof"
        assert lock.rule_version == 1

    @pytest.mark.asyncio
    async def test_custom_ttl(self, mock_db, quote):
        service = QuoteLockService(mock_db, ttl=timedelta(minutes=2))
        lock = await service.create("user-1", quote, now=NOW)
        assert lock.expires_at == NOW + timedelta(minutes=2)

    @pytest.mark.asyncio
    async def test_zero_ttl_is_honoured(self, mock_db, quote):
        service = QuoteLockService(mock_db, ttl=timedelta(0))
        lock = await service.create("user-1", quote, now=NOW)

        assert service.ttl == timedelta(0)
        assert lock.expires_at == NOW
        assert lock.effective_status(NOW + timedelta(seconds=1)) == QuoteStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_each_lock_gets_a_new_id(self, mock_db, quote):
        service = QuoteLockService(mock_db)
        first = await service.create("user-1", quote, now=NOW)
        second = await service.create("user-1", quote, now=NOW)
        assert first.quote_id != second.quote_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", ["", "   ", None])
    async def test_requires_user(self, mock_db, quote, user_id):
        with pytest.raises(UnauthenticatedError):
            await QuoteLockService(mock_db).create(user_id, quote)
        mock_db.add.assert_not_called()


class TestGetLock:

    @pytest.mark.asyncio
    async def test_found(self, mock_db):
        lock = _make_lock()
        mock_db.execute.return_value.scalar_one_or_none = MagicMock(return_value=lock)
        assert await QuoteLockService(mock_db).get(lock.quote_id, "user-1") is lock

    @pytest.mark.asyncio
    async def test_not_found(self, mock_db):
        with pytest.raises(QuoteNotFoundError) as exc_info:
            await QuoteLockService(mock_db).get("missing", "user-1")
        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"quoteId": "missing"}


class TestEnsureRedeemable:

    def test_active(self):
        lock = _make_lock()
        assert QuoteLockService.ensure_redeemable(lock, NOW) is lock

    def test_expired(self):
        with pytest.raises(QuoteNotRedeemableError) as exc_info:
            QuoteLockService.ensure_redeemable(_make_lock(), NOW + timedelta(hours=1))
        assert exc_info.value.message == "Quote is EXPIRED"
        assert exc_info.value.status_code == 409

    def test_used(self):
        with pytest.raises(QuoteNotRedeemableError, match="USED"):
            QuoteLockService.ensure_redeemable(_make_lock(status=QuoteStatus.USED), NOW)
