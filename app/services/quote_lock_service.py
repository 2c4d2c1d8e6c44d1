"""
Quote lock manager — persists a priced quote as a time-bounded lock.

Creation is a single insert keyed by a fresh UUID4; there is no
read-modify-write. Reads are owner-scoped and report the effective
(lazily expired) status. Consuming a lock is the execution service's
job; ``ensure_redeemable`` is the guard it runs first.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pricing_quote import PricingQuote
from app.pricing_engine.config import LOCK_TTL_MINUTES
from app.pricing_engine.errors import (
    QuoteNotFoundError,
    QuoteNotRedeemableError,
    UnauthenticatedError,
)
from app.pricing_engine.snapshots import QuoteResult, QuoteStatus

logger = logging.getLogger(__name__)


class QuoteLockService:
    """Create and read locked quotes."""

    def __init__(self, db: AsyncSession, ttl: timedelta | None = None):
        self.db = db
        self.ttl = ttl if ttl is not None else timedelta(minutes=LOCK_TTL_MINUTES)

    async def create(
        self,
        user_id: str,
        quote: QuoteResult,
        now: datetime | None = None,
    ) -> PricingQuote:
        """Persist *quote* for *user_id* as an ACTIVE lock expiring after the TTL."""
        if not user_id or not str(user_id).strip():
            raise UnauthenticatedError("Unauthorized")

        now = now or datetime.now(timezone.utc)
        snapshot = quote.to_dict()

        lock = PricingQuote(
            quote_id=PricingQuote.generate_quote_id(),
            user_id=str(user_id),
            status=QuoteStatus.ACTIVE,
            request=snapshot["request"],
            result=snapshot["result"],
            rule_applied=snapshot["ruleApplied"],
            fx_rule_applied=snapshot["fxRuleApplied"],
            rule_id=quote.rule_applied.rule_id,
            rule_version=quote.rule_applied.version,
            expires_at=now + self.ttl,
            created_at=now,
            updated_at=now,
        )
        self.db.add(lock)
        await self.db.flush()

        logger.info(
            "Quote %s locked for user %s until %s (rule %s v%s)",
            lock.quote_id, lock.user_id, lock.expires_at.isoformat(),
            lock.rule_id, lock.rule_version,
        )
        return lock

    async def get(self, quote_id: str, user_id: str) -> PricingQuote:
        """Fetch a lock owned by *user_id*; other users' locks look absent."""
        result = await self.db.execute(
            select(PricingQuote).where(
                PricingQuote.quote_id == quote_id,
                PricingQuote.user_id == str(user_id),
            )
        )
        lock = result.scalar_one_or_none()
        if lock is None:
            raise QuoteNotFoundError("Quote not found", {"quoteId": quote_id})
        return lock

    @staticmethod
    def ensure_redeemable(lock: PricingQuote, now: datetime | None = None) -> PricingQuote:
        """Raise unless the lock is effectively ACTIVE at *now*."""
        status = lock.effective_status(now)
        if status != QuoteStatus.ACTIVE:
            raise QuoteNotRedeemableError(
                f"Quote is {status.value}",
                {"quoteId": lock.quote_id, "status": status.value},
            )
        return lock
