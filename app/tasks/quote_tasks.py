"""
Quote lock housekeeping.

Deletes locks whose ``expires_at`` lies further in the past than
PRICING_QUOTE_RETENTION_HOURS. Expiry itself is computed lazily at read
time, so this task only reclaims storage and never changes what a
reader observes for a live lock.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete

from app.config import settings
from app.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


async def _purge_expired_quotes_async(session_factory=None, now: datetime | None = None) -> dict:
    """
    Async inner function that removes long-expired quote locks.

    Uses a session factory directly (not FastAPI deps — Celery runs
    outside the request lifecycle).
    """
    from app.database import session_scope
    from app.models.pricing_quote import PricingQuote

    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=settings.PRICING_QUOTE_RETENTION_HOURS)

    async with session_scope(session_factory) as session:
        result = await session.execute(
            delete(PricingQuote).where(PricingQuote.expires_at < cutoff)
        )

    return {
        "purged_count": result.rowcount or 0,
        "cutoff": cutoff.isoformat(),
    }


@celery_app.task(name="app.tasks.quote_tasks.purge_expired_quotes")
def purge_expired_quotes():
    """
    Purge quote locks expired for longer than the retention window.

    Celery tasks are synchronous, so the async body runs in its own
    event loop.
    """
    logger.info("Starting expired quote purge")
    loop = asyncio.new_event_loop()
    try:
        result = loop.run_until_complete(_purge_expired_quotes_async())
        logger.info(
            "Quote purge completed: %d locks removed (cutoff %s)",
            result["purged_count"], result["cutoff"],
        )
        return result
    except Exception:
        logger.exception("Expired quote purge failed")
        raise
    finally:
        loop.close()
