"""
Pricing service — the entry point used by the quote API.

``preview`` prices a request with no side effects. ``lock`` runs the
identical computation and persists the result as a quote lock.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.pricing_quote import PricingQuote
from app.pricing_engine.errors import UnauthenticatedError
from app.pricing_engine.fx_applier import MarketRateSource
from app.pricing_engine.normalizer import normalize_request
from app.pricing_engine.quote_assembler import price_quote
from app.pricing_engine.snapshots import QuoteResult
from app.services.quote_lock_service import QuoteLockService
from app.services.rule_store import load_active_fx_rules, load_active_pricing_rules


class PricingService:

    def __init__(self, db: AsyncSession, rate_source: MarketRateSource):
        self.db = db
        self.rate_source = rate_source

    async def preview(self, raw_request: dict) -> QuoteResult:
        req = normalize_request(raw_request)

        pricing_rules = await load_active_pricing_rules(self.db)
        fx_rules = await load_active_fx_rules(self.db, req.from_currency, req.to_currency)
        return await price_quote(req, pricing_rules, fx_rules, self.rate_source)

    async def lock(self, user_id: str | None, raw_request: dict) -> PricingQuote:
        if not user_id or not str(user_id).strip():
            raise UnauthenticatedError("Unauthorized")

        quote = await self.preview(raw_request)
        return await QuoteLockService(self.db).create(str(user_id), quote)
