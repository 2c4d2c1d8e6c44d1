"""
Read-only rule snapshots, loaded fresh for every request.

There is no engine-side cache: a snapshot is exactly as fresh as the
query that produced it.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.fx_rule import FxRule
from app.models.pricing_rule import PricingRule
from app.pricing_engine.snapshots import FxRuleSnapshot, PricingRuleSnapshot


async def load_active_pricing_rules(db: AsyncSession) -> tuple[PricingRuleSnapshot, ...]:
    result = await db.execute(select(PricingRule).where(PricingRule.active.is_(True)))
    return tuple(rule.to_snapshot() for rule in result.scalars().all())


async def load_active_fx_rules(
    db: AsyncSession,
    from_currency: str,
    to_currency: str,
) -> tuple[FxRuleSnapshot, ...]:
    """Active FX rules for one ordered currency pair."""
    result = await db.execute(
        select(FxRule).where(
            FxRule.active.is_(True),
            FxRule.from_currency == from_currency.upper(),
            FxRule.to_currency == to_currency.upper(),
        )
    )
    return tuple(rule.to_snapshot() for rule in result.scalars().all())
