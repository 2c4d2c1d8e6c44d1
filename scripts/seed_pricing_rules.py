"""
Pricing rule seeder — populates the database with sample corridors for
development.

Usage:
    python scripts/seed_pricing_rules.py

Creates:
  - 5 pricing rules (EUR->XOF, USD->XOF, EUR->XAF, CAD->XOF, XOF->XOF)
  - 2 FX rules on EUR->XOF (a provider spread and a large-amount bonus)

Idempotent: a rule whose (tx_type, from, to, priority) already exists
is left untouched.
"""

import asyncio
from decimal import Decimal

from sqlalchemy import select

from app.database import session_scope
from app.models.fx_rule import FxRule
from app.models.pricing_rule import PricingRule
from app.pricing_engine.snapshots import FeeMode, FxMode, FxRuleMode

# ---------------------------------------------------------------------------
# Pricing rules
# ---------------------------------------------------------------------------

SAMPLE_PRICING_RULES: list[dict] = [
    {
        "tx_type": "TRANSFER",
        "from_currency": "EUR",
        "to_currency": "XOF",
        "countries": ["CI", "SN", "ML", "BF"],
        "priority": 10,
        "fee_mode": FeeMode.PERCENT.value,
        "fee_percent": Decimal("2"),
        "fee_min": Decimal("1"),
        "fee_max": Decimal("25"),
        "fx_mode": FxMode.OVERRIDE.value,
        "fx_override_rate": Decimal("655"),
        "notes": "Euro zone to UEMOA, pegged rate",
    },
    {
        "tx_type": "TRANSFER",
        "from_currency": "USD",
        "to_currency": "XOF",
        "priority": 5,
        "fee_mode": FeeMode.MIXED.value,
        "fee_percent": Decimal("1.5"),
        "fee_fixed": Decimal("0.99"),
        "fx_mode": FxMode.MARKUP.value,
        "fx_markup_percent": Decimal("1"),
        "notes": "US dollar corridor, market rate plus 1%",
    },
    {
        "tx_type": "TRANSFER",
        "from_currency": "EUR",
        "to_currency": "XAF",
        "countries": ["CM", "GA", "CG"],
        "priority": 5,
        "fee_mode": FeeMode.FIXED.value,
        "fee_fixed": Decimal("3"),
        "fx_mode": FxMode.OVERRIDE.value,
        "fx_override_rate": Decimal("655.957"),
    },
    {
        "tx_type": "TRANSFER",
        "from_currency": "CAD",
        "to_currency": "XOF",
        "priority": 0,
        "amount_min": Decimal("10"),
        "amount_max": Decimal("5000"),
        "fee_mode": FeeMode.PERCENT.value,
        "fee_percent": Decimal("2.5"),
        "fx_mode": FxMode.MARKET.value,
    },
    {
        "tx_type": "WITHDRAW",
        "from_currency": "XOF",
        "to_currency": "XOF",
        "operators": ["orange", "mtn", "wave"],
        "priority": 0,
        "fee_mode": FeeMode.PERCENT.value,
        "fee_percent": Decimal("1"),
        "fee_min": Decimal("100"),
        "fx_mode": FxMode.MARKET.value,
        "notes": "Mobile money cash-out",
    },
]

# ---------------------------------------------------------------------------
# FX rules
# ---------------------------------------------------------------------------

SAMPLE_FX_RULES: list[dict] = [
    {
        "name": "Wave spread",
        "from_currency": "EUR",
        "to_currency": "XOF",
        "provider": "wave",
        "priority": 10,
        "mode": FxRuleMode.DELTA_PERCENT.value,
        "percent": Decimal("-0.5"),
    },
    {
        "name": "Large transfer bonus",
        "from_currency": "EUR",
        "to_currency": "XOF",
        "tx_type": "TRANSFER",
        "min_amount": Decimal("2000"),
        "priority": 5,
        "mode": FxRuleMode.DELTA_ABS.value,
        "delta_abs": Decimal("2"),
    },
]


async def seed() -> None:
    """Insert sample rules that are not already present."""
    print("Seeding pricing rules...")
    async with session_scope() as session:
        existing_rules = {
            (row.tx_type, row.from_currency, row.to_currency, row.priority)
            for row in (await session.execute(select(PricingRule))).scalars().all()
        }
        new_rules = 0
        for data in SAMPLE_PRICING_RULES:
            key = (data["tx_type"], data["from_currency"], data["to_currency"], data["priority"])
            if key in existing_rules:
                continue
            session.add(PricingRule(**data))
            new_rules += 1
        print(f"  Pricing rules: {new_rules} new, {len(SAMPLE_PRICING_RULES) - new_rules} existing")

        existing_names = set(
            (await session.execute(select(FxRule.name))).scalars().all()
        )
        new_fx = 0
        for data in SAMPLE_FX_RULES:
            if data["name"] in existing_names:
                continue
            session.add(FxRule(**data))
            new_fx += 1
        print(f"  FX rules: {new_fx} new, {len(SAMPLE_FX_RULES) - new_fx} existing")

    print("Done.")


if __name__ == "__main__":
    asyncio.run(seed())
