"""
Base exchange rate from the matched rule's FX config.

    OVERRIDE -> configured ``override_rate``, used verbatim
    MARKET   -> market rate from the provider
    MARKUP   -> market rate * (1 + markup_percent / 100)

The market rate call is the only suspension point in the pipeline. A
timeout, an exception, ``None`` or a non-positive value all surface as
``RateUnavailableError``; no default rate is ever substituted.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Protocol

from app.pricing_engine.config import MARKET_RATE_TIMEOUT_SECONDS
from app.pricing_engine.currency import is_positive_finite
from app.pricing_engine.errors import InvalidRuleConfigError, RateUnavailableError
from app.pricing_engine.snapshots import BaseRate, FxConfig, FxMode

logger = logging.getLogger(__name__)


class MarketRateSource(Protocol):
    async def get_rate(self, from_currency: str, to_currency: str) -> Decimal | None:
        """Units of *to_currency* per 1 *from_currency*, or ``None``."""
        ...


async def fetch_market_rate(
    source: MarketRateSource,
    from_currency: str,
    to_currency: str,
    timeout: float = MARKET_RATE_TIMEOUT_SECONDS,
) -> Decimal:
    """Call the provider once, bounded by *timeout*, and validate the answer."""
    pair = f"{from_currency}/{to_currency}"
    try:
        rate = await asyncio.wait_for(
            source.get_rate(from_currency, to_currency), timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Market rate lookup for %s timed out after %ss", pair, timeout)
        raise RateUnavailableError(
            "Market rate unavailable", {"pair": pair, "reason": "timeout"},
        )
    except Exception as exc:
        logger.warning("Market rate lookup for %s failed: %s", pair, exc)
        raise RateUnavailableError(
            "Market rate unavailable", {"pair": pair, "reason": "provider_error"},
        ) from exc

    if not is_positive_finite(rate):
        logger.warning("Market rate for %s is invalid: %r", pair, rate)
        raise RateUnavailableError(
            "Market rate unavailable", {"pair": pair, "reason": "invalid_rate"},
        )
    return Decimal(str(rate))


async def apply_base_rate(
    fx: FxConfig,
    from_currency: str,
    to_currency: str,
    source: MarketRateSource,
    *,
    rule_id: str | None = None,
) -> BaseRate:
    mode = str(fx.mode or FxMode.MARKET.value).upper()

    if mode == FxMode.OVERRIDE:
        if not is_positive_finite(fx.override_rate):
            logger.warning(
                "Pricing rule %s has fx OVERRIDE without a positive overrideRate",
                rule_id,
            )
            raise InvalidRuleConfigError(
                "Invalid overrideRate",
                {"ruleId": rule_id, "overrideRate": _str_or_none(fx.override_rate)},
            )
        return BaseRate(applied_rate=Decimal(str(fx.override_rate)), market_rate=None)

    market_rate = await fetch_market_rate(source, from_currency, to_currency)

    if mode == FxMode.MARKUP:
        markup = fx.markup_percent or Decimal("0")
        applied = market_rate * (1 + markup / Decimal("100"))
        if applied <= 0:
            raise InvalidRuleConfigError(
                "Invalid markupPercent",
                {"ruleId": rule_id, "markupPercent": str(markup)},
            )
        return BaseRate(applied_rate=applied, market_rate=market_rate)

    return BaseRate(applied_rate=market_rate, market_rate=market_rate)


def _str_or_none(value) -> str | None:
    return None if value is None else str(value)
