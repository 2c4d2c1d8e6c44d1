"""
Quote assembly — normalize, resolve rule, compute fee, apply FX.

``assemble_quote`` runs the pricing-rule half of the pipeline and
returns a quote priced at the base rate. ``apply_fx_adjustment`` layers
the admin FX rule on top and re-derives the destination amount from
``net_from * applied_rate``. ``price_quote`` chains both; it has no side
effects and is safe to call repeatedly.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Sequence

from app.pricing_engine.currency import round_money
from app.pricing_engine.fee_calculator import compute_fee
from app.pricing_engine.fx_adjustment import resolve_fx_adjustment
from app.pricing_engine.fx_applier import MarketRateSource, apply_base_rate
from app.pricing_engine.rule_resolver import resolve_pricing_rule
from app.pricing_engine.snapshots import (
    FxRuleSnapshot,
    NormalizedRequest,
    PricingRuleSnapshot,
    QuoteAmounts,
    QuoteResult,
    RuleApplied,
)

logger = logging.getLogger(__name__)


async def assemble_quote(
    req: NormalizedRequest,
    pricing_rules: Sequence[PricingRuleSnapshot],
    rate_source: MarketRateSource,
) -> QuoteResult:
    """Rule resolver -> fee calculator -> FX applier, priced at the base rate."""
    rule = resolve_pricing_rule(pricing_rules, req)
    fee = compute_fee(req.amount, rule.fee, req.from_currency)
    base = await apply_base_rate(
        rule.fx, req.from_currency, req.to_currency, rate_source, rule_id=rule.id,
    )

    return QuoteResult(
        request=dataclasses.replace(req, amount=fee.gross_from),
        result=QuoteAmounts(
            market_rate=base.market_rate,
            applied_rate=base.applied_rate,
            fee=fee.fee,
            fee_breakdown=fee.breakdown,
            gross_from=fee.gross_from,
            net_from=fee.net_from,
            net_to=round_money(fee.net_from * base.applied_rate, req.to_currency),
        ),
        rule_applied=RuleApplied(
            rule_id=rule.id,
            version=int(rule.version or 1),
            priority=int(rule.priority or 0),
        ),
    )


def apply_fx_adjustment(
    quote: QuoteResult,
    fx_rules: Sequence[FxRuleSnapshot],
    context: NormalizedRequest,
) -> QuoteResult:
    """
    Overwrite the applied rate with the admin-adjusted one.

    *context* is the original normalized request; FX rules match on the
    amount the client asked for, not the rounded gross amount.
    """
    adjustment = resolve_fx_adjustment(fx_rules, context, quote.result.applied_rate)
    if adjustment.applied is None:
        return quote

    net_to = round_money(quote.result.net_from * adjustment.rate, context.to_currency)
    return dataclasses.replace(
        quote,
        result=dataclasses.replace(
            quote.result, applied_rate=adjustment.rate, net_to=net_to,
        ),
        fx_rule_applied=adjustment.applied,
    )


async def price_quote(
    req: NormalizedRequest,
    pricing_rules: Sequence[PricingRuleSnapshot],
    fx_rules: Sequence[FxRuleSnapshot],
    rate_source: MarketRateSource,
) -> QuoteResult:
    """Full pipeline for one normalized request against fixed rule snapshots."""
    quote = await assemble_quote(req, pricing_rules, rate_source)
    quote = apply_fx_adjustment(quote, fx_rules, req)

    logger.debug(
        "Priced %s %s %s->%s with rule %s (fx rule %s): rate=%s fee=%s netTo=%s",
        req.tx_type, req.amount, req.from_currency, req.to_currency,
        quote.rule_applied.rule_id,
        quote.fx_rule_applied.rule_id if quote.fx_rule_applied else None,
        quote.result.applied_rate, quote.result.fee, quote.result.net_to,
    )
    return quote
