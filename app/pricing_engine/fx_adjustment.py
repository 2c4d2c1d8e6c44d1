"""
Admin FX adjustment layer.

FX rules are administered independently from pricing rules and are
applied on top of the base rate. Selection mirrors the pricing rule
resolver (priority, then recency) but with looser scope: ``tx_type``,
``provider`` and ``country`` are wildcards when blank, while the
currency pair must match exactly and the amount must sit in range.

Transforms:
    PASS_THROUGH  -> base rate unchanged
    OVERRIDE      -> override_rate
    DELTA_PERCENT -> base * (1 + percent / 100)   (percent may be negative)
    DELTA_ABS     -> base + delta_abs              (delta may be negative)

The adjusted rate is rounded to 8 dp and must stay positive; a bad
result raises ``InvalidAdjustedRateError`` rather than falling back to
the base rate.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

from app.pricing_engine.currency import is_positive_finite, round_rate
from app.pricing_engine.errors import InvalidAdjustedRateError
from app.pricing_engine.normalizer import normalize_country
from app.pricing_engine.rule_resolver import precedence_key
from app.pricing_engine.snapshots import (
    FxAdjustment,
    FxRuleApplied,
    FxRuleMode,
    FxRuleSnapshot,
    NormalizedRequest,
)

logger = logging.getLogger(__name__)


def _blank(value) -> bool:
    return not str(value or "").strip()


def _eq_upper(a, b) -> bool:
    return str(a or "").strip().upper() == str(b or "").strip().upper()


def _eq_lower(a, b) -> bool:
    return str(a or "").strip().lower() == str(b or "").strip().lower()


def fx_rule_matches(rule: FxRuleSnapshot, req: NormalizedRequest) -> bool:
    if not rule.active:
        return False
    if not _eq_upper(rule.from_currency, req.from_currency):
        return False
    if not _eq_upper(rule.to_currency, req.to_currency):
        return False
    if not _blank(rule.tx_type) and not _eq_upper(rule.tx_type, req.tx_type):
        return False
    if not _blank(rule.provider) and not _eq_lower(rule.provider, req.provider):
        return False
    if not _blank(rule.country) and not _eq_upper(normalize_country(rule.country), req.country):
        return False

    minimum = rule.min_amount if rule.min_amount is not None else Decimal("0")
    if req.amount < minimum:
        return False
    if rule.max_amount is not None and req.amount > rule.max_amount:
        return False
    return True


def select_fx_rule(
    rules: Sequence[FxRuleSnapshot],
    req: NormalizedRequest,
) -> FxRuleSnapshot | None:
    candidates = [rule for rule in rules if fx_rule_matches(rule, req)]
    if not candidates:
        return None
    return sorted(candidates, key=precedence_key, reverse=True)[0]


def _invalid(rule: FxRuleSnapshot, mode: str, base_rate: Decimal, value) -> InvalidAdjustedRateError:
    logger.warning(
        "FX rule %s (%s) produced an invalid rate %r from base %s",
        rule.id, mode, value, base_rate,
    )
    return InvalidAdjustedRateError(
        "Invalid adjusted rate",
        {
            "fxRuleId": rule.id,
            "mode": mode,
            "baseRate": str(base_rate),
            "adjustedRate": None if value is None else str(value),
        },
    )


def apply_fx_rule(base_rate: Decimal, rule: FxRuleSnapshot | None) -> FxAdjustment:
    """
    Transform *base_rate* with *rule*.

    With no rule, or a PASS_THROUGH rule, the base rate is returned
    unchanged. PASS_THROUGH still records the rule that was consulted.
    """
    if rule is None:
        return FxAdjustment(rate=base_rate, applied=None)

    mode = str(rule.mode or FxRuleMode.PASS_THROUGH.value).upper()
    percent = rule.percent or Decimal("0")
    delta_abs = rule.delta_abs or Decimal("0")

    if mode == FxRuleMode.OVERRIDE:
        if not is_positive_finite(rule.override_rate):
            raise _invalid(rule, mode, base_rate, rule.override_rate)
        out = Decimal(str(rule.override_rate))
    elif mode == FxRuleMode.DELTA_PERCENT:
        out = base_rate * (1 + percent / Decimal("100"))
    elif mode == FxRuleMode.DELTA_ABS:
        out = base_rate + delta_abs
    else:
        return FxAdjustment(
            rate=base_rate,
            applied=_applied(rule, FxRuleMode.PASS_THROUGH.value, base_rate, base_rate),
        )

    if not out.is_finite():
        raise _invalid(rule, mode, base_rate, out)
    adjusted = round_rate(out)
    if adjusted <= 0:
        raise _invalid(rule, mode, base_rate, adjusted)

    return FxAdjustment(rate=adjusted, applied=_applied(rule, mode, base_rate, adjusted))


def _applied(rule: FxRuleSnapshot, mode: str, base_rate: Decimal, adjusted: Decimal) -> FxRuleApplied:
    return FxRuleApplied(
        rule_id=rule.id,
        name=rule.name,
        mode=mode,
        base_rate=base_rate,
        adjusted_rate=adjusted,
        priority=int(rule.priority or 0),
        percent=rule.percent or Decimal("0"),
        delta_abs=rule.delta_abs or Decimal("0"),
        override_rate=rule.override_rate,
    )


def resolve_fx_adjustment(
    rules: Sequence[FxRuleSnapshot],
    req: NormalizedRequest,
    base_rate: Decimal,
) -> FxAdjustment:
    """Select the best FX rule for *req* and apply it to *base_rate*."""
    return apply_fx_rule(base_rate, select_fx_rule(rules, req))
