"""
Pricing rule selection.

Picks the single best active ``PricingRuleSnapshot`` for a normalized
request. Candidates must match the corridor exactly, contain the amount
and satisfy the optional country / operator lists. Ties resolve by
priority (highest first), then by most recent ``updated_at``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from app.pricing_engine.errors import NoRuleMatchedError
from app.pricing_engine.normalizer import normalize_country
from app.pricing_engine.snapshots import (
    AmountRange,
    NormalizedRequest,
    PricingRuleSnapshot,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

NO_MATCH_HINT = (
    "Check that an active pricing rule exists for this corridor and txType, "
    "and that scope.countries holds ISO2 codes (FR, CI...) or is left empty."
)


# ── Predicates ──────────────────────────────────────────────────────────


def _upper(value) -> str:
    return str(value or "").strip().upper()


def in_amount_range(amount: Decimal, amount_range: AmountRange) -> bool:
    """Inclusive range check; a ``None`` max is unbounded."""
    minimum = amount_range.min if amount_range.min is not None else Decimal("0")
    if amount < minimum:
        return False
    if amount_range.max is not None and amount > amount_range.max:
        return False
    return True


def matches_optional_list(value: str | None, allowed: Iterable[str]) -> bool:
    """Empty *allowed* matches anything; otherwise case-insensitive membership."""
    allowed = [_upper(item) for item in allowed if _upper(item)]
    if not allowed:
        return True
    if not value:
        return False
    return _upper(value) in allowed


def matches_countries(country: str | None, rule_countries: Iterable[str]) -> bool:
    """Compare the request's normalized country to normalized rule entries."""
    entries = [normalize_country(c) for c in rule_countries]
    entries = [c for c in entries if c]
    if not entries:
        return True
    if not country:
        return False
    return _upper(country) in entries


def rule_matches(rule: PricingRuleSnapshot, req: NormalizedRequest) -> bool:
    if not rule.active:
        return False
    if _upper(rule.tx_type) != req.tx_type:
        return False
    if _upper(rule.from_currency) != req.from_currency:
        return False
    if _upper(rule.to_currency) != req.to_currency:
        return False
    if not in_amount_range(req.amount, rule.amount_range):
        return False
    if not matches_countries(req.country, rule.countries):
        return False
    if not matches_optional_list(req.operator, rule.operators):
        return False
    return True


# ── Ordering ────────────────────────────────────────────────────────────


def _as_aware(ts: datetime | None) -> datetime:
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def precedence_key(rule) -> tuple[int, datetime]:
    """
    Sort key shared by pricing and FX rules: priority, then recency.

    Use with ``reverse=True`` (or ``max``) so the winner comes first.
    """
    return (int(rule.priority or 0), _as_aware(rule.updated_at))


# ── Public API ──────────────────────────────────────────────────────────


def select_pricing_rule(
    rules: Sequence[PricingRuleSnapshot],
    req: NormalizedRequest,
) -> PricingRuleSnapshot | None:
    """Return the best matching rule, or ``None`` when nothing matches."""
    candidates = [rule for rule in rules if rule_matches(rule, req)]
    if not candidates:
        return None
    # sorted() is stable, so fully tied rules keep snapshot order
    return sorted(candidates, key=precedence_key, reverse=True)[0]


def resolve_pricing_rule(
    rules: Sequence[PricingRuleSnapshot],
    req: NormalizedRequest,
) -> PricingRuleSnapshot:
    """
    Like ``select_pricing_rule`` but raises ``NoRuleMatchedError``.

    The error details echo the normalized request and the number of
    rules considered so an operator can see what was actually compared.
    """
    rule = select_pricing_rule(rules, req)
    if rule is None:
        raise NoRuleMatchedError(
            "No pricing rule matched",
            {
                "normalizedRequest": req.to_dict(),
                "rulesConsidered": len(rules),
                "hint": NO_MATCH_HINT,
            },
        )
    return rule
