"""
Immutable value objects flowing through the pricing pipeline.

Rule snapshots are built once per request from the ORM rows and handed
to pure resolver functions, so a concurrent admin edit can never be
observed half-way through a computation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TxType(str, enum.Enum):
    TRANSFER = "TRANSFER"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"


class FeeMode(str, enum.Enum):
    NONE = "NONE"
    PERCENT = "PERCENT"
    FIXED = "FIXED"
    MIXED = "MIXED"


class FxMode(str, enum.Enum):
    MARKET = "MARKET"
    OVERRIDE = "OVERRIDE"
    MARKUP = "MARKUP"


class FxRuleMode(str, enum.Enum):
    PASS_THROUGH = "PASS_THROUGH"
    OVERRIDE = "OVERRIDE"
    DELTA_PERCENT = "DELTA_PERCENT"
    DELTA_ABS = "DELTA_ABS"


class QuoteStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedRequest:
    tx_type: str
    amount: Decimal
    from_currency: str
    to_currency: str
    country: str | None = None
    operator: str | None = None
    provider: str | None = None

    def to_dict(self) -> dict:
        return {
            "txType": self.tx_type,
            "amount": str(self.amount),
            "fromCurrency": self.from_currency,
            "toCurrency": self.to_currency,
            "country": self.country,
            "operator": self.operator,
            "provider": self.provider,
        }


# ---------------------------------------------------------------------------
# Rule snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AmountRange:
    min: Decimal = Decimal("0")
    max: Decimal | None = None


@dataclass(frozen=True)
class FeeConfig:
    mode: str = FeeMode.NONE.value
    percent: Decimal = Decimal("0")
    fixed: Decimal = Decimal("0")
    min_fee: Decimal | None = None
    max_fee: Decimal | None = None


@dataclass(frozen=True)
class FxConfig:
    mode: str = FxMode.MARKET.value
    override_rate: Decimal | None = None
    markup_percent: Decimal = Decimal("0")


@dataclass(frozen=True)
class PricingRuleSnapshot:
    id: str
    tx_type: str
    from_currency: str
    to_currency: str
    countries: tuple[str, ...] = ()
    operators: tuple[str, ...] = ()
    amount_range: AmountRange = field(default_factory=AmountRange)
    fee: FeeConfig = field(default_factory=FeeConfig)
    fx: FxConfig = field(default_factory=FxConfig)
    priority: int = 0
    active: bool = True
    version: int = 1
    updated_at: datetime | None = None


@dataclass(frozen=True)
class FxRuleSnapshot:
    id: str
    from_currency: str
    to_currency: str
    name: str = ""
    tx_type: str = ""
    provider: str = ""
    country: str = ""
    min_amount: Decimal = Decimal("0")
    max_amount: Decimal | None = None
    mode: str = FxRuleMode.PASS_THROUGH.value
    override_rate: Decimal | None = None
    percent: Decimal = Decimal("0")
    delta_abs: Decimal = Decimal("0")
    priority: int = 0
    active: bool = True
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def _s(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class FeeBreakdown:
    mode: str
    percent: Decimal
    fixed: Decimal
    min_fee: Decimal | None
    max_fee: Decimal | None
    fee_raw: Decimal

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "percent": str(self.percent),
            "fixed": str(self.fixed),
            "minFee": _s(self.min_fee),
            "maxFee": _s(self.max_fee),
            "feeRaw": str(self.fee_raw),
        }


@dataclass(frozen=True)
class FeeComputation:
    fee: Decimal
    gross_from: Decimal
    net_from: Decimal
    breakdown: FeeBreakdown


@dataclass(frozen=True)
class BaseRate:
    """Rate produced by the pricing rule's FX config, before admin adjustment."""
    applied_rate: Decimal
    market_rate: Decimal | None = None


@dataclass(frozen=True)
class RuleApplied:
    rule_id: str
    version: int
    priority: int

    def to_dict(self) -> dict:
        return {"ruleId": self.rule_id, "version": self.version, "priority": self.priority}


@dataclass(frozen=True)
class FxRuleApplied:
    rule_id: str
    name: str
    mode: str
    base_rate: Decimal
    adjusted_rate: Decimal
    priority: int
    percent: Decimal
    delta_abs: Decimal
    override_rate: Decimal | None

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "name": self.name,
            "mode": self.mode,
            "baseRate": str(self.base_rate),
            "adjustedRate": str(self.adjusted_rate),
            "priority": self.priority,
            "percent": str(self.percent),
            "deltaAbs": str(self.delta_abs),
            "overrideRate": _s(self.override_rate),
        }


@dataclass(frozen=True)
class FxAdjustment:
    rate: Decimal
    applied: FxRuleApplied | None = None


@dataclass(frozen=True)
class QuoteAmounts:
    market_rate: Decimal | None
    applied_rate: Decimal
    fee: Decimal
    fee_breakdown: FeeBreakdown
    gross_from: Decimal
    net_from: Decimal
    net_to: Decimal

    def to_dict(self) -> dict:
        return {
            "marketRate": _s(self.market_rate),
            "appliedRate": str(self.applied_rate),
            "fee": str(self.fee),
            "feeBreakdown": self.fee_breakdown.to_dict(),
            "grossFrom": str(self.gross_from),
            "netFrom": str(self.net_from),
            "netTo": str(self.net_to),
        }


@dataclass(frozen=True)
class QuoteResult:
    request: NormalizedRequest
    result: QuoteAmounts
    rule_applied: RuleApplied
    fx_rule_applied: FxRuleApplied | None = None

    def to_dict(self) -> dict:
        return {
            "request": self.request.to_dict(),
            "result": self.result.to_dict(),
            "ruleApplied": self.rule_applied.to_dict(),
            "fxRuleApplied": (
                self.fx_rule_applied.to_dict() if self.fx_rule_applied else None
            ),
        }
