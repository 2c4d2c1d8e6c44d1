"""
Pydantic schemas for quote previews and quote locks.

Wire format is camelCase (``txType``, ``fromCurrency``...); snake_case
names are accepted on input as well. Money and rates are Decimals and
serialize as strings.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class QuoteRequest(CamelModel):
    """
    Raw quote request. Fields are deliberately loose: validation and
    synonym mapping happen in the normalizer so every failure surfaces
    as an ``invalid_input`` error rather than a schema 422.
    """
    tx_type: str | None = Field(None, examples=["TRANSFER"])
    amount: Decimal | str | None = Field(None, examples=[1000])
    from_currency: str | None = Field(None, examples=["EUR"])
    to_currency: str | None = Field(None, examples=["XOF"])
    country: str | None = Field(None, examples=["CI"])
    operator: str | None = Field(None, examples=["ORANGE"])
    provider: str | None = Field(None, examples=["mobilemoney"])


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class NormalizedRequestOut(CamelModel):
    tx_type: str
    amount: Decimal
    from_currency: str
    to_currency: str
    country: str | None = None
    operator: str | None = None
    provider: str | None = None


class FeeBreakdownOut(CamelModel):
    mode: str
    percent: Decimal
    fixed: Decimal
    min_fee: Decimal | None = None
    max_fee: Decimal | None = None
    fee_raw: Decimal


class QuoteAmountsOut(CamelModel):
    market_rate: Decimal | None = None
    applied_rate: Decimal
    fee: Decimal
    fee_breakdown: FeeBreakdownOut
    gross_from: Decimal
    net_from: Decimal
    net_to: Decimal


class RuleAppliedOut(CamelModel):
    rule_id: str
    version: int
    priority: int


class FxRuleAppliedOut(CamelModel):
    rule_id: str
    name: str
    mode: str
    base_rate: Decimal
    adjusted_rate: Decimal
    priority: int
    percent: Decimal
    delta_abs: Decimal
    override_rate: Decimal | None = None


class QuoteResponse(CamelModel):
    """Ephemeral quote preview."""
    ok: bool = True
    mode: str = "QUOTE"
    request: NormalizedRequestOut
    result: QuoteAmountsOut
    rule_applied: RuleAppliedOut
    fx_rule_applied: FxRuleAppliedOut | None = None


class LockResponse(QuoteResponse):
    """Persisted quote lock with its effective status."""
    mode: str = "LOCKED"
    quote_id: str
    status: str
    expires_at: datetime
