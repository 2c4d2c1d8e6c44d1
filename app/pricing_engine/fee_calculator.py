"""
Fee calculation for a matched pricing rule.

Fee modes:
    NONE    -> 0
    FIXED   -> fixed (amount is ignored)
    PERCENT -> amount * percent / 100
    MIXED   -> percent part + fixed part

The raw fee is clamped to ``[min_fee, max_fee]`` (each bound only when
configured), then rounded to the source currency's precision.
"""

from decimal import Decimal

from app.pricing_engine.currency import round_money
from app.pricing_engine.errors import FeeExceedsAmountError
from app.pricing_engine.snapshots import FeeBreakdown, FeeComputation, FeeConfig, FeeMode

HUNDRED = Decimal("100")


def raw_fee(amount: Decimal, fee: FeeConfig) -> Decimal:
    mode = str(fee.mode or FeeMode.NONE.value).upper()
    percent = fee.percent or Decimal("0")
    fixed = fee.fixed or Decimal("0")

    if mode == FeeMode.PERCENT:
        return amount * percent / HUNDRED
    if mode == FeeMode.FIXED:
        return fixed
    if mode == FeeMode.MIXED:
        return amount * percent / HUNDRED + fixed
    return Decimal("0")


def clamp_fee(value: Decimal, min_fee: Decimal | None, max_fee: Decimal | None) -> Decimal:
    if min_fee is not None and value < min_fee:
        value = min_fee
    if max_fee is not None and value > max_fee:
        value = max_fee
    return value


def compute_fee(amount: Decimal, fee: FeeConfig, from_currency: str) -> FeeComputation:
    """
    Compute fee, gross and net source amounts.

    Raises ``FeeExceedsAmountError`` when the fee would leave a negative
    net amount; the fee is never silently reduced to fit.
    """
    fee_raw = raw_fee(amount, fee)
    fee_value = round_money(clamp_fee(fee_raw, fee.min_fee, fee.max_fee), from_currency)

    gross_from = round_money(amount, from_currency)
    net_from = round_money(gross_from - fee_value, from_currency)

    if net_from < 0:
        raise FeeExceedsAmountError(
            "Fee exceeds amount",
            {
                "amount": str(gross_from),
                "fee": str(fee_value),
                "currency": from_currency,
            },
        )

    return FeeComputation(
        fee=fee_value,
        gross_from=gross_from,
        net_from=net_from,
        breakdown=FeeBreakdown(
            mode=str(fee.mode or FeeMode.NONE.value).upper(),
            percent=fee.percent or Decimal("0"),
            fixed=fee.fixed or Decimal("0"),
            min_fee=fee.min_fee,
            max_fee=fee.max_fee,
            fee_raw=round_money(fee_raw, from_currency),
        ),
    )
