"""
Currency arithmetic — per-currency precision and half-up rounding.

All money math in the engine is ``Decimal``; floats never enter the
pipeline past request parsing.
"""

from decimal import Decimal, ROUND_HALF_UP

from app.pricing_engine.config import (
    DEFAULT_CURRENCY_DECIMALS,
    RATE_QUANTUM,
    ZERO_DECIMAL_CURRENCIES,
)

# Spellings of the West African CFA franc seen in client payloads
_CFA_ALIASES = frozenset({
    "F CFA", "FCFA", "F.CFA", "FRANC CFA", "FRANCS CFA", "CFA",
})

_SYMBOLS = {
    "€": "EUR",
    "$": "USD",
    "£": "GBP",
}


def normalize_currency(value) -> str:
    """
    Normalize a currency input to an upper-case ISO code.

    Accepts symbols (``€``, ``$``) and CFA franc variants (mapped to XOF).
    Anything else is returned upper-cased with whitespace removed, or
    ``""`` when empty.
    """
    if value is None:
        return ""
    raw = str(value).strip().upper()
    if not raw:
        return ""
    compact = "".join(raw.split())

    if raw in _SYMBOLS:
        return _SYMBOLS[raw]
    if raw in _CFA_ALIASES or compact in _CFA_ALIASES:
        return "XOF"
    return compact


def decimals_for_currency(code: str) -> int:
    """Number of minor-unit digits used when rounding money in *code*."""
    if (code or "").strip().upper() in ZERO_DECIMAL_CURRENCIES:
        return 0
    return DEFAULT_CURRENCY_DECIMALS


def money_quantum(code: str) -> Decimal:
    return Decimal(1).scaleb(-decimals_for_currency(code))


def round_money(amount: Decimal, currency: str) -> Decimal:
    """Round *amount* half-up to the native precision of *currency*."""
    return Decimal(amount).quantize(money_quantum(currency), rounding=ROUND_HALF_UP)


def round_rate(rate: Decimal) -> Decimal:
    """Round an exchange rate half-up to 8 decimal places."""
    return Decimal(rate).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def is_positive_finite(value) -> bool:
    """True for a finite Decimal-convertible value strictly above zero."""
    if value is None:
        return False
    try:
        d = Decimal(str(value))
    except ArithmeticError:
        return False
    return d.is_finite() and d > 0
