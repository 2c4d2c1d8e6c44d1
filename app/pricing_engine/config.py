"""
Pricing engine configuration constants.

Precision tables, lock TTL and the timeout applied to the market
rate call.
"""

from decimal import Decimal

from app.config import settings

# ISO 4217 currencies without minor units; money rounds to whole units
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})
DEFAULT_CURRENCY_DECIMALS = 2

# Exchange rates are carried with 8 decimal places
RATE_QUANTUM = Decimal("0.00000001")

# Largest accepted request amount; money math on it stays inside the
# default 28-digit decimal context
MAX_AMOUNT = Decimal("1000000000000000")

# Quote locks
LOCK_TTL_MINUTES = settings.PRICING_LOCK_TTL_MINUTES

# Upper bound on a single market rate lookup
MARKET_RATE_TIMEOUT_SECONDS = settings.FX_RATE_TIMEOUT_SECONDS
