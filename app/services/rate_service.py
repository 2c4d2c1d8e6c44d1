"""
Market rate provider — spot rates for an ordered currency pair.

The pricing engine sees this as one opaque ``get_rate(from, to)`` call.
Internally, rates for a base currency are fetched as a whole table from
exchangerate-api (or a deterministic mock), cached in Redis, and the
last good table is kept as a fallback snapshot when the upstream fails.
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

RATE_CACHE_KEY = "fx_rates:{base}"
RATE_SNAPSHOT_KEY = "fx_rates_snapshot:{base}"

# Mock rates per 1 USD (deterministic for dev/testing)
MOCK_RATES_PER_USD: dict[str, Decimal] = {
    "USD": Decimal("1"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "CAD": Decimal("1.36"),
    "XOF": Decimal("603.50"),
    "XAF": Decimal("603.50"),
    "NGN": Decimal("1550.00"),
    "CNY": Decimal("7.25"),
}


# ---------------------------------------------------------------------------
# Rate provider protocol
# ---------------------------------------------------------------------------


class RateProvider(Protocol):
    async def fetch_rates(self, base: str) -> dict[str, Decimal]:
        """Fetch ``{currency: units per 1 base}``."""
        ...


class MockRateProvider:
    """Deterministic cross rates derived from ``MOCK_RATES_PER_USD``."""

    async def fetch_rates(self, base: str) -> dict[str, Decimal]:
        base_per_usd = MOCK_RATES_PER_USD.get(base)
        if base_per_usd is None:
            raise RuntimeError(f"Mock provider has no rates for {base}")
        return {
            code: (per_usd / base_per_usd).quantize(
                Decimal("0.00000001"), rounding=ROUND_HALF_UP
            )
            for code, per_usd in MOCK_RATES_PER_USD.items()
        }


class ExchangeRateAPIProvider:
    """Fetch live rates from exchangerate-api.com (open endpoint)."""

    def __init__(self, api_url: str | None = None, timeout: float | None = None):
        self.api_url = (api_url or settings.FX_RATE_API_URL).rstrip("/")
        self.timeout = timeout or settings.FX_RATE_TIMEOUT_SECONDS

    async def fetch_rates(self, base: str) -> dict[str, Decimal]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(f"{self.api_url}/{base}")
            resp.raise_for_status()
            data = resp.json()

        if data.get("result") != "success":
            raise RuntimeError(f"Rate API error: {data.get('error-type', data)}")

        return {
            code.upper(): Decimal(str(value))
            for code, value in data["rates"].items()
        }


# Module-level provider override (for tests)
_provider: RateProvider | None = None


def get_rate_provider() -> RateProvider:
    """Return the configured rate provider."""
    if _provider is not None:
        return _provider
    if settings.FX_RATE_MOCK:
        return MockRateProvider()
    return ExchangeRateAPIProvider()


def set_rate_provider(provider: RateProvider | None) -> None:
    """Override the rate provider (for testing)."""
    global _provider
    _provider = provider


# ---------------------------------------------------------------------------
# MarketRateService
# ---------------------------------------------------------------------------


class MarketRateService:
    """Cached market rates; implements the engine's ``get_rate`` contract."""

    def __init__(self, redis, provider: RateProvider | None = None):
        self.redis = redis
        self.provider = provider or get_rate_provider()

    async def get_rate(self, from_currency: str, to_currency: str) -> Decimal | None:
        """Units of *to_currency* per 1 *from_currency*, ``None`` if unknown."""
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return Decimal("1")

        rates = await self.get_rates(from_currency)
        return rates.get(to_currency)

    async def get_rates(self, base: str) -> dict[str, Decimal]:
        """
        Rate table for *base*, from cache, upstream, or last snapshot.

        Raises the upstream error when there is neither a fresh table
        nor a snapshot to fall back on.
        """
        cached = await self.redis.get(RATE_CACHE_KEY.format(base=base))
        if cached is not None:
            return _decode(cached)

        try:
            rates = await self.provider.fetch_rates(base)
        except (httpx.HTTPError, RuntimeError, KeyError, ValueError) as exc:
            snapshot = await self.redis.get(RATE_SNAPSHOT_KEY.format(base=base))
            if snapshot is None:
                raise
            logger.warning(
                "Rate fetch for %s failed (%s); serving last snapshot", base, exc,
            )
            return _decode(snapshot)

        payload = json.dumps({
            "base": base,
            "rates": {code: str(rate) for code, rate in rates.items()},
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        })
        await self.redis.setex(
            RATE_CACHE_KEY.format(base=base),
            settings.FX_RATE_CACHE_TTL_SECONDS,
            payload,
        )
        await self.redis.set(RATE_SNAPSHOT_KEY.format(base=base), payload)
        return rates


def _decode(raw: str) -> dict[str, Decimal]:
    data = json.loads(raw)
    return {code: Decimal(value) for code, value in data["rates"].items()}
