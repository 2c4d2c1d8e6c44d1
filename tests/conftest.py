"""
Shared test fixtures for Corridor Pricing.

Provides rule snapshot factories, a fake market rate source, database
and Redis mocks, RSA keys for bearer tokens and an async test client.
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_rate_source
from app.core import security
from app.database import get_db
from app.redis_client import get_redis
from app.models.fx_rule import FxRule
from app.models.pricing_rule import PricingRule
from app.pricing_engine.snapshots import (
    AmountRange,
    FeeConfig,
    FxConfig,
    FxRuleSnapshot,
    NormalizedRequest,
    PricingRuleSnapshot,
)


# --- Fake market rate source ---


class FakeRateSource:
    """In-memory ``get_rate`` provider that records every call."""

    def __init__(self, rates: dict | None = None, error: Exception | None = None):
        self.rates = rates or {}
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def get_rate(self, from_currency: str, to_currency: str):
        self.calls.append((from_currency, to_currency))
        if self.error is not None:
            raise self.error
        return self.rates.get((from_currency, to_currency))


@pytest.fixture
def make_rate_source():
    """Factory fixture for fake rate sources."""
    return FakeRateSource


@pytest.fixture
def rate_source():
    """EUR->XOF at 655.957 and USD->XOF at 603.5."""
    return FakeRateSource({
        ("EUR", "XOF"): Decimal("655.957"),
        ("USD", "XOF"): Decimal("603.5"),
    })


# --- Snapshot factories ---


def _make_rule(**overrides) -> PricingRuleSnapshot:
    """EUR->XOF TRANSFER at a 2% fee and an override rate of 655."""
    defaults = {
        "id": "rule-eur-xof",
        "tx_type": "TRANSFER",
        "from_currency": "EUR",
        "to_currency": "XOF",
        "amount_range": AmountRange(),
        "fee": FeeConfig(mode="PERCENT", percent=Decimal("2")),
        "fx": FxConfig(mode="OVERRIDE", override_rate=Decimal("655")),
        "priority": 0,
        "version": 1,
        "updated_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(overrides)
    return PricingRuleSnapshot(**defaults)


def _make_fx_rule(**overrides) -> FxRuleSnapshot:
    defaults = {
        "id": "fx-eur-xof",
        "name": "EUR XOF adjustment",
        "from_currency": "EUR",
        "to_currency": "XOF",
        "mode": "DELTA_PERCENT",
        "percent": Decimal("2"),
        "updated_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
    }
    defaults.update(overrides)
    return FxRuleSnapshot(**defaults)


def _make_request(**overrides) -> NormalizedRequest:
    defaults = {
        "tx_type": "TRANSFER",
        "amount": Decimal("1000"),
        "from_currency": "EUR",
        "to_currency": "XOF",
        "country": "CI",
    }
    defaults.update(overrides)
    return NormalizedRequest(**defaults)


@pytest.fixture
def make_rule():
    """Factory fixture for pricing rule snapshots."""
    return _make_rule


@pytest.fixture
def make_fx_rule():
    """Factory fixture for FX rule snapshots."""
    return _make_fx_rule


@pytest.fixture
def make_request():
    """Factory fixture for normalized requests."""
    return _make_request


# --- RSA Key Fixtures ---


@pytest.fixture(scope="session")
def test_rsa_keys():
    """Generate a temporary RSA keypair for test JWT signing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    return {"private_key": private_pem, "public_key": public_pem}


@pytest.fixture(autouse=True)
def security_with_keys(test_rsa_keys):
    """Verify bearer tokens against the test public key."""
    security.configure_keys(public_key=test_rsa_keys["public_key"], algorithm="RS256")


@pytest.fixture
def make_token(test_rsa_keys):
    """Mint a signed token the way the platform auth service does."""

    def _make(sub: str = "user-1", token_type: str = "access", expires_in: int = 900) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": sub,
            "type": token_type,
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
        }
        return jwt.encode(payload, test_rsa_keys["private_key"], algorithm="RS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token('user-1')}"}


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client with common methods."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    return redis


# --- Mock Database Session ---


@pytest.fixture
def mock_db():
    """AsyncMock database session."""
    db = AsyncMock()

    # Mock the result object returned by db.execute()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=None)
    mock_result.scalars = MagicMock(return_value=MagicMock(all=MagicMock(return_value=[])))
    db.execute = AsyncMock(return_value=mock_result)
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    return db


def _rows_result(rows) -> MagicMock:
    """A ``db.execute`` result whose ``scalars().all()`` yields *rows*."""
    result = MagicMock()
    result.scalars = MagicMock(return_value=MagicMock(all=MagicMock(return_value=list(rows))))
    result.scalar_one_or_none = MagicMock(return_value=rows[0] if rows else None)
    return result


@pytest.fixture
def rows_result():
    return _rows_result


@pytest.fixture
def pricing_rule_row():
    """Persisted EUR->XOF TRANSFER rule (2% fee, override 655)."""
    return PricingRule(
        id=uuid.UUID("11111111-1111-1111-1111-111111111111"),
        tx_type="TRANSFER",
        from_currency="EUR",
        to_currency="XOF",
        fee_mode="PERCENT",
        fee_percent=Decimal("2"),
        fx_mode="OVERRIDE",
        fx_override_rate=Decimal("655"),
        version=3,
        priority=10,
    )


@pytest.fixture
def fx_rule_row():
    return FxRule(
        id=uuid.UUID("22222222-2222-2222-2222-222222222222"),
        name="Wave spread",
        from_currency="EUR",
        to_currency="XOF",
        provider="wave",
        mode="DELTA_PERCENT",
        percent=Decimal("2"),
    )


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(mock_db, mock_redis, rate_source):
    """
    Async HTTP test client with get_db, get_redis and get_rate_source
    overridden to use test doubles.
    """
    from app.main import app

    async def override_get_db():
        yield mock_db

    async def override_get_redis():
        return mock_redis

    async def override_get_rate_source():
        return rate_source

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_rate_source] = override_get_rate_source

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
