"""SQLAlchemy ORM models for the pricing service."""

from app.models.pricing_rule import PricingRule
from app.models.fx_rule import FxRule
from app.models.pricing_quote import PricingQuote, VALID_TRANSITIONS

__all__ = [
    "PricingRule",
    "FxRule",
    "PricingQuote", "VALID_TRANSITIONS",
]
