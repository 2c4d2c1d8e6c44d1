"""
Pricing error taxonomy.

Every error carries a stable machine-readable ``kind``, a human-readable
message, optional ``details`` and the HTTP status the API layer maps it to.
"""

from __future__ import annotations


class PricingError(Exception):
    """Base class for all pricing pipeline failures."""

    kind = "pricing_error"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "ok": False,
            "error": self.kind,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(PricingError):
    """Missing or malformed request field. Client error, never retried."""

    kind = "invalid_input"
    status_code = 400


class NoRuleMatchedError(PricingError):
    """No active pricing rule covers the requested corridor."""

    kind = "no_rule_matched"
    status_code = 404


class RateUnavailableError(PricingError):
    """The market rate provider failed, timed out or returned garbage."""

    kind = "rate_unavailable"
    status_code = 503


class InvalidRuleConfigError(PricingError):
    """A stored rule is malformed (e.g. OVERRIDE without a positive rate)."""

    kind = "invalid_rule_config"
    status_code = 500


class FeeExceedsAmountError(PricingError):
    kind = "fee_exceeds_amount"
    status_code = 400


class InvalidAdjustedRateError(PricingError):
    """An FX adjustment rule produced a non-positive rate."""

    kind = "invalid_adjusted_rate"
    status_code = 500


class UnauthenticatedError(PricingError):
    kind = "unauthenticated"
    status_code = 401


class QuoteNotFoundError(PricingError):
    kind = "quote_not_found"
    status_code = 404


class QuoteNotRedeemableError(PricingError):
    """The lock exists but is no longer ACTIVE (used or expired)."""

    kind = "quote_not_redeemable"
    status_code = 409
