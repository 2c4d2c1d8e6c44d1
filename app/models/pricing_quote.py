"""
PricingQuote model — a locked, time-bounded, single-use quote.

Lifecycle:
- ACTIVE  -> USED     (the execution service consumes the lock)
- ACTIVE  -> EXPIRED  (now > expires_at)

Expiry is evaluated lazily: a stale ACTIVE row is reported as EXPIRED by
``effective_status`` without the stored status being rewritten. The
row keeps the normalized request plus every rule id / version consulted
so a dispute can reconstruct exactly how the price was produced.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Enum as SAEnum, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.pricing_engine.snapshots import QuoteStatus

# ---------------------------------------------------------------------------
# Status transition map
# ---------------------------------------------------------------------------

VALID_TRANSITIONS: dict[QuoteStatus, set[QuoteStatus]] = {
    QuoteStatus.ACTIVE: {QuoteStatus.USED, QuoteStatus.EXPIRED},
    QuoteStatus.USED: set(),
    QuoteStatus.EXPIRED: set(),
}


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class PricingQuote(Base):
    __tablename__ = "pricing_quotes"

    quote_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    status: Mapped[QuoteStatus] = mapped_column(
        SAEnum(QuoteStatus, name="quotestatus"),
        default=QuoteStatus.ACTIVE,
        index=True,
    )

    # Snapshots
    request: Mapped[dict] = mapped_column(JSONB, nullable=False)
    result: Mapped[dict] = mapped_column(JSONB, nullable=False)
    rule_applied: Mapped[dict] = mapped_column(JSONB, nullable=False)
    fx_rule_applied: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    # Denormalized for audit queries
    rule_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    rule_version: Mapped[int] = mapped_column(Integer, nullable=False)

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ------------------------------------------------------------------
    # Identifier generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_quote_id() -> str:
        """Random UUID4; uniqueness relies on its collision resistance."""
        return str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Lazy expiry
    # ------------------------------------------------------------------

    def is_past_expiry(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now > expires_at

    def effective_status(self, now: datetime | None = None) -> QuoteStatus:
        """Stored status, except a stale ACTIVE lock reads as EXPIRED."""
        status = QuoteStatus(self.status)
        if status == QuoteStatus.ACTIVE and self.is_past_expiry(now):
            return QuoteStatus.EXPIRED
        return status

    # ------------------------------------------------------------------
    # Status transition validation
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_transition(from_status: QuoteStatus, to_status: QuoteStatus) -> bool:
        return to_status in VALID_TRANSITIONS.get(from_status, set())

    def transition_to(self, new_status: QuoteStatus, now: datetime | None = None) -> None:
        """
        Move to *new_status*, judged from the effective status.

        An ACTIVE lock past its expiry can no longer become USED.
        Raises ValueError if the transition is not allowed.
        """
        current = self.effective_status(now)
        if current == new_status == QuoteStatus.EXPIRED:
            self.status = QuoteStatus.EXPIRED
            return
        if not self.is_valid_transition(current, new_status):
            raise ValueError(
                f"Invalid transition: {current.value} -> {new_status.value}"
            )
        self.status = new_status

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, now: datetime | None = None) -> dict:
        return {
            "quoteId": self.quote_id,
            "userId": self.user_id,
            "status": self.effective_status(now).value,
            "expiresAt": self.expires_at.isoformat(),
            "request": self.request,
            "result": self.result,
            "ruleApplied": self.rule_applied,
            "fxRuleApplied": self.fx_rule_applied,
        }

    def __repr__(self) -> str:
        return (
            f"<PricingQuote {self.quote_id} user={self.user_id} "
            f"status={self.status.value if self.status else 'N/A'}>"
        )


@event.listens_for(PricingQuote, "init")
def _set_quote_defaults(target, args, kwargs):
    if "quote_id" not in kwargs:
        target.quote_id = PricingQuote.generate_quote_id()
    if "status" not in kwargs:
        target.status = QuoteStatus.ACTIVE
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
