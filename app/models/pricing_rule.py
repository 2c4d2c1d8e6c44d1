"""
PricingRule model — business pricing for a corridor.

A rule targets one (tx_type, from_currency, to_currency) corridor,
optionally narrowed to countries / operators and an amount range, and
carries both the fee config and the FX mode used to price it.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text, event
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.pricing_engine.snapshots import (
    AmountRange,
    FeeConfig,
    FeeMode,
    FxConfig,
    FxMode,
    PricingRuleSnapshot,
)


class PricingRule(Base):
    __tablename__ = "pricing_rules"
    __table_args__ = (
        Index(
            "ix_pricing_rules_lookup",
            "active", "tx_type", "from_currency", "to_currency",
            "priority", "updated_at",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    priority: Mapped[int] = mapped_column(Integer, default=0)

    # Scope
    tx_type: Mapped[str] = mapped_column(String(16), nullable=False)
    from_currency: Mapped[str] = mapped_column(String(8), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(8), nullable=False)
    countries: Mapped[list[str]] = mapped_column(ARRAY(String(64)), default=list)
    operators: Mapped[list[str]] = mapped_column(ARRAY(String(64)), default=list)

    # Amount range (max NULL = unbounded)
    amount_min: Mapped[Decimal] = mapped_column(Numeric(20, 4), default=Decimal("0"))
    amount_max: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)

    # Fee
    fee_mode: Mapped[str] = mapped_column(String(16), default=FeeMode.NONE.value)
    fee_percent: Mapped[Decimal] = mapped_column(Numeric(9, 4), default=Decimal("0"))
    fee_fixed: Mapped[Decimal] = mapped_column(Numeric(20, 4), default=Decimal("0"))
    fee_min: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)
    fee_max: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)

    # FX
    fx_mode: Mapped[str] = mapped_column(String(16), default=FxMode.MARKET.value)
    fx_override_rate: Mapped[Decimal | None] = mapped_column(Numeric(24, 8), nullable=True)
    fx_markup_percent: Mapped[Decimal] = mapped_column(Numeric(9, 4), default=Decimal("0"))

    version: Mapped[int] = mapped_column(Integer, default=1)
    notes: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_snapshot(self) -> PricingRuleSnapshot:
        """Detach an immutable copy for the resolver."""
        return PricingRuleSnapshot(
            id=str(self.id),
            tx_type=(self.tx_type or "").upper(),
            from_currency=(self.from_currency or "").upper(),
            to_currency=(self.to_currency or "").upper(),
            countries=tuple(self.countries or ()),
            operators=tuple(self.operators or ()),
            amount_range=AmountRange(
                min=self.amount_min if self.amount_min is not None else Decimal("0"),
                max=self.amount_max,
            ),
            fee=FeeConfig(
                mode=self.fee_mode or FeeMode.NONE.value,
                percent=self.fee_percent or Decimal("0"),
                fixed=self.fee_fixed or Decimal("0"),
                min_fee=self.fee_min,
                max_fee=self.fee_max,
            ),
            fx=FxConfig(
                mode=self.fx_mode or FxMode.MARKET.value,
                override_rate=self.fx_override_rate,
                markup_percent=self.fx_markup_percent or Decimal("0"),
            ),
            priority=self.priority or 0,
            active=bool(self.active),
            version=self.version or 1,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return (
            f"<PricingRule {self.tx_type} {self.from_currency}->{self.to_currency} "
            f"priority={self.priority} v{self.version}>"
        )


@event.listens_for(PricingRule, "init")
def _set_pricing_rule_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "active" not in kwargs:
        target.active = True
    if "priority" not in kwargs:
        target.priority = 0
    if "countries" not in kwargs:
        target.countries = []
    if "operators" not in kwargs:
        target.operators = []
    if "amount_min" not in kwargs:
        target.amount_min = Decimal("0")
    if "fee_mode" not in kwargs:
        target.fee_mode = FeeMode.NONE.value
    if "fee_percent" not in kwargs:
        target.fee_percent = Decimal("0")
    if "fee_fixed" not in kwargs:
        target.fee_fixed = Decimal("0")
    if "fx_mode" not in kwargs:
        target.fx_mode = FxMode.MARKET.value
    if "fx_markup_percent" not in kwargs:
        target.fx_markup_percent = Decimal("0")
    if "version" not in kwargs:
        target.version = 1
    if "notes" not in kwargs:
        target.notes = ""
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
