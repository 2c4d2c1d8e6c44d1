"""
FxRule model — admin override applied on top of the base exchange rate.

Scope fields (tx_type, provider, country) are optional; blank means
"any". The currency pair is always required.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, Text, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.pricing_engine.snapshots import FxRuleMode, FxRuleSnapshot


class FxRule(Base):
    __tablename__ = "fx_rules"
    __table_args__ = (
        Index(
            "ix_fx_rules_lookup",
            "active", "from_currency", "to_currency", "priority", "updated_at",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    priority: Mapped[int] = mapped_column(Integer, default=0)

    tx_type: Mapped[str] = mapped_column(String(16), default="")
    provider: Mapped[str] = mapped_column(String(64), default="")
    country: Mapped[str] = mapped_column(String(64), default="")

    from_currency: Mapped[str] = mapped_column(String(8), nullable=False)
    to_currency: Mapped[str] = mapped_column(String(8), nullable=False)

    min_amount: Mapped[Decimal] = mapped_column(Numeric(20, 4), default=Decimal("0"))
    max_amount: Mapped[Decimal | None] = mapped_column(Numeric(20, 4), nullable=True)

    mode: Mapped[str] = mapped_column(String(16), default=FxRuleMode.PASS_THROUGH.value)
    override_rate: Mapped[Decimal | None] = mapped_column(Numeric(24, 8), nullable=True)
    percent: Mapped[Decimal] = mapped_column(Numeric(9, 4), default=Decimal("0"))
    delta_abs: Mapped[Decimal] = mapped_column(Numeric(24, 8), default=Decimal("0"))

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

    def to_snapshot(self) -> FxRuleSnapshot:
        return FxRuleSnapshot(
            id=str(self.id),
            name=self.name or "",
            from_currency=(self.from_currency or "").upper(),
            to_currency=(self.to_currency or "").upper(),
            tx_type=(self.tx_type or "").strip().upper(),
            provider=(self.provider or "").strip().lower(),
            country=(self.country or "").strip(),
            min_amount=self.min_amount if self.min_amount is not None else Decimal("0"),
            max_amount=self.max_amount,
            mode=self.mode or FxRuleMode.PASS_THROUGH.value,
            override_rate=self.override_rate,
            percent=self.percent or Decimal("0"),
            delta_abs=self.delta_abs or Decimal("0"),
            priority=self.priority or 0,
            active=bool(self.active),
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return (
            f"<FxRule {self.name!r} {self.from_currency}->{self.to_currency} "
            f"mode={self.mode} priority={self.priority}>"
        )


@event.listens_for(FxRule, "init")
def _set_fx_rule_defaults(target, args, kwargs):
    if "id" not in kwargs:
        target.id = uuid.uuid4()
    if "active" not in kwargs:
        target.active = True
    if "priority" not in kwargs:
        target.priority = 0
    for key in ("tx_type", "provider", "country", "notes"):
        if key not in kwargs:
            setattr(target, key, "")
    if "min_amount" not in kwargs:
        target.min_amount = Decimal("0")
    if "mode" not in kwargs:
        target.mode = FxRuleMode.PASS_THROUGH.value
    if "percent" not in kwargs:
        target.percent = Decimal("0")
    if "delta_abs" not in kwargs:
        target.delta_abs = Decimal("0")
    if "created_at" not in kwargs:
        target.created_at = datetime.now(timezone.utc)
    if "updated_at" not in kwargs:
        target.updated_at = datetime.now(timezone.utc)
