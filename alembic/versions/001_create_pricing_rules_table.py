"""create pricing_rules table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, UUID

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "pricing_rules",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("active", sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column("priority", sa.Integer, server_default="0", nullable=False),
        sa.Column("tx_type", sa.String(16), nullable=False),
        sa.Column("from_currency", sa.String(8), nullable=False),
        sa.Column("to_currency", sa.String(8), nullable=False),
        sa.Column("countries", ARRAY(sa.String(64)), server_default="{}", nullable=False),
        sa.Column("operators", ARRAY(sa.String(64)), server_default="{}", nullable=False),
        sa.Column("amount_min", sa.Numeric(20, 4), server_default="0", nullable=False),
        sa.Column("amount_max", sa.Numeric(20, 4), nullable=True),
        sa.Column("fee_mode", sa.String(16), server_default="NONE", nullable=False),
        sa.Column("fee_percent", sa.Numeric(9, 4), server_default="0", nullable=False),
        sa.Column("fee_fixed", sa.Numeric(20, 4), server_default="0", nullable=False),
        sa.Column("fee_min", sa.Numeric(20, 4), nullable=True),
        sa.Column("fee_max", sa.Numeric(20, 4), nullable=True),
        sa.Column("fx_mode", sa.String(16), server_default="MARKET", nullable=False),
        sa.Column("fx_override_rate", sa.Numeric(24, 8), nullable=True),
        sa.Column("fx_markup_percent", sa.Numeric(9, 4), server_default="0", nullable=False),
        sa.Column("version", sa.Integer, server_default="1", nullable=False),
        sa.Column("notes", sa.Text, server_default="", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.CheckConstraint(
            "tx_type IN ('TRANSFER', 'DEPOSIT', 'WITHDRAW')",
            name="ck_pricing_rules_tx_type",
        ),
    )
    op.create_index("ix_pricing_rules_active", "pricing_rules", ["active"])
    op.create_index(
        "ix_pricing_rules_lookup",
        "pricing_rules",
        ["active", "tx_type", "from_currency", "to_currency", "priority", "updated_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_pricing_rules_lookup", table_name="pricing_rules")
    op.drop_index("ix_pricing_rules_active", table_name="pricing_rules")
    op.drop_table("pricing_rules")
