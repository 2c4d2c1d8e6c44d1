"""create fx_rules table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "fx_rules",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("active", sa.Boolean, server_default=sa.true(), nullable=False),
        sa.Column("priority", sa.Integer, server_default="0", nullable=False),
        sa.Column("tx_type", sa.String(16), server_default="", nullable=False),
        sa.Column("provider", sa.String(64), server_default="", nullable=False),
        sa.Column("country", sa.String(64), server_default="", nullable=False),
        sa.Column("from_currency", sa.String(8), nullable=False),
        sa.Column("to_currency", sa.String(8), nullable=False),
        sa.Column("min_amount", sa.Numeric(20, 4), server_default="0", nullable=False),
        sa.Column("max_amount", sa.Numeric(20, 4), nullable=True),
        sa.Column("mode", sa.String(16), server_default="PASS_THROUGH", nullable=False),
        sa.Column("override_rate", sa.Numeric(24, 8), nullable=True),
        sa.Column("percent", sa.Numeric(9, 4), server_default="0", nullable=False),
        sa.Column("delta_abs", sa.Numeric(24, 8), server_default="0", nullable=False),
        sa.Column("notes", sa.Text, server_default="", nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )
    op.create_index("ix_fx_rules_active", "fx_rules", ["active"])
    op.create_index(
        "ix_fx_rules_lookup",
        "fx_rules",
        ["active", "from_currency", "to_currency", "priority", "updated_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_fx_rules_lookup", table_name="fx_rules")
    op.drop_index("ix_fx_rules_active", table_name="fx_rules")
    op.drop_table("fx_rules")
