"""create pricing_quotes table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

revision = "003"
down_revision = "002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    quotestatus = sa.Enum("ACTIVE", "USED", "EXPIRED", name="quotestatus")
    quotestatus.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "pricing_quotes",
        sa.Column("quote_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("status", quotestatus, server_default="ACTIVE", nullable=False),
        sa.Column("request", JSONB, nullable=False),
        sa.Column("result", JSONB, nullable=False),
        sa.Column("rule_applied", JSONB, nullable=False),
        sa.Column("fx_rule_applied", JSONB, nullable=True),
        sa.Column("rule_id", sa.String(36), nullable=False),
        sa.Column("rule_version", sa.Integer, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )
    op.create_index("ix_pricing_quotes_user_id", "pricing_quotes", ["user_id"])
    op.create_index("ix_pricing_quotes_status", "pricing_quotes", ["status"])
    op.create_index("ix_pricing_quotes_rule_id", "pricing_quotes", ["rule_id"])
    op.create_index("ix_pricing_quotes_expires_at", "pricing_quotes", ["expires_at"])


def downgrade() -> None:
    op.drop_table("pricing_quotes")
    sa.Enum(name="quotestatus").drop(op.get_bind(), checkfirst=True)
