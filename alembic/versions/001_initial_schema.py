"""Initial schema — pulses, one row per calendar date.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pulses",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("headlines", sa.JSON(), nullable=False),
        sa.Column("rationale", sa.TEXT(), nullable=True),
        sa.Column("market_index", sa.Float(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.CheckConstraint("status IN ('Good', 'Bad')", name="ck_pulses_status"),
        sa.CheckConstraint("score >= 0 AND score <= 10", name="ck_pulses_score"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_pulses_date"),
    )
    op.create_index("idx_pulses_status", "pulses", ["status"])


def downgrade() -> None:
    op.drop_index("idx_pulses_status", table_name="pulses")
    op.drop_table("pulses")
