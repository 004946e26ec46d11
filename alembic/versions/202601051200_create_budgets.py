"""create budgets

Revision ID: 202601051200
Revises:
Create Date: 2026-01-05 12:00:00.000000

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "202601051200"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column(
            "period_kind",
            sa.Enum("weekly", "monthly", name="periodkind"),
            nullable=False,
        ),
        sa.Column("anchor_date", sa.Date(), nullable=False),
        sa.Column("ends_on", sa.Date(), nullable=False),
        sa.Column("limit_cents", sa.Integer(), nullable=False),
        sa.Column("spent_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("limit_cents >= 0", name="ck_budget_limit_positive"),
        sa.CheckConstraint("spent_cents >= 0", name="ck_budget_spent_positive"),
        sa.CheckConstraint("ends_on >= anchor_date", name="ck_budget_range_ordered"),
        sa.UniqueConstraint(
            "user_id",
            "category",
            "period_kind",
            "anchor_date",
            name="uq_budget_user_category_period",
        ),
    )
    op.create_index("ix_budget_user_category", "budgets", ["user_id", "category"])
    op.create_index(
        "ix_budget_user_range", "budgets", ["user_id", "anchor_date", "ends_on"]
    )


def downgrade() -> None:
    op.drop_index("ix_budget_user_range", table_name="budgets")
    op.drop_index("ix_budget_user_category", table_name="budgets")
    op.drop_table("budgets")
