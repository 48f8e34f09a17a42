"""Add income, budget, subscription

Revision ID: 0002_incomes_budgets_subs
Revises: 0001_initial
Create Date: 2026-10-19 15:00:00.000000
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002_incomes_budgets_subs"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "income",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("type", sa.String(length=14), nullable=False, server_default="other"),
        sa.Column("date_received", sa.Date(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_income_amount_nonneg"),
    )
    op.create_index("ix_income_user_id", "income", ["user_id"], unique=False)

    op.create_table(
        "budget",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_label", sa.String(length=100), nullable=False),
        sa.Column("monthly_limit", sa.Numeric(14, 2), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("monthly_limit >= 0", name="ck_budget_limit_nonneg"),
        sa.CheckConstraint("month BETWEEN 1 AND 12", name="ck_budget_month_range"),
        sa.UniqueConstraint("user_id", "category_label", "month", "year", name="uq_budget_user_category_period"),
    )
    op.create_index("ix_budget_user_id", "budget", ["user_id"], unique=False)

    op.create_table(
        "subscription",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("frequency", sa.String(length=9), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("next_billing_date", sa.Date(), nullable=True),
        sa.Column("reminder_days", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("status", sa.String(length=9), nullable=False, server_default="active"),
        sa.Column("free_start_date", sa.Date(), nullable=True),
        sa.Column("free_end_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount IS NULL OR amount >= 0", name="ck_subscription_amount_nonneg"),
        sa.CheckConstraint("reminder_days >= 0", name="ck_subscription_reminder_nonneg"),
    )
    op.create_index("ix_subscription_user_id", "subscription", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_subscription_user_id", table_name="subscription")
    op.drop_table("subscription")
    op.drop_index("ix_budget_user_id", table_name="budget")
    op.drop_table("budget")
    op.drop_index("ix_income_user_id", table_name="income")
    op.drop_table("income")
