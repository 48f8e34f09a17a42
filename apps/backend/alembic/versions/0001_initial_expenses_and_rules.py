"""Initial schema: user, recurringrule, expense

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "recurringrule",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("label", sa.String(length=200), nullable=False),
        sa.Column("default_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("unit", sa.String(length=32), nullable=True),
        sa.Column("frequency", sa.String(length=7), nullable=False),
        sa.Column("weekday_or_day", sa.Integer(), nullable=True),
        sa.Column("auto_create", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("match_heuristics", sa.JSON(), nullable=True),
        sa.Column("last_applied_date", sa.Date(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("default_amount IS NULL OR default_amount >= 0", name="ck_recurringrule_amount_nonneg"),
    )
    op.create_index("ix_recurringrule_user_id", "recurringrule", ["user_id"], unique=False)

    op.create_table(
        "expense",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("language_tag", sa.String(length=16), nullable=False, server_default="en"),
        sa.Column("category_label", sa.String(length=100), nullable=True),
        sa.Column("rule_id", sa.String(length=36), sa.ForeignKey("recurringrule.id", ondelete="SET NULL"), nullable=True),
        sa.Column("items", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_expense_amount_nonneg"),
    )
    op.create_index("ix_expense_user_date", "expense", ["user_id", "date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_expense_user_date", table_name="expense")
    op.drop_table("expense")
    op.drop_index("ix_recurringrule_user_id", table_name="recurringrule")
    op.drop_table("recurringrule")
    op.drop_table("user")
