from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.config import settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(getattr(settings, "TIMEZONE", "UTC"))
except Exception:
    LOCAL_ZONE = ZoneInfo("UTC")


def now_local_naive() -> datetime:
    """Return naive datetime normalized to configured local timezone."""
    return datetime.now(LOCAL_ZONE).replace(tzinfo=None)


def new_record_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)

    expenses: Mapped[list["Expense"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    recurring_rules: Mapped[list["RecurringRule"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    incomes: Mapped[list["Income"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    budgets: Mapped[list["Budget"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    subscriptions: Mapped[list["Subscription"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class RecurringRule(Base, TimestampMixin):
    """Explicit, user-declared recurrence (opt-in).

    Independent of the heuristic recurring candidate detection, which never
    reads or writes this table.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    default_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    frequency: Mapped[RecurringFrequency] = mapped_column(
        SAEnum(RecurringFrequency, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    weekday_or_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    auto_create: Mapped[bool] = mapped_column(default=False, nullable=False)
    match_heuristics: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    last_applied_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)

    user: Mapped[User] = relationship(back_populates="recurring_rules")
    expenses: Mapped[list["Expense"]] = relationship(back_populates="rule")

    __table_args__ = (
        CheckConstraint("default_amount IS NULL OR default_amount >= 0", name="ck_recurringrule_amount_nonneg"),
    )


class Expense(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    quantity: Mapped[float | None] = mapped_column(nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    language_tag: Mapped[str] = mapped_column(String(16), default="en", nullable=False)
    category_label: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rule_id: Mapped[str | None] = mapped_column(ForeignKey("recurringrule.id", ondelete="SET NULL"), nullable=True)
    items: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    user: Mapped[User] = relationship(back_populates="expenses")
    rule: Mapped[RecurringRule | None] = relationship(back_populates="expenses")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_expense_amount_nonneg"),
        Index("ix_expense_user_date", "user_id", "date"),
    )


def _enum_column(enum_cls: type[Enum]) -> SAEnum:
    # 값(value) 문자열로 저장 (native enum 미사용)
    return SAEnum(enum_cls, native_enum=False, values_callable=lambda e: [m.value for m in e])


class IncomeType(str, Enum):
    MONTHLY_SALARY = "monthly_salary"
    BONUS = "bonus"
    OTHER = "other"


class Income(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[IncomeType] = mapped_column(_enum_column(IncomeType), default=IncomeType.OTHER, nullable=False)
    date_received: Mapped[date] = mapped_column(Date, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship(back_populates="incomes")

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_income_amount_nonneg"),
    )


class Budget(Base, TimestampMixin):
    """Monthly spending limit for one category label."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    category_label: Mapped[str] = mapped_column(String(100), nullable=False)
    monthly_limit: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped[User] = relationship(back_populates="budgets")

    __table_args__ = (
        CheckConstraint("monthly_limit >= 0", name="ck_budget_limit_nonneg"),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_budget_month_range"),
        UniqueConstraint("user_id", "category_label", "month", "year", name="uq_budget_user_category_period"),
    )


class SubscriptionFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class Subscription(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_record_id)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    frequency: Mapped[SubscriptionFrequency] = mapped_column(_enum_column(SubscriptionFrequency), nullable=False)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    next_billing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reminder_days: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    status: Mapped[SubscriptionStatus] = mapped_column(
        _enum_column(SubscriptionStatus), default=SubscriptionStatus.ACTIVE, nullable=False
    )
    free_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    free_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    user: Mapped[User] = relationship(back_populates="subscriptions")

    __table_args__ = (
        CheckConstraint("amount IS NULL OR amount >= 0", name="ck_subscription_amount_nonneg"),
        CheckConstraint("reminder_days >= 0", name="ck_subscription_reminder_nonneg"),
    )
