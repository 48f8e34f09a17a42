from __future__ import annotations

import math
from datetime import date, datetime
import datetime as dt
from typing import Optional, Literal, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .models import IncomeType, RecurringFrequency, SubscriptionFrequency, SubscriptionStatus
from .utils.normalization import normalize_category_label, sanitize_note


def _finite_non_negative(v: float | None) -> float | None:
    if v is None:
        return v
    if not math.isfinite(v):
        raise ValueError("amount must be finite")
    if v < 0:
        raise ValueError("amount must be non-negative")
    return v


# ===== Expenses =====

class ExpenseItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: float = 1
    unit: str = ""
    amount: float

    @field_validator("amount")
    def item_amount(cls, v: float):
        return _finite_non_negative(v)


class ExpenseCreate(BaseModel):
    date: Optional[datetime] = None
    amount: float
    unit: Optional[str] = Field(default=None, max_length=32)
    quantity: Optional[float] = None
    note: Optional[str] = None
    language_tag: str = Field(default="en", max_length=16)
    category_label: Optional[str] = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("category_label", "categoryLabel", "category"),
    )
    rule_id: Optional[str] = None
    items: Optional[list[ExpenseItem]] = None
    model_config = ConfigDict(extra="ignore")

    @field_validator("amount")
    def amount_non_negative(cls, v: float):
        return _finite_non_negative(v)

    @field_validator("note")
    def clean_note(cls, v: str | None):
        return sanitize_note(v)

    @field_validator("category_label")
    def clean_category(cls, v: str | None):
        return normalize_category_label(v)


class ExpenseOut(BaseModel):
    id: str
    user_id: int
    date: datetime
    amount: float
    unit: Optional[str]
    quantity: Optional[float]
    note: Optional[str]
    language_tag: str
    category_label: Optional[str]
    rule_id: Optional[str]
    items: Optional[list[dict[str, Any]]]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ExpenseTotals(BaseModel):
    spent: float


class ExpenseListOut(BaseModel):
    items: list[ExpenseOut]
    totals: ExpenseTotals


ExpenseKind = Literal["all", "recurring", "new"]


# ===== Recurring candidates (heuristic) =====

class RecurrenceParamsOut(BaseModel):
    min_gap_days: float
    max_gap_days: float
    max_amount_ratio: float
    amount_bucket_width: float


class RecurringCandidatesOut(BaseModel):
    ids: list[str]
    count: int
    params: RecurrenceParamsOut


# ===== Recurring rules (explicit) =====

class RecurringRuleCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=200)
    default_amount: Optional[float] = None
    unit: Optional[str] = Field(default=None, max_length=32)
    frequency: RecurringFrequency
    weekday_or_day: Optional[int] = Field(default=None, ge=0, le=31)
    auto_create: bool = False
    match_heuristics: Optional[dict[str, Any]] = None
    active: bool = True

    @field_validator("label")
    def label_stripped(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("label must not be blank")
        return v

    @field_validator("default_amount")
    def default_amount_non_negative(cls, v: float | None):
        return _finite_non_negative(v)


class RecurringRuleOut(BaseModel):
    id: str
    user_id: int
    label: str
    default_amount: Optional[float]
    unit: Optional[str]
    frequency: RecurringFrequency
    weekday_or_day: Optional[int]
    auto_create: bool
    match_heuristics: Optional[dict[str, Any]]
    last_applied_date: Optional[date]
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== Incomes =====

class IncomeCreate(BaseModel):
    amount: float
    type: IncomeType = IncomeType.OTHER
    date_received: dt.date
    note: Optional[str] = None

    @field_validator("amount")
    def amount_non_negative(cls, v: float):
        return _finite_non_negative(v)

    @field_validator("note")
    def clean_note(cls, v: str | None):
        return sanitize_note(v)


class IncomeOut(BaseModel):
    id: str
    user_id: int
    amount: float
    type: IncomeType
    date_received: dt.date
    note: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== Budgets =====

class BudgetCreate(BaseModel):
    category_label: str = Field(
        ...,
        max_length=100,
        validation_alias=AliasChoices("category_label", "categoryLabel", "category"),
    )
    monthly_limit: float
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=2100)

    @field_validator("category_label")
    def clean_category(cls, v: str):
        label = normalize_category_label(v)
        if label is None:
            raise ValueError("category_label must not be blank")
        return label

    @field_validator("monthly_limit")
    def limit_non_negative(cls, v: float):
        return _finite_non_negative(v)


class BudgetOut(BaseModel):
    id: str
    user_id: int
    category_label: str
    monthly_limit: float
    month: int
    year: int
    spent: float = 0.0
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== Subscriptions =====

class SubscriptionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    start_date: dt.date
    frequency: SubscriptionFrequency
    amount: Optional[float] = None
    next_billing_date: Optional[dt.date] = None
    reminder_days: int = Field(default=3, ge=0, le=365)
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    free_start_date: Optional[dt.date] = None
    free_end_date: Optional[dt.date] = None

    @field_validator("name")
    def name_stripped(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("amount")
    def amount_non_negative(cls, v: float | None):
        return _finite_non_negative(v)

    @model_validator(mode="after")
    def check_dates(self):
        if self.next_billing_date is not None and self.next_billing_date < self.start_date:
            raise ValueError("next_billing_date must not precede start_date")
        if self.free_start_date and self.free_end_date and self.free_end_date < self.free_start_date:
            raise ValueError("free_end_date must not precede free_start_date")
        return self


class SubscriptionOut(BaseModel):
    id: str
    user_id: int
    name: str
    start_date: dt.date
    frequency: SubscriptionFrequency
    amount: Optional[float]
    next_billing_date: Optional[dt.date]
    reminder_days: int
    status: SubscriptionStatus
    free_start_date: Optional[dt.date]
    free_end_date: Optional[dt.date]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ===== Dashboard =====

class SpentTrendPoint(BaseModel):
    date: dt.date
    spent: float


class CategorySpend(BaseModel):
    label: str
    amount: float


class DashboardSummaryOut(BaseModel):
    spent_trend: list[SpentTrendPoint]
    categories: list[CategorySpend]
