from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import BudgetCreate, BudgetOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def _spent_by_category(db: Session, user_id: int, year: int, month: int) -> dict[str, Decimal]:
    """Sum of expenses per category label within one calendar month."""
    start, end = _month_bounds(year, month)
    rows = (
        db.query(models.Expense.category_label, func.sum(models.Expense.amount))
        .filter(
            models.Expense.user_id == user_id,
            models.Expense.category_label.isnot(None),
            models.Expense.date >= start,
            models.Expense.date < end,
        )
        .group_by(models.Expense.category_label)
        .all()
    )
    return {label: Decimal(str(total or 0)) for label, total in rows}


def _to_out(budget: models.Budget, spent: Decimal) -> BudgetOut:
    out = BudgetOut.model_validate(budget)
    out.spent = float(spent)
    return out


@router.post("", response_model=BudgetOut, status_code=201)
def create_budget(
    payload: BudgetCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    dup = (
        db.query(models.Budget)
        .filter(
            models.Budget.user_id == user.id,
            models.Budget.category_label == payload.category_label,
            models.Budget.month == payload.month,
            models.Budget.year == payload.year,
        )
        .first()
    )
    if dup:
        raise HTTPException(status_code=409, detail="Budget already exists for this category and month")

    budget = models.Budget(
        user_id=user.id,
        category_label=payload.category_label,
        monthly_limit=Decimal(str(payload.monthly_limit)),
        month=payload.month,
        year=payload.year,
    )
    db.add(budget)
    db.commit()
    db.refresh(budget)
    logger.info(
        "Created budget %s (%s %04d-%02d) for user %s",
        budget.id, budget.category_label, budget.year, budget.month, user.id,
    )
    spent = _spent_by_category(db, user.id, budget.year, budget.month)
    return _to_out(budget, spent.get(budget.category_label, Decimal(0)))


@router.get("", response_model=list[BudgetOut])
def list_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2100),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    q = db.query(models.Budget).filter(models.Budget.user_id == user.id)
    if month is not None:
        q = q.filter(models.Budget.month == month)
    if year is not None:
        q = q.filter(models.Budget.year == year)
    budgets = q.order_by(
        models.Budget.year.desc(), models.Budget.month.desc(), models.Budget.category_label.asc()
    ).all()

    # (year, month) 별로 한 번만 집계
    spent_cache: dict[tuple[int, int], dict[str, Decimal]] = {}
    result: list[BudgetOut] = []
    for budget in budgets:
        period = (budget.year, budget.month)
        if period not in spent_cache:
            spent_cache[period] = _spent_by_category(db, user.id, *period)
        result.append(_to_out(budget, spent_cache[period].get(budget.category_label, Decimal(0))))
    return result
