from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import (
    ExpenseCreate,
    ExpenseKind,
    ExpenseListOut,
    ExpenseOut,
    ExpenseTotals,
    RecurrenceParamsOut,
    RecurringCandidatesOut,
)
from spendtrack.services import DashboardSummaryService, RecurrenceConfig, RecurrenceDetector
from spendtrack.utils.normalization import parse_timestamp

from ._window import window_bounds


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseOut, status_code=201)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    if payload.rule_id:
        rule = (
            db.query(models.RecurringRule)
            .filter(models.RecurringRule.id == payload.rule_id, models.RecurringRule.user_id == user.id)
            .first()
        )
        if not rule:
            raise HTTPException(status_code=404, detail="RecurringRule not found")

    occurred = parse_timestamp(payload.date) if payload.date else None
    if occurred is None:
        occurred = datetime.now(timezone.utc).replace(tzinfo=None)

    expense = models.Expense(
        user_id=user.id,
        date=occurred,
        amount=Decimal(str(payload.amount)),
        unit=payload.unit or None,
        quantity=payload.quantity,
        note=payload.note,
        language_tag=payload.language_tag or "en",
        category_label=payload.category_label,
        rule_id=payload.rule_id or None,
        items=[item.model_dump() for item in payload.items] if payload.items else None,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("Created expense %s for user %s", expense.id, user.id)
    return expense


@router.get("", response_model=ExpenseListOut)
def list_expenses(
    start: date | None = Query(None),
    end: date | None = Query(None),
    kind: ExpenseKind = Query("all", description="all | recurring (linked to a rule) | new (not linked)"),
    q: str | None = Query(None, max_length=200, description="Search category label or note"),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    lower, upper = window_bounds(start, end)
    query = db.query(models.Expense).filter(models.Expense.user_id == user.id)
    if lower is not None:
        query = query.filter(models.Expense.date >= lower)
    if upper is not None:
        query = query.filter(models.Expense.date < upper)
    if kind == "recurring":
        query = query.filter(models.Expense.rule_id.isnot(None))
    elif kind == "new":
        query = query.filter(models.Expense.rule_id.is_(None))
    if q and q.strip():
        needle = f"%{q.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(models.Expense.category_label).like(needle),
                func.lower(models.Expense.note).like(needle),
            )
        )
    rows = query.order_by(models.Expense.date.desc(), models.Expense.id.asc()).all()
    spent = sum((Decimal(r.amount or 0) for r in rows), Decimal(0))
    return ExpenseListOut(
        items=[ExpenseOut.model_validate(r) for r in rows],
        totals=ExpenseTotals(spent=float(spent)),
    )


@router.get("/recurring-candidates", response_model=RecurringCandidatesOut)
def list_recurring_candidates(
    start: date | None = Query(None),
    end: date | None = Query(None),
    min_gap_days: float | None = Query(None, ge=0),
    max_gap_days: float | None = Query(None, ge=0),
    max_amount_ratio: float | None = Query(None, ge=0),
    amount_bucket_width: float | None = Query(None, gt=0),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    """Ids of the user's expenses that look like part of an implicit recurring series."""
    try:
        config = RecurrenceConfig.from_mapping(
            {
                "min_gap_days": min_gap_days,
                "max_gap_days": max_gap_days,
                "max_amount_ratio": max_amount_ratio,
                "amount_bucket_width": amount_bucket_width,
            },
            base=RecurrenceConfig.from_settings(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    lower, upper = window_bounds(start, end)
    expenses = DashboardSummaryService(db).load_expenses(user.id, lower, upper)
    ids = RecurrenceDetector(config).detect(expenses)
    return RecurringCandidatesOut(
        ids=sorted(ids),
        count=len(ids),
        params=RecurrenceParamsOut(**config.as_dict()),
    )


@router.delete("/{expense_id}", status_code=204)
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    expense = (
        db.query(models.Expense)
        .filter(models.Expense.id == expense_id, models.Expense.user_id == user.id)
        .first()
    )
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(expense)
    db.commit()
    logger.info("Deleted expense %s for user %s", expense_id, user.id)
    return None
