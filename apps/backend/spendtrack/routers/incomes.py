from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import IncomeCreate, IncomeOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/incomes", tags=["incomes"])


@router.post("", response_model=IncomeOut, status_code=201)
def create_income(
    payload: IncomeCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    income = models.Income(
        user_id=user.id,
        amount=Decimal(str(payload.amount)),
        type=payload.type,
        date_received=payload.date_received,
        note=payload.note,
    )
    db.add(income)
    db.commit()
    db.refresh(income)
    logger.info("Created income %s (%s) for user %s", income.id, income.type.value, user.id)
    return income


@router.get("", response_model=list[IncomeOut])
def list_incomes(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    # 최근 수령분 우선
    return (
        db.query(models.Income)
        .filter(models.Income.user_id == user.id)
        .order_by(models.Income.date_received.desc(), models.Income.created_at.desc())
        .all()
    )


@router.delete("/{income_id}", status_code=204)
def delete_income(
    income_id: str,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    income = (
        db.query(models.Income)
        .filter(models.Income.id == income_id, models.Income.user_id == user.id)
        .first()
    )
    if not income:
        raise HTTPException(status_code=404, detail="Income not found")
    db.delete(income)
    db.commit()
    logger.info("Deleted income %s for user %s", income_id, user.id)
    return None
