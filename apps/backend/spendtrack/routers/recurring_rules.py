from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import RecurringRuleCreate, RecurringRuleOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recurring-rules", tags=["recurring-rules"])


@router.post("", response_model=RecurringRuleOut, status_code=201)
def create_recurring_rule(
    payload: RecurringRuleCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    rule = models.RecurringRule(
        user_id=user.id,
        label=payload.label,
        default_amount=Decimal(str(payload.default_amount)) if payload.default_amount is not None else None,
        unit=payload.unit or None,
        frequency=payload.frequency,
        weekday_or_day=payload.weekday_or_day,
        auto_create=payload.auto_create,
        match_heuristics=payload.match_heuristics,
        active=payload.active,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info("Created recurring rule %s (%s) for user %s", rule.id, rule.frequency.value, user.id)
    return rule


@router.get("", response_model=list[RecurringRuleOut])
def list_recurring_rules(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    return (
        db.query(models.RecurringRule)
        .filter(models.RecurringRule.user_id == user.id)
        .order_by(models.RecurringRule.frequency.asc(), models.RecurringRule.label.asc())
        .all()
    )
