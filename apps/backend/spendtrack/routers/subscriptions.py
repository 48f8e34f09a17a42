from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import SubscriptionCreate, SubscriptionOut


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.post("", response_model=SubscriptionOut, status_code=201)
def create_subscription(
    payload: SubscriptionCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    sub = models.Subscription(
        user_id=user.id,
        name=payload.name,
        start_date=payload.start_date,
        frequency=payload.frequency,
        amount=Decimal(str(payload.amount)) if payload.amount is not None else None,
        next_billing_date=payload.next_billing_date,
        reminder_days=payload.reminder_days,
        status=payload.status,
        free_start_date=payload.free_start_date,
        free_end_date=payload.free_end_date,
    )
    db.add(sub)
    db.commit()
    db.refresh(sub)
    logger.info("Created subscription %s (%s) for user %s", sub.id, sub.frequency.value, user.id)
    return sub


@router.get("", response_model=list[SubscriptionOut])
def list_subscriptions(
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    # 다음 결제일이 없는 항목은 뒤로
    return (
        db.query(models.Subscription)
        .filter(models.Subscription.user_id == user.id)
        .order_by(
            models.Subscription.next_billing_date.is_(None),
            models.Subscription.next_billing_date.asc(),
            models.Subscription.name.asc(),
        )
        .all()
    )
