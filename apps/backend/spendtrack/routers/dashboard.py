from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from spendtrack import models
from spendtrack.core.database import get_db
from spendtrack.core.deps import get_current_user
from spendtrack.schemas import CategorySpend, DashboardSummaryOut, SpentTrendPoint
from spendtrack.services import DashboardSummaryService

from ._window import window_bounds


router = APIRouter(tags=["dashboard"])


@router.get("/dashboard-summary", response_model=DashboardSummaryOut)
def dashboard_summary(
    start: date | None = Query(None),
    end: date | None = Query(None),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
):
    lower, upper = window_bounds(start, end)
    trend, categories = DashboardSummaryService(db).summarize(user.id, lower, upper)
    return DashboardSummaryOut(
        spent_trend=[SpentTrendPoint(date=day, spent=spent) for day, spent in trend],
        categories=[CategorySpend(label=label, amount=amount) for label, amount in categories],
    )
