from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from spendtrack import models


OTHER_CATEGORY_LABEL = "Other"


class DashboardSummaryService:
    """Aggregate a user's expenses into the dashboard trend and category split."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def load_expenses(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[models.Expense]:
        """Expenses of one user with ``start <= date < end``."""
        q = self.db.query(models.Expense).filter(models.Expense.user_id == user_id)
        if start is not None:
            q = q.filter(models.Expense.date >= start)
        if end is not None:
            q = q.filter(models.Expense.date < end)
        return q.order_by(models.Expense.date.asc(), models.Expense.id.asc()).all()

    @staticmethod
    def spent_trend(expenses: Iterable[models.Expense]) -> list[tuple[date, float]]:
        """Daily totals, oldest day first."""
        per_day: dict[date, Decimal] = defaultdict(Decimal)
        for exp in expenses:
            per_day[exp.date.date()] += Decimal(exp.amount or 0)
        return [(day, float(total)) for day, total in sorted(per_day.items())]

    @staticmethod
    def category_totals(expenses: Iterable[models.Expense]) -> list[tuple[str, float]]:
        """Totals per category label, largest first; unlabeled spend goes to "Other"."""
        per_label: dict[str, Decimal] = defaultdict(Decimal)
        for exp in expenses:
            per_label[exp.category_label or OTHER_CATEGORY_LABEL] += Decimal(exp.amount or 0)
        ranked = sorted(per_label.items(), key=lambda kv: (-kv[1], kv[0]))
        return [(label, float(total)) for label, total in ranked]

    def summarize(
        self,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> tuple[list[tuple[date, float]], list[tuple[str, float]]]:
        expenses = self.load_expenses(user_id, start, end)
        return self.spent_trend(expenses), self.category_totals(expenses)
