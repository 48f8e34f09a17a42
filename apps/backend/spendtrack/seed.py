from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session, sessionmaker

from .core.database import SessionLocal, init_db, session_scope
from .core.logging_config import configure_logging
from .models import (
    Budget,
    Expense,
    Income,
    IncomeType,
    RecurringFrequency,
    RecurringRule,
    Subscription,
    SubscriptionFrequency,
    User,
)


DEMO_EMAIL = "demo@example.com"


def _seed_user(db: Session) -> User:
    user = db.query(User).filter_by(email=DEMO_EMAIL).first()
    if not user:
        user = User(email=DEMO_EMAIL, is_active=True)
        db.add(user)
        db.flush()
    return user


def seed(factory: sessionmaker = SessionLocal) -> None:
    with session_scope(factory) as db:
        user = _seed_user(db)
        today = date.today()

        if not db.query(RecurringRule).filter_by(user_id=user.id).first():
            db.add(
                RecurringRule(
                    user_id=user.id,
                    label="Rent",
                    default_amount=Decimal("1200"),
                    frequency=RecurringFrequency.MONTHLY,
                    weekday_or_day=1,
                )
            )

        # weekly grocery run with slight price drift, no explicit rule
        if not db.query(Expense).filter_by(user_id=user.id).first():
            anchor = datetime.now().replace(hour=10, minute=0, second=0, microsecond=0)
            for weeks_back, amount in ((4, "96.40"), (3, "101.20"), (2, "99.80"), (1, "104.10")):
                db.add(
                    Expense(
                        user_id=user.id,
                        date=anchor - timedelta(weeks=weeks_back),
                        amount=Decimal(amount),
                        category_label="Groceries",
                        note="Weekly groceries",
                    )
                )
            db.add(
                Expense(
                    user_id=user.id,
                    date=anchor - timedelta(days=3),
                    amount=Decimal("42.00"),
                    category_label="Dining",
                )
            )

        if not db.query(Income).filter_by(user_id=user.id).first():
            db.add(
                Income(
                    user_id=user.id,
                    amount=Decimal("3200"),
                    type=IncomeType.MONTHLY_SALARY,
                    date_received=today.replace(day=1),
                )
            )

        if not db.query(Budget).filter_by(user_id=user.id).first():
            db.add(
                Budget(
                    user_id=user.id,
                    category_label="Groceries",
                    monthly_limit=Decimal("450"),
                    month=today.month,
                    year=today.year,
                )
            )

        if not db.query(Subscription).filter_by(user_id=user.id).first():
            db.add(
                Subscription(
                    user_id=user.id,
                    name="Streaming",
                    start_date=today - timedelta(days=60),
                    frequency=SubscriptionFrequency.MONTHLY,
                    amount=Decimal("12.99"),
                    next_billing_date=today + timedelta(days=5),
                )
            )


if __name__ == "__main__":
    configure_logging()
    init_db()
    seed()
