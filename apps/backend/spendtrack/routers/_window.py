from __future__ import annotations

from datetime import date, datetime, time, timedelta


def window_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn inclusive calendar-day bounds into ``[start, end_exclusive)`` datetimes."""
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper
