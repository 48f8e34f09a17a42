"""
Services 패키지

비즈니스 로직 서비스 클래스들을 제공합니다.
"""

from .dashboard_service import DashboardSummaryService
from .recurrence_detector import (
    ExpenseRecord,
    RecurrenceConfig,
    RecurrenceDetector,
    detect_recurring_candidates,
)

__all__ = [
    "DashboardSummaryService",
    "ExpenseRecord",
    "RecurrenceConfig",
    "RecurrenceDetector",
    "detect_recurring_candidates",
]
