"""
반복 지출 후보 탐지 (heuristic)

책임:
- (카테고리, 반올림 금액) 버킷 구성
- 버킷 내 날짜순 인접 쌍 비교
- 간격/금액 허용 범위 내 쌍의 ID 수집

Detection is advisory only. Explicit ``RecurringRule`` rows are a separate
mechanism and are never consulted here.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, DecimalException
from typing import Any, Optional

from spendtrack.utils.normalization import normalize_category_label, parse_amount, parse_timestamp


logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400

# Bucket key used for records without a category label. ``None`` cannot
# collide with a real label because labels are normalized to non-empty str.
UNCATEGORIZED = None

_CATEGORY_KEYS = ("category_label", "categoryLabel", "category")

_CONFIG_ALIASES = {
    "minGapDays": "min_gap_days",
    "maxGapDays": "max_gap_days",
    "maxAmountRatio": "max_amount_ratio",
    "amountBucketWidth": "amount_bucket_width",
}


@dataclass(frozen=True)
class ExpenseRecord:
    """Well-formed expense as seen by the detector."""

    id: str
    date: datetime
    amount: Decimal
    category_label: Optional[str] = None


@dataclass(frozen=True)
class RecurrenceConfig:
    """
    Tolerance window for recurring candidate detection.

    Defaults target a weekly cadence (7 ± 2 days) with at most 10% price
    drift. A monthly bill window would be e.g. ``min_gap_days=25,
    max_gap_days=35``.

    Attributes:
        min_gap_days: smallest accepted gap between adjacent records (inclusive)
        max_gap_days: largest accepted gap (inclusive)
        max_amount_ratio: largest accepted ``|a - b| / max(a, b)`` (inclusive)
        amount_bucket_width: amounts are grouped by ``round(amount / width)``
    """

    min_gap_days: float = 5
    max_gap_days: float = 9
    max_amount_ratio: float = 0.10
    amount_bucket_width: float = 100

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
                raise ValueError(f"{f.name} must be a number")
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite")
        if self.min_gap_days < 0:
            raise ValueError("min_gap_days must be non-negative")
        if self.max_gap_days < self.min_gap_days:
            raise ValueError("max_gap_days must be >= min_gap_days")
        if self.max_amount_ratio < 0:
            raise ValueError("max_amount_ratio must be non-negative")
        if self.amount_bucket_width <= 0:
            raise ValueError("amount_bucket_width must be positive")

    @classmethod
    def from_settings(cls, settings: Any = None) -> "RecurrenceConfig":
        if settings is None:
            from spendtrack.core.config import settings
        return cls(
            min_gap_days=settings.RECURRENCE_MIN_GAP_DAYS,
            max_gap_days=settings.RECURRENCE_MAX_GAP_DAYS,
            max_amount_ratio=settings.RECURRENCE_MAX_AMOUNT_RATIO,
            amount_bucket_width=settings.RECURRENCE_AMOUNT_BUCKET_WIDTH,
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], base: "RecurrenceConfig | None" = None) -> "RecurrenceConfig":
        """Build a config from snake_case or camelCase keys; missing keys come from ``base``."""
        known = {f.name for f in fields(cls)}
        overrides: dict[str, Any] = {}
        for key, value in values.items():
            name = _CONFIG_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unknown recurrence option: {key}")
            if value is not None:
                overrides[name] = value
        start = base or cls()
        return cls(**{**start.as_dict(), **overrides})

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def ratio_limit(self) -> Decimal:
        return Decimal(str(self.max_amount_ratio))

    @property
    def bucket_width(self) -> Decimal:
        return Decimal(str(self.amount_bucket_width))


def _field(raw: Any, *names: str) -> Any:
    for name in names:
        if isinstance(raw, Mapping):
            if name in raw:
                return raw[name]
        elif hasattr(raw, name):
            return getattr(raw, name)
    return None


def to_expense_record(raw: Any) -> ExpenseRecord | None:
    """
    Coerce a mapping, ORM row or ``ExpenseRecord`` into a clean ``ExpenseRecord``.

    Returns ``None`` (and logs at DEBUG) when the record cannot take part in
    detection: missing id, unparseable date, or a negative / non-numeric amount.
    """
    raw_id = _field(raw, "id")
    record_id = str(raw_id).strip() if raw_id is not None else ""
    if not record_id:
        logger.debug("Skipping expense record without id: %r", raw)
        return None

    when = parse_timestamp(_field(raw, "date"))
    if when is None:
        logger.debug("Skipping expense record %s: unparseable date", record_id)
        return None

    amount = parse_amount(_field(raw, "amount"))
    if amount is None:
        logger.debug("Skipping expense record %s: invalid amount", record_id)
        return None

    return ExpenseRecord(
        id=record_id,
        date=when,
        amount=amount,
        category_label=normalize_category_label(_field(raw, *_CATEGORY_KEYS)),
    )


def amount_ratio(a: Decimal, b: Decimal) -> Decimal:
    """``|a - b| / max(a, b)``, defined as 0 when both amounts are 0."""
    larger = max(a, b)
    if larger == 0:
        return Decimal(0)
    return abs(a - b) / larger


def day_gap(a: datetime, b: datetime) -> float:
    return abs((b - a).total_seconds()) / SECONDS_PER_DAY


class RecurrenceDetector:
    """
    Flags expenses that look like part of a recurring series.

    Records are bucketed by ``(category_label, round(amount / width))``, each
    bucket is sorted by (date, id), and every adjacent pair inside the tolerance
    window contributes both of its ids to the result. Only adjacent pairs are
    compared: a series of N records yields up to N - 1 overlapping matches,
    never a global cluster.

    Stateless; a single instance can be shared.
    """

    def __init__(self, config: RecurrenceConfig | None = None):
        self.config = config or RecurrenceConfig()

    def bucket_key(self, record: ExpenseRecord) -> tuple[str | None, int]:
        scaled = record.amount / self.config.bucket_width
        band = int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
        return (record.category_label or UNCATEGORIZED, band)

    def is_recurring_pair(self, prev: ExpenseRecord, curr: ExpenseRecord) -> bool:
        cfg = self.config
        gap = day_gap(prev.date, curr.date)
        if not (cfg.min_gap_days <= gap <= cfg.max_gap_days):
            return False
        return amount_ratio(prev.amount, curr.amount) <= cfg.ratio_limit

    def group(self, records: Iterable[Any]) -> dict[tuple[str | None, int], list[ExpenseRecord]]:
        """Normalize and bucket records; each bucket is sorted by (date, id)."""
        buckets: dict[tuple[str | None, int], list[ExpenseRecord]] = defaultdict(list)
        for raw in records:
            record = to_expense_record(raw)
            if record is None:
                continue
            try:
                key = self.bucket_key(record)
            except DecimalException:
                logger.debug("Skipping expense record %s: amount out of range", record.id)
                continue
            buckets[key].append(record)
        for members in buckets.values():
            members.sort(key=lambda r: (r.date, r.id))
        return dict(buckets)

    def detect(self, records: Iterable[Any]) -> set[str]:
        """Return the ids of records that belong to at least one recurring pair."""
        recurring: set[str] = set()
        for members in self.group(records).values():
            for prev, curr in zip(members, members[1:]):
                if self.is_recurring_pair(prev, curr):
                    recurring.add(prev.id)
                    recurring.add(curr.id)
        return recurring


def detect_recurring_candidates(records: Iterable[Any], config: RecurrenceConfig | None = None) -> set[str]:
    return RecurrenceDetector(config).detect(records)
