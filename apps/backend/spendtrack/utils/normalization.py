"""
Normalization helpers for loosely-typed expense fields.

Every parser returns ``None`` instead of raising so callers can drop a bad
value and keep going.
"""

from __future__ import annotations

import math
import re
import unicodedata
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any


NOTE_MAX_LENGTH = 1000

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_IFRAME_RE = re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL)
_INLINE_HANDLER_RE = re.compile(r"on\w+=\"[^\"]*\"", re.IGNORECASE)


def normalize_category_label(value: Any) -> str | None:
    """
    Normalize a free-text category label.

    - NFKC normalization (full-width characters fold to ASCII)
    - trim and collapse internal whitespace
    - blank or non-string values become ``None`` (uncategorized)

    Case is preserved: "Groceries" and "groceries" are different labels.

    Example:
        >>> normalize_category_label("  Groceries ")
        'Groceries'
        >>> normalize_category_label("   ") is None
        True
    """
    if not isinstance(value, str):
        return None
    s = unicodedata.normalize("NFKC", value)
    s = re.sub(r"\s+", " ", s).strip()
    return s or None


def sanitize_note(value: Any) -> str | None:
    """Strip script/iframe blocks and inline event handlers, cap the length."""
    if not isinstance(value, str):
        return None
    s = _SCRIPT_RE.sub("", value)
    s = _IFRAME_RE.sub("", s)
    s = _INLINE_HANDLER_RE.sub("", s)
    s = s.strip()
    return s[:NOTE_MAX_LENGTH] or None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a transaction timestamp into a naive UTC ``datetime``.

    Accepts ``datetime``, ``date`` (midnight) and ISO-8601 strings, including a
    trailing ``Z``. Aware values are converted to UTC; naive values are taken
    as UTC already.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_amount(value: Any) -> Decimal | None:
    """
    Parse a non-negative, finite amount into ``Decimal``.

    Floats go through ``str()`` so 0.1 stays ``Decimal("0.1")``. Booleans,
    NaN, infinities and negative values are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount
