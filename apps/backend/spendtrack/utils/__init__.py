"""
Utils 패키지
"""

from .normalization import (
    normalize_category_label,
    parse_amount,
    parse_timestamp,
    sanitize_note,
)

__all__ = [
    "normalize_category_label",
    "parse_amount",
    "parse_timestamp",
    "sanitize_note",
]
