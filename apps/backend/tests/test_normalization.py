"""
정규화 유틸리티 테스트
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from spendtrack.utils.normalization import (
    NOTE_MAX_LENGTH,
    normalize_category_label,
    parse_amount,
    parse_timestamp,
    sanitize_note,
)


class TestNormalizeCategoryLabel:
    def test_trims_and_collapses_whitespace(self):
        assert normalize_category_label("  Eating   out ") == "Eating out"

    def test_preserves_case(self):
        assert normalize_category_label("Groceries") == "Groceries"
        assert normalize_category_label("groceries") == "groceries"

    def test_unicode_normalization(self):
        """유니코드 정규화 (NFKC): 전각 → 반각"""
        assert normalize_category_label("Ｆｕｅｌ") == "Fuel"

    def test_blank_and_missing(self):
        assert normalize_category_label("") is None
        assert normalize_category_label("   ") is None
        assert normalize_category_label(None) is None
        assert normalize_category_label(42) is None


class TestSanitizeNote:
    def test_strips_script_and_iframe(self):
        note = "milk <script>alert(1)</script>and eggs<iframe src='x'></iframe>"
        assert sanitize_note(note) == "milk and eggs"

    def test_strips_inline_handlers(self):
        assert sanitize_note('<b onclick="steal()">bread</b>') == "<b >bread</b>"

    def test_caps_length(self):
        assert len(sanitize_note("x" * (NOTE_MAX_LENGTH + 50))) == NOTE_MAX_LENGTH

    def test_empty_becomes_none(self):
        assert sanitize_note("   ") is None
        assert sanitize_note(None) is None
        assert sanitize_note(123) is None


class TestParseTimestamp:
    def test_date_only_string(self):
        assert parse_timestamp("2024-01-08") == datetime(2024, 1, 8)

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-01-08T10:30:00Z") == datetime(2024, 1, 8, 10, 30)

    def test_offset_is_converted_to_utc(self):
        assert parse_timestamp("2024-01-08T10:30:00+09:00") == datetime(2024, 1, 8, 1, 30)

    def test_date_and_datetime_objects(self):
        assert parse_timestamp(date(2024, 2, 29)) == datetime(2024, 2, 29)
        assert parse_timestamp(datetime(2024, 2, 29, 8)) == datetime(2024, 2, 29, 8)

    @pytest.mark.parametrize("value", ["", "   ", "soon", "2024-13-40", None, 1704067200, object()])
    def test_unparseable(self, value):
        assert parse_timestamp(value) is None


class TestParseAmount:
    def test_numbers(self):
        assert parse_amount(100) == Decimal("100")
        assert parse_amount(0.1) == Decimal("0.1")
        assert parse_amount(Decimal("12.50")) == Decimal("12.50")
        assert parse_amount(" 99.95 ") == Decimal("99.95")
        assert parse_amount(0) == Decimal("0")

    @pytest.mark.parametrize(
        "value",
        [-1, -0.01, "-5", "abc", "", None, True, False, float("nan"), float("inf"), "NaN", "Infinity", [1]],
    )
    def test_rejected(self, value):
        assert parse_amount(value) is None
