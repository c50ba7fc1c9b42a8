"""
Tests for numeric coercion and rounding helpers.

Numbers arrive as form strings ("4.5", "4.5%", "", None); coercion never
raises and rounding is half-up.  Dates arrive in several typed layouts.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from dairy_kernel.domain.values import (
    optional_decimal,
    parse_date,
    positive_or_none,
    quantize,
    round_money,
    round_whole,
    safe_decimal,
    safe_int,
)

D = Decimal


class TestCoercion:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("4.5", D("4.5")),
            (" 4.5% ", D("4.5")),
            (".5", D(".5")),
            (3, D("3")),
            (2.25, D("2.25")),
            ("1e2", D("100")),
            ("-1.5", D("-1.5")),
        ],
    )
    def test_parses_numeric_prefix(self, raw, expected):
        assert optional_decimal(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", True, float("nan"), float("inf"), D("NaN")])
    def test_non_numbers_are_none(self, raw):
        assert optional_decimal(raw) is None

    def test_safe_decimal_defaults_to_zero(self):
        assert safe_decimal("n/a") == D("0")
        assert safe_decimal(None, D("1")) == D("1")

    def test_positive_or_none(self):
        assert positive_or_none("0") is None
        assert positive_or_none("-2") is None
        assert positive_or_none("97.1") == D("97.1")

    def test_safe_int(self):
        assert safe_int("15") == 15
        assert safe_int("15.9") == 15
        assert safe_int("", 31) == 31


class TestRounding:

    def test_half_up(self):
        assert round_money(D("2.645")) == D("2.65")
        assert round_money(D("-2.645")) == D("-2.65")
        assert quantize(D("4.25"), 1) == D("4.3")
        assert quantize(D("1.0005"), 3) == D("1.001")

    def test_whole_units(self):
        assert round_whole(D("294.50")) == D("295")
        assert round_whole(D("294.49")) == D("294")

    def test_whole_units_negative_halves_round_up(self):
        assert round_whole(D("-2.5")) == D("-2")
        assert round_whole(D("-2.51")) == D("-3")
        assert round_whole(D("-2.49")) == D("-2")


class TestParseDate:

    @pytest.mark.parametrize(
        "value",
        [
            "2025-06-10",
            "2025-06-10T18:30:00",
            "06/10/2025",
            "2025/06/10",
            "10-Jun-2025",
            "10 Jun 2025",
            "June 10, 2025",
            "Jun 10, 2025",
            date(2025, 6, 10),
            datetime(2025, 6, 10, 7, 0),
        ],
    )
    def test_accepted_layouts(self, value):
        assert parse_date(value) == date(2025, 6, 10)

    @pytest.mark.parametrize("value", [None, "", "  ", "garbage", "2025-02-30", "10-06-2025", 20250610])
    def test_unreadable(self, value):
        assert parse_date(value) is None
