"""
Tests for BillPeriodService.
"""

import pytest

from dairy_kernel.exceptions import ValidationFailedError


class TestBillPeriods:

    def test_definitions_keep_creation_order(self, bill_period_service):
        bill_period_service.create({"id": "2", "startDay": 16, "endDay": 31})
        bill_period_service.create({"id": "1", "startDay": 1, "endDay": 15})
        assert [p.id for p in bill_period_service.list()] == ["2", "1"]

    def test_first_match_wins_on_overlap(self, bill_period_service, lock_service):
        bill_period_service.create({"id": "A", "startDay": 1, "endDay": 20})
        bill_period_service.create({"id": "B", "startDay": 10, "endDay": 31})
        assert lock_service.resolve_period("2025-06-12") == "5-2025-A"

    def test_day_out_of_range(self, bill_period_service):
        with pytest.raises(ValidationFailedError) as exc_info:
            bill_period_service.create({"id": "x", "startDay": 0, "endDay": 40})
        assert [e.field for e in exc_info.value.errors] == ["startDay", "endDay"]
        assert exc_info.value.errors[0].code == "DAY_OUT_OF_RANGE"
