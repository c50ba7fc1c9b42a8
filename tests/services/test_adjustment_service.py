"""
Tests for AdjustmentService (bill additions and deductions).
"""

from decimal import Decimal

import pytest

from dairy_kernel.domain.dtos import AdjustmentType
from dairy_kernel.exceptions import AdjustmentNotFoundError, LockedPeriodError

D = Decimal


def _line(**overrides) -> dict:
    record = {
        "farmerId": "f-1",
        "billPeriod": "5-2025-P1",
        "headName": "Cattle feed",
        "type": "deduction",
        "amount": "250",
    }
    record.update(overrides)
    return record


class TestAdjustments:

    def test_create(self, adjustment_service):
        created = adjustment_service.create(_line())
        assert created.type is AdjustmentType.DEDUCTION
        assert created.amount == D("250")

    def test_default_value_alias_and_type_fallback(self, adjustment_service):
        created = adjustment_service.create(_line(amount=None, defaultValue="40", type="Bonus"))
        assert created.amount == D("40")
        assert created.type is AdjustmentType.ADDITION

    def test_locked_period(self, adjustment_service, lock_service):
        lock_service.toggle_lock("5-2025-P1")
        with pytest.raises(LockedPeriodError):
            adjustment_service.create(_line())

    def test_update_amount_via_default_value(self, adjustment_service):
        created = adjustment_service.create(_line())
        updated = adjustment_service.update(created.id, {"defaultValue": "75"})
        assert updated.amount == D("75")

    def test_move_into_locked_period(self, adjustment_service, lock_service):
        created = adjustment_service.create(_line())
        lock_service.toggle_lock("5-2025-P2")
        with pytest.raises(LockedPeriodError):
            adjustment_service.update(created.id, {"billPeriod": "5-2025-P2"})

    def test_delete_locked(self, adjustment_service, lock_service):
        created = adjustment_service.create(_line())
        lock_service.toggle_lock("5-2025-P1")
        with pytest.raises(LockedPeriodError):
            adjustment_service.delete(created.id)

    def test_list_for_period(self, adjustment_service):
        adjustment_service.create(_line(id="a1"))
        adjustment_service.create(_line(id="a2", farmerId="f-2"))
        adjustment_service.create(_line(id="a3", billPeriod="5-2025-P2"))
        assert [a.id for a in adjustment_service.list_for_period("5-2025-P1")] == ["a1", "a2"]
        assert [a.id for a in adjustment_service.list_for_period("5-2025-P1", "f-2")] == ["a2"]

    def test_unknown_id(self, adjustment_service):
        with pytest.raises(AdjustmentNotFoundError):
            adjustment_service.delete("missing")
