"""
Tests for the pure lock registry.

Verifies:
- Date and period-id membership
- Calendar-day range scans and their size limit
- Immutable toggle/lock
- Override window extraction for farmers and configs
"""

from decimal import Decimal

import pytest

from dairy_engines.locks import LockRegistry, config_windows, override_windows
from dairy_kernel.domain.dtos import (
    BillPeriodDef,
    Category,
    CategorySetting,
    Farmer,
    RateConfig,
    Slab,
    SlabKind,
    Window,
)

PERIODS = (
    BillPeriodDef(id="P1", start_day=1, end_day=15),
    BillPeriodDef(id="P2", start_day=16, end_day=31),
)


@pytest.fixture
def registry() -> LockRegistry:
    return LockRegistry.build(PERIODS, {"5-2025-P1"})


class TestDateLocks:

    def test_date_in_locked_period(self, registry):
        assert registry.is_date_locked("2025-06-10") is True

    def test_date_in_open_period(self, registry):
        assert registry.is_date_locked("2025-06-16") is False

    def test_non_iso_date_in_locked_period(self, registry):
        assert registry.is_date_locked("06/10/2025") is True
        assert registry.is_date_locked("June 10, 2025") is True
        assert registry.is_date_locked("06/20/2025") is False

    def test_unresolvable_date_is_never_locked(self, registry):
        assert registry.is_date_locked("") is False
        assert registry.is_date_locked(None) is False
        assert LockRegistry.build((), {"5-2025-P1"}).is_date_locked("2025-06-10") is False

    def test_period_id_membership(self, registry):
        assert registry.is_period_id_locked("5-2025-P1") is True
        assert registry.is_period_id_locked("5-2025-P2") is False
        assert registry.is_period_id_locked("") is False


class TestRangeLocks:

    def test_range_touching_locked_day(self, registry):
        assert registry.is_range_locked("2025-05-20", "2025-06-01") is True

    def test_range_clear_of_locked_days(self, registry):
        assert registry.is_range_locked("2025-06-16", "2025-07-31") is False

    def test_missing_or_bad_bounds(self, registry):
        assert registry.is_range_locked(None, "2025-06-10") is False
        assert registry.is_range_locked("2025-06-01", "") is False
        assert registry.is_range_locked("June", "2025-06-10") is False

    def test_non_iso_bounds(self, registry):
        assert registry.is_range_locked("06/14/2025", "06/20/2025") is True
        assert registry.first_locked_period("June 1, 2025", "June 30, 2025") == "5-2025-P1"

    def test_reversed_range_is_empty(self, registry):
        assert registry.is_range_locked("2025-06-15", "2025-06-01") is False

    def test_span_limit(self):
        small = LockRegistry.build(PERIODS, set(), max_days=30)
        with pytest.raises(ValueError, match="lock scan limit"):
            small.is_range_locked("2025-01-01", "2025-03-01")

    def test_first_locked_period(self, registry):
        assert registry.first_locked_period("2025-05-01", "2025-06-30") == "5-2025-P1"
        assert registry.first_locked_period("2025-06-16", "2025-06-30") == ""


class TestToggle:

    def test_toggle_is_immutable(self, registry):
        toggled = registry.toggle("5-2025-P2")
        assert toggled.locked_ids == {"5-2025-P1", "5-2025-P2"}
        assert registry.locked_ids == {"5-2025-P1"}

    def test_toggle_twice_restores(self, registry):
        assert registry.toggle("5-2025-P1").toggle("5-2025-P1") == registry

    def test_lock_is_idempotent(self, registry):
        assert registry.lock("5-2025-P1") is registry

    def test_empty_period_id_rejected(self, registry):
        with pytest.raises(ValueError, match="periodId is required"):
            registry.toggle("")
        with pytest.raises(ValueError):
            registry.lock("")


class TestOverrideWindows:

    def test_bounded_category_and_slab_windows(self):
        june = Window("2025-06-01", "AM", "2025-06-15", "PM")
        july = Window("2025-07-01", "AM", "2025-07-15", "PM")
        farmer = Farmer(
            id="f-1",
            categories={
                Category.FAT_INC: CategorySetting(rate=Decimal("2"), window=june),
                Category.EXTRA: CategorySetting(rate=Decimal("1")),
            },
            slabs={SlabKind.BONUS: (Slab(Decimal("0"), Decimal("10"), window=july),)},
        )
        assert override_windows(farmer) == [june, july]

    def test_half_open_windows_are_ignored(self):
        config = RateConfig(window=Window("2025-06-01", "AM", None, None))
        assert config_windows(config) == []
        assert override_windows(config) == []

    def test_any_window_locked(self, registry):
        assert registry.any_window_locked([Window("2025-06-14", "AM", "2025-06-20", "PM")]) is True
        assert registry.any_window_locked([Window("2025-06-16", "AM", "2025-06-20", "PM")]) is False
        assert registry.any_window_locked([]) is False
