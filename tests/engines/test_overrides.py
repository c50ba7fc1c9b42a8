"""
Tests for slab resolution and farmer-over-config precedence.
"""

from decimal import Decimal

from dairy_engines.overrides import INERT, Effective, resolve_effective
from dairy_engines.slabs import bonus_slabs, resolve_slab
from dairy_kernel.domain.dtos import (
    Category,
    CategorySetting,
    Farmer,
    RateConfig,
    Slab,
    SlabKind,
    Window,
)

D = Decimal
JUNE = Window("2025-06-01", "AM", "2025-06-30", "PM")
JULY = Window("2025-07-01", "AM", "2025-07-31", "PM")


def _config(**categories: CategorySetting) -> RateConfig:
    return RateConfig(
        id="cfg",
        purchase_method="kg_fat",
        categories={Category[name]: setting for name, setting in categories.items()},
    )


class TestResolveSlab:

    def test_inclusive_bounds(self):
        slabs = (Slab(D("4.5"), D("6.0"), rate=D("3")),)
        assert resolve_slab(D("4.5"), slabs, "2025-06-10", "AM") is slabs[0]
        assert resolve_slab(D("6.0"), slabs, "2025-06-10", "AM") is slabs[0]
        assert resolve_slab(D("6.1"), slabs, "2025-06-10", "AM") is None

    def test_first_qualifying_slab_wins(self):
        slabs = (Slab(D("4"), D("6"), rate=D("1")), Slab(D("5"), D("7"), rate=D("2")))
        assert resolve_slab(D("5.5"), slabs, "2025-06-10", "AM").rate == D("1")

    def test_inactive_slab_is_skipped(self):
        slabs = (
            Slab(D("4"), D("6"), rate=D("1"), window=JULY),
            Slab(D("4"), D("6"), rate=D("2"), window=JUNE),
        )
        assert resolve_slab(D("5"), slabs, "2025-06-10", "AM").rate == D("2")

    def test_incomplete_slab_never_matches(self):
        assert resolve_slab(D("5"), (Slab(None, D("6"), rate=D("1")),), "2025-06-10", "AM") is None

    def test_farmer_bonus_slabs_replace_config(self):
        config = RateConfig(slabs={SlabKind.BONUS: (Slab(D("0"), D("100"), rate=D("1")),)})
        own = (Slab(D("50"), D("60"), rate=D("9")),)
        farmer = Farmer(id="f", slabs={SlabKind.BONUS: own})
        assert bonus_slabs(config, farmer) == own
        assert bonus_slabs(config, Farmer(id="g")) == config.slab_list(SlabKind.BONUS)
        assert bonus_slabs(config, None) == config.slab_list(SlabKind.BONUS)


class TestResolveEffective:

    def test_config_setting_applies(self):
        config = _config(FAT_INC=CategorySetting(rate=D("2"), method="kg_fat", threshold=D("1")))
        assert resolve_effective(Category.FAT_INC, config, None, "2025-06-10", "AM") == Effective(
            D("2"), "kg_fat", D("1")
        )

    def test_farmer_non_zero_rate_wins(self):
        config = _config(FAT_INC=CategorySetting(rate=D("2"), method="kg_fat"))
        farmer = Farmer(id="f", categories={Category.FAT_INC: CategorySetting(rate=D("4"), method="liter")})
        effective = resolve_effective(Category.FAT_INC, config, farmer, "2025-06-10", "AM")
        assert effective.value == D("4")
        assert effective.method == "liter"

    def test_farmer_zero_rate_means_not_overridden(self):
        config = _config(FAT_INC=CategorySetting(rate=D("2"), method="kg_fat"))
        farmer = Farmer(id="f", categories={Category.FAT_INC: CategorySetting(rate=D("0"), method="liter")})
        assert resolve_effective(Category.FAT_INC, config, farmer, "2025-06-10", "AM").value == D("2")

    def test_farmer_window_outside_falls_back_to_config(self):
        config = _config(CARTAGE=CategorySetting(rate=D("5"), method="shift"))
        farmer = Farmer(
            id="f",
            categories={Category.CARTAGE: CategorySetting(rate=D("20"), method="shift", window=JULY)},
        )
        assert resolve_effective(Category.CARTAGE, config, farmer, "2025-06-10", "AM").value == D("5")
        assert resolve_effective(Category.CARTAGE, config, farmer, "2025-07-10", "AM").value == D("20")

    def test_config_window_outside_is_inert(self):
        config = _config(EXTRA=CategorySetting(rate=D("1"), method="kg_fat", window=JULY))
        assert resolve_effective(Category.EXTRA, config, None, "2025-06-10", "AM") is INERT
        assert INERT == Effective(D("0"), "kg_fat", D("0"))

    def test_config_zero_rate_still_applies(self):
        config = _config(FAT_DED=CategorySetting(rate=D("0"), method="liter"))
        assert resolve_effective(Category.FAT_DED, config, None, "2025-06-10", "AM").method == "liter"

    def test_with_slab_defaults_method(self):
        effective = Effective(D("2"), "liter", D("7")).with_slab(Slab(D("1"), D("2"), rate=D("3")), "kg_fat")
        assert effective == Effective(D("3"), "kg_fat", D("7"))
