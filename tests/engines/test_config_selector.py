"""
Tests for rate config selection.

Verifies:
- First windowed config containing the instant wins (list order)
- Fallback to the first config without a window
- Empty config when nothing applies
- Overlap reporting
"""

from decimal import Decimal

from dairy_engines.config_selector import ConfigOverlap, find_overlapping_configs, select_config
from dairy_kernel.domain.dtos import RateConfig, Window


def _config(config_id: str, window: Window = Window(), rate: str = "30") -> RateConfig:
    return RateConfig(
        id=config_id,
        window=window,
        purchase_method="kg_fat",
        standard_rate=Decimal(rate),
    )


H1 = Window("2025-01-01", "AM", "2025-06-30", "PM")
H2 = Window("2025-07-01", "AM", "2025-12-31", "PM")
JUNE = Window("2025-06-01", "AM", "2025-06-30", "PM")


class TestSelectConfig:

    def test_window_match(self):
        configs = [_config("h1", H1), _config("h2", H2)]
        assert select_config("2025-07-15", "AM", configs).id == "h2"

    def test_first_match_wins_on_overlap(self):
        configs = [_config("h1", H1), _config("june", JUNE)]
        assert select_config("2025-06-10", "AM", configs).id == "h1"
        assert select_config("2025-06-10", "AM", list(reversed(configs))).id == "june"

    def test_windowed_match_beats_earlier_fallback(self):
        configs = [_config("default"), _config("h2", H2)]
        assert select_config("2025-08-01", "PM", configs).id == "h2"

    def test_fallback_is_first_unwindowed(self):
        configs = [_config("h1", H1), _config("default-a"), _config("default-b")]
        assert select_config("2026-01-01", "AM", configs).id == "default-a"

    def test_nothing_applies(self, captured_logs):
        selected = select_config("2030-01-01", "AM", [_config("h1", H1)])
        assert selected == RateConfig.empty()
        assert selected.standard_rate == Decimal("0")
        assert any(r["message"] == "no_rate_config_applicable" for r in captured_logs())

    def test_no_configs(self):
        assert select_config("2025-01-01", "AM", []) == RateConfig.empty()


class TestOverlaps:

    def test_overlapping_pair_reported(self):
        configs = [_config("h1", H1), _config("june", JUNE), _config("h2", H2)]
        assert find_overlapping_configs(configs) == [ConfigOverlap("h1", "june")]

    def test_shift_adjacent_windows_do_not_overlap(self):
        morning = Window("2025-01-01", "AM", "2025-01-10", "AM")
        evening = Window("2025-01-10", "PM", "2025-01-20", "PM")
        assert find_overlapping_configs([_config("a", morning), _config("b", evening)]) == []

    def test_unwindowed_configs_ignored(self):
        assert find_overlapping_configs([_config("a"), _config("b")]) == []
