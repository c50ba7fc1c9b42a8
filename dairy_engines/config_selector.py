"""
dairy_engines.config_selector -- Rate configuration lookup by date+shift.

Responsibility:
    Pick the single RateConfig that prices a collection made on a given
    date and shift, and report configs whose windows overlap so that
    administrators can clean them up.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - First match wins, in the order the configs are supplied.  Overlap is
      permitted and never resolved by anything other than order.
    - Configs without a ``fromDate`` never match by window; the first such
      config is the fallback when nothing matches.
    - With no match and no fallback the result is ``RateConfig.empty()``:
      valuation proceeds with every rate at zero.

Failure modes:
    None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from dairy_engines.interval import shift_ordinal, window_active
from dairy_engines.tracer import traced_engine
from dairy_kernel.domain.dtos import RateConfig
from dairy_kernel.logging_config import get_logger

logger = get_logger("engines.config_selector")


@traced_engine("config_selector", "1.0", fingerprint_fields=("date", "shift"))
def select_config(date: str, shift: str, configs: Sequence[RateConfig]) -> RateConfig:
    fallback: RateConfig | None = None
    for config in configs:
        if not config.has_window:
            if fallback is None:
                fallback = config
            continue
        if window_active(config.window, date, shift):
            return config
    if fallback is not None:
        return fallback
    logger.debug("no_rate_config_applicable", extra={"date": date, "shift": shift})
    return RateConfig.empty()


@dataclass(frozen=True)
class ConfigOverlap:
    """Two configs whose validity windows share at least one shift."""

    first_id: str
    second_id: str


def _instant(day: str, shift: str | None) -> tuple[str, int]:
    return day, shift_ordinal(shift)


def find_overlapping_configs(configs: Sequence[RateConfig]) -> list[ConfigOverlap]:
    """Pairs of bounded configs whose windows intersect, in input order."""
    bounded = [c for c in configs if c.window.is_bounded]
    overlaps: list[ConfigOverlap] = []
    for i, left in enumerate(bounded):
        left_start = _instant(left.window.from_date, left.window.from_shift)
        left_end = _instant(left.window.to_date, left.window.to_shift)
        for right in bounded[i + 1:]:
            right_start = _instant(right.window.from_date, right.window.from_shift)
            right_end = _instant(right.window.to_date, right.window.to_shift)
            if left_start <= right_end and right_start <= left_end:
                overlaps.append(ConfigOverlap(left.id, right.id))
    return overlaps
