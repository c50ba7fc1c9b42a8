"""
dairy_engines.slabs -- Slab (range-bound rate) resolution.

A slab replaces the flat rate and method of its category whenever the
measured value falls inside ``[min, max]`` (inclusive) and the slab's own
window is active.  The first qualifying slab in list order wins.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from dairy_engines.interval import window_active
from dairy_kernel.domain.dtos import Farmer, RateConfig, Slab, SlabKind


def resolve_slab(
    value: Decimal,
    slabs: Sequence[Slab],
    date: str,
    shift: str,
) -> Slab | None:
    for slab in slabs:
        if slab.contains(value) and window_active(slab.window, date, shift):
            return slab
    return None


def bonus_slabs(config: RateConfig, farmer: Farmer | None) -> tuple[Slab, ...]:
    """Farmer bonus slabs replace the config's wholesale when non-empty."""
    if farmer is not None:
        own = farmer.slab_list(SlabKind.BONUS)
        if own:
            return own
    return config.slab_list(SlabKind.BONUS)
