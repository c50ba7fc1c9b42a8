"""
dairy_engines.overrides -- Farmer-over-config precedence per category.

Responsibility:
    Produce the effective (value, method, threshold) of one pricing
    category for a collection instant, choosing between the farmer's own
    override and the rate configuration.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Called by the collection valuator once per category before slab
    overrides are applied.

Invariants enforced:
    - Farmer wins only when the farmer exists, its category window is
      active and its rate is non-zero.  A zero farmer rate means "not
      overridden", never "override to zero".
    - Otherwise the config applies when its category window is active,
      even if its rate is zero.
    - Otherwise the category is inert: ``Effective(0, "kg_fat", 0)``.
    - The same rule holds for all seven categories.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from dairy_engines.interval import window_active
from dairy_kernel.domain.dtos import Category, CategorySetting, Farmer, RateConfig, Slab
from dairy_kernel.domain.values import ZERO

INERT_METHOD = "kg_fat"


@dataclass(frozen=True)
class Effective:
    """Resolved rate, basis and threshold for one category."""

    value: Decimal = ZERO
    method: str | None = INERT_METHOD
    threshold: Decimal = ZERO

    def with_slab(self, slab: Slab, default_method: str) -> Effective:
        return replace(self, value=slab.rate, method=slab.method or default_method)


INERT = Effective()


def _from_setting(setting: CategorySetting) -> Effective:
    return Effective(value=setting.rate, method=setting.method, threshold=setting.threshold)


def resolve_effective(
    category: Category,
    config: RateConfig,
    farmer: Farmer | None,
    date: str,
    shift: str,
) -> Effective:
    if farmer is not None:
        own = farmer.setting(category)
        if own is not None and own.rate != ZERO and window_active(own.window, date, shift):
            return _from_setting(own)
    setting = config.setting(category)
    if window_active(setting.window, date, shift):
        return _from_setting(setting)
    return INERT
