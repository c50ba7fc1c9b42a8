"""
Module: dairy_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for the
    kernel services, selectors and scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import dairy_kernel.domain and dairy_kernel.logging_config
    (and sibling engine modules).  MUST NOT import dairy_kernel services,
    selectors, models or db.

Invariants enforced:
    - Purity: engines never read the clock, the database or module-level
      mutable state.  Configs, farmers and lock sets are parameters.
    - Decimal-only arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Valuation, config selection and farmer bills are traced via
    ``@traced_engine`` (see ``dairy_engines.tracer``), emitting
    DAIRY_ENGINE_TRACE debug records with an input fingerprint.

Usage:
    from dairy_engines import select_config, valuate_collection
    from dairy_engines import LockRegistry, resolve_period
"""

from dairy_engines.bill_period import (
    PeriodKey,
    financial_year,
    parse_period_id,
    period_date_range,
    period_name,
    period_range_label,
    resolve_period,
)
from dairy_engines.config_selector import (
    ConfigOverlap,
    find_overlapping_configs,
    select_config,
)
from dairy_engines.farmer_bill import (
    BillSummaryRow,
    BillTotals,
    FarmerBill,
    build_farmer_bill,
    summarize_bills,
)
from dairy_engines.interval import (
    in_shift_range,
    is_window_active,
    shift_ordinal,
    window_active,
)
from dairy_engines.locks import (
    DEFAULT_MAX_LOCK_SCAN_DAYS,
    LockRegistry,
    config_windows,
    override_windows,
)
from dairy_engines.overrides import Effective, resolve_effective
from dairy_engines.slabs import bonus_slabs, resolve_slab
from dairy_engines.valuation import (
    snf_from_clr,
    valuate_collection,
    valuate_from_source,
)

__all__ = [
    "BillSummaryRow",
    "BillTotals",
    "ConfigOverlap",
    "DEFAULT_MAX_LOCK_SCAN_DAYS",
    "Effective",
    "FarmerBill",
    "LockRegistry",
    "PeriodKey",
    "bonus_slabs",
    "build_farmer_bill",
    "config_windows",
    "financial_year",
    "find_overlapping_configs",
    "in_shift_range",
    "is_window_active",
    "override_windows",
    "parse_period_id",
    "period_date_range",
    "period_name",
    "period_range_label",
    "resolve_effective",
    "resolve_period",
    "resolve_slab",
    "select_config",
    "shift_ordinal",
    "snf_from_clr",
    "summarize_bills",
    "valuate_collection",
    "valuate_from_source",
    "window_active",
]
