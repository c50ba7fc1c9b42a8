"""
Data Transfer Objects for the dairy kernel.

Responsibility:
    Immutable value shapes exchanged between the engines, the services and
    the persistence adapters: rate configurations, farmers, slabs, bill
    period definitions, raw collection input and its valuation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Engines consume these types; services build them from ORM rows via
    ``dairy_kernel.models.mapping``; ``dairy_kernel.domain.records``
    converts them to and from camelCase plain records.

Invariants enforced:
    - Every DTO is a frozen dataclass.
    - All numeric fields are ``Decimal`` (see ``values.safe_decimal``).
    - Dates are ``YYYY-MM-DD`` strings so that lexical comparison orders
      them correctly; shifts are free strings interpreted by
      ``dairy_engines.interval.shift_ordinal``.
    - The seven pricing categories are addressed through the ``Category``
      enum, never through concatenated field names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from dairy_kernel.domain.values import ZERO


class Shift(str, Enum):
    """Daily collection session.  AM sorts before PM."""

    AM = "AM"
    PM = "PM"


class PurchaseMethod(str, Enum):
    """Valuation algorithm selected by a rate configuration."""

    FORMULA = "formula"
    KG_FAT = "kg_fat"
    LITER = "liter"


class RateBasis(str, Enum):
    """Unit a category or slab rate is multiplied by."""

    KG_FAT = "kg_fat"
    KG_SNF = "kg_snf"
    LITER = "liter"
    SHIFT = "shift"  # cartage only: flat amount per shift


class Category(str, Enum):
    """Incentive, deduction and add-on categories with override windows.

    The value is the record field prefix (``fatIncRate``, ``fatIncFromDate``...).
    """

    FAT_INC = "fatInc"
    FAT_DED = "fatDed"
    SNF_INC = "snfInc"
    SNF_DED = "snfDed"
    QTY_INC = "qtyInc"
    EXTRA = "extra"
    CARTAGE = "cartage"


class SlabKind(str, Enum):
    """Slab lists carried by rate configs and farmers (value = record key)."""

    FAT_INCENTIVE = "fatIncentiveSlabs"
    FAT_DEDUCTION = "fatDeductionSlabs"
    SNF_INCENTIVE = "snfIncentiveSlabs"
    SNF_DEDUCTION = "snfDeductionSlabs"
    QTY_INCENTIVE = "qtyIncentiveSlabs"
    BONUS = "bonusSlabs"


class AdjustmentType(str, Enum):
    """Direction of a manual bill-period adjustment."""

    ADDITION = "Addition"
    DEDUCTION = "Deduction"


# ---------------------------------------------------------------------------
# Windows, categories and slabs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Window:
    """
    Date+shift validity window.

    A window missing either bound date is unrestricted (always active).
    """

    from_date: str | None = None
    from_shift: str | None = None
    to_date: str | None = None
    to_shift: str | None = None

    @property
    def is_bounded(self) -> bool:
        return bool(self.from_date) and bool(self.to_date)


UNBOUNDED = Window()


@dataclass(frozen=True)
class CategorySetting:
    """Flat rate, basis, threshold and window for one category."""

    rate: Decimal = ZERO
    method: str | None = None
    threshold: Decimal = ZERO
    window: Window = UNBOUNDED


EMPTY_SETTING = CategorySetting()


@dataclass(frozen=True)
class Slab:
    """
    Range-bound rate override.

    ``min_value``/``max_value`` of None never match (an incomplete slab is
    inert rather than unbounded).
    """

    min_value: Decimal | None
    max_value: Decimal | None
    rate: Decimal = ZERO
    method: str | None = None
    window: Window = UNBOUNDED

    def contains(self, value: Decimal) -> bool:
        if self.min_value is None or self.max_value is None:
            return False
        return self.min_value <= value <= self.max_value


@dataclass(frozen=True)
class BaseRate:
    """One row of a liter-method rate chart."""

    fat: Decimal
    snf: Decimal
    rate: Decimal


# ---------------------------------------------------------------------------
# Master data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RateConfig:
    """
    Time-boxed pricing policy.

    Contract:
        ``window`` is the config's own validity window used by the config
        selector.  ``categories`` and ``slabs`` are sparse: a missing entry
        behaves like an all-zero setting or an empty slab list.
    """

    id: str = ""
    name: str = ""
    window: Window = UNBOUNDED
    purchase_method: str = ""
    standard_rate: Decimal = ZERO
    standard_fat: Decimal = ZERO
    standard_snf: Decimal = ZERO
    cartage_per_liter: Decimal = ZERO
    fixed_cartage_per_shift: Decimal = ZERO
    categories: Mapping[Category, CategorySetting] = field(default_factory=dict)
    slabs: Mapping[SlabKind, tuple[Slab, ...]] = field(default_factory=dict)
    base_rates: tuple[BaseRate, ...] = ()

    @classmethod
    def empty(cls) -> RateConfig:
        """Config used when nothing applies: every rate is zero."""
        return cls()

    @property
    def has_window(self) -> bool:
        return bool(self.window.from_date)

    def setting(self, category: Category) -> CategorySetting:
        return self.categories.get(category, EMPTY_SETTING)

    def slab_list(self, kind: SlabKind) -> tuple[Slab, ...]:
        return tuple(self.slabs.get(kind, ()))


@dataclass(frozen=True)
class Farmer:
    """
    Milk supplier with optional per-farmer pricing overrides.

    The override shape mirrors ``RateConfig``: categories with their own
    windows, and slab lists.  Only ``bonusSlabs`` is consulted from the
    farmer; the other farmer slab lists are carried for lock checks.
    """

    id: str
    code: str = ""
    name: str = ""
    mobile: str = ""
    village: str = ""
    farmer_category: str = ""
    branch_id: str = ""
    route_id: str = ""
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""
    categories: Mapping[Category, CategorySetting] = field(default_factory=dict)
    slabs: Mapping[SlabKind, tuple[Slab, ...]] = field(default_factory=dict)

    def setting(self, category: Category) -> CategorySetting | None:
        return self.categories.get(category)

    def slab_list(self, kind: SlabKind) -> tuple[Slab, ...]:
        return tuple(self.slabs.get(kind, ()))


@dataclass(frozen=True)
class BillPeriodDef:
    """Recurring day-of-month range.  ``end_day == 31`` means month end."""

    id: str
    name: str = ""
    start_day: int = 1
    end_day: int = 31


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CollectionInput:
    """
    Raw, user-supplied fields of one milk collection.

    ``qty`` (liters), ``kg_fat`` and ``kg_snf`` are optional measured
    values; when absent they are derived by the valuator.
    """

    date: str
    shift: str
    farmer_id: str
    qty_kg: Decimal = ZERO
    fat: Decimal = ZERO
    snf: Decimal = ZERO
    qty: Decimal | None = None
    kg_fat: Decimal | None = None
    kg_snf: Decimal | None = None
    clr: Decimal | None = None


@dataclass(frozen=True)
class CollectionValuation:
    """Derived fields of a collection, rounded for storage."""

    qty_kg: Decimal
    qty: Decimal
    fat: Decimal
    snf: Decimal
    kg_fat: Decimal
    kg_snf: Decimal
    rate: Decimal
    amount: Decimal
    milk_value: Decimal
    fat_incentive: Decimal
    fat_deduction: Decimal
    snf_incentive: Decimal
    snf_deduction: Decimal
    extra_rate_amount: Decimal
    cartage_amount: Decimal
    qty_incentive_amount: Decimal
    bonus_amount: Decimal


@dataclass(frozen=True)
class CollectionRecord:
    """A stored collection: identity, raw input and its valuation."""

    id: str
    entry: CollectionInput
    valuation: CollectionValuation


@dataclass(frozen=True)
class Adjustment:
    """Manual addition or deduction for a farmer in one bill period."""

    id: str
    farmer_id: str
    bill_period: str
    head_name: str
    type: AdjustmentType
    amount: Decimal = ZERO
    description: str = ""


# ---------------------------------------------------------------------------
# Validation and bulk results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional
        field name, and optional details dict.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of a bulk import: partial application is accepted."""

    imported: int = 0
    skipped: int = 0
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class RecalculationSummary:
    """Outcome of a recalculation sweep."""

    updated: int = 0
    errors: tuple[str, ...] = ()
