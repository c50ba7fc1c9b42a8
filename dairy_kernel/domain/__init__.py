"""
Pure domain layer.

This module contains pure data transfer objects and value coercion
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from dairy_kernel.domain.dtos import (
    UNBOUNDED,
    Adjustment,
    AdjustmentType,
    BaseRate,
    BillPeriodDef,
    Category,
    CategorySetting,
    CollectionInput,
    CollectionRecord,
    CollectionValuation,
    Farmer,
    ImportSummary,
    PurchaseMethod,
    RateBasis,
    RateConfig,
    RecalculationSummary,
    Shift,
    Slab,
    SlabKind,
    ValidationError,
    Window,
)
from dairy_kernel.domain.master_data import InMemoryMasterData, MasterDataSource
from dairy_kernel.domain.values import (
    MILK_DENSITY,
    ZERO,
    optional_decimal,
    quantize,
    round_money,
    safe_decimal,
)

__all__ = [
    "UNBOUNDED",
    "Adjustment",
    "AdjustmentType",
    "BaseRate",
    "BillPeriodDef",
    "Category",
    "CategorySetting",
    "CollectionInput",
    "CollectionRecord",
    "CollectionValuation",
    "Farmer",
    "ImportSummary",
    "InMemoryMasterData",
    "MILK_DENSITY",
    "MasterDataSource",
    "PurchaseMethod",
    "RateBasis",
    "RateConfig",
    "RecalculationSummary",
    "Shift",
    "Slab",
    "SlabKind",
    "ValidationError",
    "Window",
    "ZERO",
    "optional_decimal",
    "quantize",
    "round_money",
    "safe_decimal",
]
