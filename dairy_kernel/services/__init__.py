"""
Module: dairy_kernel.services
Responsibility: Public write surface of the kernel.  Every service takes
    the caller's Session, checks bill-period locks before mutating and
    flushes without committing.
"""

from dairy_kernel.services.adjustment_service import AdjustmentService
from dairy_kernel.services.bill_period_service import BillPeriodService
from dairy_kernel.services.collection_service import CollectionService
from dairy_kernel.services.farmer_service import FarmerService
from dairy_kernel.services.lock_service import LockService
from dairy_kernel.services.rate_config_service import RateConfigService

__all__ = [
    "AdjustmentService",
    "BillPeriodService",
    "CollectionService",
    "FarmerService",
    "LockService",
    "RateConfigService",
]
