"""ORM models for the dairy kernel."""

from dairy_kernel.models.adjustment import AdjustmentModel
from dairy_kernel.models.bill_period import BillPeriodModel, LockedPeriodModel
from dairy_kernel.models.collection import CollectionModel
from dairy_kernel.models.farmer import FarmerModel
from dairy_kernel.models.rate_config import RateConfigModel

__all__ = [
    "AdjustmentModel",
    "BillPeriodModel",
    "CollectionModel",
    "FarmerModel",
    "LockedPeriodModel",
    "RateConfigModel",
]
