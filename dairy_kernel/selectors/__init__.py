"""
Module: dairy_kernel.selectors
Responsibility: Read-only query surface returning frozen DTOs.
"""

from dairy_kernel.selectors.collection_selector import CollectionSelector
from dairy_kernel.selectors.farmer_bill_selector import FarmerBillSelector
from dairy_kernel.selectors.master_data_selector import SqlMasterData

__all__ = [
    "CollectionSelector",
    "FarmerBillSelector",
    "SqlMasterData",
]
