"""
Module: dairy_kernel.selectors.farmer_bill_selector
Responsibility: Load a bill period's collections and adjustments and hand
    them to ``dairy_engines.farmer_bill`` for statement building.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Read-only; figures come from the stored valuations, not a fresh
      valuation (run ``CollectionService.recalculate`` first to re-price).
    - Summary rows are filtered by branch and route before aggregation.
"""

from sqlalchemy import select

from dairy_engines.bill_period import period_name, period_range_label
from dairy_engines.farmer_bill import (
    BillSummaryRow,
    FarmerBill,
    build_farmer_bill,
    summarize_bills,
)
from dairy_kernel.models.adjustment import AdjustmentModel
from dairy_kernel.models.mapping import adjustment_to_dto
from dairy_kernel.selectors.base import BaseSelector
from dairy_kernel.selectors.collection_selector import CollectionSelector
from dairy_kernel.selectors.master_data_selector import SqlMasterData


class FarmerBillSelector(BaseSelector[AdjustmentModel]):
    """Farmer statements and period summaries."""

    def __init__(self, session):
        super().__init__(session)
        self._master_data = SqlMasterData(session)
        self._collections = CollectionSelector(session)

    def bill(self, farmer_id: str, period_id: str) -> FarmerBill | None:
        return build_farmer_bill(
            farmer_id,
            period_id,
            self._collections.for_period(period_id, farmer_id),
            self._adjustments(period_id, farmer_id),
            self._master_data.bill_periods(),
        )

    def summary(
        self,
        period_id: str,
        branch_id: str | None = None,
        route_id: str | None = None,
    ) -> list[BillSummaryRow]:
        farmers = [
            f for f in self._master_data.farmers()
            if (not branch_id or f.branch_id == branch_id)
            and (not route_id or f.route_id == route_id)
        ]
        return summarize_bills(
            farmers,
            period_id,
            self._collections.for_period(period_id),
            self._adjustments(period_id),
            self._master_data.bill_periods(),
        )

    def period_title(self, period_id: str) -> str:
        """``"Jun-25 1st (01-Jun-25 AM to 15-Jun-25 PM)"``."""
        defs = self._master_data.bill_periods()
        return f"{period_name(period_id, defs)} ({period_range_label(period_id, defs)})"

    def _adjustments(self, period_id: str, farmer_id: str | None = None):
        query = select(AdjustmentModel).where(AdjustmentModel.bill_period == period_id)
        if farmer_id:
            query = query.where(AdjustmentModel.farmer_id == farmer_id)
        return [adjustment_to_dto(row) for row in self.session.execute(query).scalars()]
