"""
Module: dairy_kernel.selectors.master_data_selector
Responsibility: SqlMasterData -- the MasterDataSource adapter over the ORM
    tables.  Supplies rate configs, farmers, bill-period definitions and the
    lock set to services and to the valuator.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Rate configs and bill periods are returned in (position, id) order:
      both are consumed first-match-wins.
    - Returns frozen DTOs; an unknown farmer id yields None, not an error.
"""

from sqlalchemy import select

from dairy_kernel.domain.dtos import BillPeriodDef, Farmer, RateConfig
from dairy_kernel.models.bill_period import BillPeriodModel, LockedPeriodModel
from dairy_kernel.models.farmer import FarmerModel
from dairy_kernel.models.mapping import (
    bill_period_to_dto,
    farmer_to_dto,
    rate_config_to_dto,
)
from dairy_kernel.models.rate_config import RateConfigModel
from dairy_kernel.selectors.base import BaseSelector


class SqlMasterData(BaseSelector[RateConfigModel]):
    """MasterDataSource backed by the caller's session."""

    def rate_configs(self) -> tuple[RateConfig, ...]:
        rows = self.session.execute(
            select(RateConfigModel).order_by(RateConfigModel.position, RateConfigModel.id)
        ).scalars()
        return tuple(rate_config_to_dto(row) for row in rows)

    def farmer(self, farmer_id: str) -> Farmer | None:
        if not farmer_id:
            return None
        row = self.session.get(FarmerModel, farmer_id)
        return None if row is None else farmer_to_dto(row)

    def farmers(self) -> tuple[Farmer, ...]:
        rows = self.session.execute(
            select(FarmerModel).order_by(FarmerModel.code, FarmerModel.id)
        ).scalars()
        return tuple(farmer_to_dto(row) for row in rows)

    def bill_periods(self) -> tuple[BillPeriodDef, ...]:
        rows = self.session.execute(
            select(BillPeriodModel).order_by(BillPeriodModel.position, BillPeriodModel.id)
        ).scalars()
        return tuple(bill_period_to_dto(row) for row in rows)

    def locked_period_ids(self) -> frozenset[str]:
        ids = self.session.execute(select(LockedPeriodModel.period_id)).scalars()
        return frozenset(ids)
