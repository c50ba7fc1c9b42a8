"""
AdjustmentService -- per-farmer additions and deductions.

Responsibility:
    Maintain the manual lines (loans, feed, bonus payouts, ...) added to
    or deducted from a farmer's bill for one bill period.

Architecture position:
    Kernel > Services.  Adjustments reference a bill period by period id
    (``"{monthIndex0}-{year}-{definitionId}"``) rather than by date, so the
    lock check is a direct membership test.

Invariants enforced:
    - Create, update and delete are refused when the stored or the target
      period id is locked.
    - ``type`` is ``Deduction`` (case-insensitive) or else ``Addition``.

Failure modes:
    - LockedPeriodError, AdjustmentNotFoundError.
"""

from typing import Any, Mapping

from sqlalchemy import select

from dairy_kernel.domain.dtos import Adjustment
from dairy_kernel.domain.records import adjustment_from_record
from dairy_kernel.exceptions import AdjustmentNotFoundError
from dairy_kernel.logging_config import LogContext, get_logger
from dairy_kernel.models.adjustment import AdjustmentModel
from dairy_kernel.models.mapping import adjustment_to_dto, apply_adjustment
from dairy_kernel.services.base import BaseService
from dairy_kernel.services.lock_service import LockService

logger = get_logger("services.adjustment")

_TARGET = "adjustment"


def _as_record(adjustment: Adjustment) -> dict[str, Any]:
    return {
        "id": adjustment.id,
        "farmerId": adjustment.farmer_id,
        "billPeriod": adjustment.bill_period,
        "headName": adjustment.head_name,
        "type": adjustment.type.value,
        "amount": adjustment.amount,
        "description": adjustment.description,
    }


class AdjustmentService(BaseService[AdjustmentModel]):
    """Write service for bill adjustments."""

    def __init__(self, session, locks: LockService | None = None):
        super().__init__(session)
        self._locks = locks or LockService(session)

    def create(self, record: Mapping[str, Any]) -> Adjustment:
        adjustment = adjustment_from_record(record)
        self._locks.assert_period_unlocked(adjustment.bill_period, _TARGET, "create")

        model = AdjustmentModel()
        if adjustment.id:
            model.id = adjustment.id
        apply_adjustment(model, adjustment)
        self.session.add(model)
        self.session.flush()
        self._log("adjustment_created", model)
        return adjustment_to_dto(model)

    def update(self, adjustment_id: str, changes: Mapping[str, Any]) -> Adjustment:
        model = self._get(adjustment_id)
        self._locks.assert_period_unlocked(model.bill_period, _TARGET, "update")

        merged = {**_as_record(adjustment_to_dto(model)), **changes}
        if "defaultValue" in changes and "amount" not in changes:
            merged.pop("amount")
        adjustment = adjustment_from_record(merged)
        if adjustment.bill_period != model.bill_period:
            self._locks.assert_period_unlocked(adjustment.bill_period, _TARGET, "update")

        apply_adjustment(model, adjustment)
        self.session.flush()
        self._log("adjustment_updated", model)
        return adjustment_to_dto(model)

    def delete(self, adjustment_id: str) -> None:
        model = self._get(adjustment_id)
        self._locks.assert_period_unlocked(model.bill_period, _TARGET, "delete")
        self.session.delete(model)
        self.session.flush()
        self._log("adjustment_deleted", model)

    def list_for_period(self, period_id: str, farmer_id: str | None = None) -> list[Adjustment]:
        query = select(AdjustmentModel).where(AdjustmentModel.bill_period == period_id)
        if farmer_id:
            query = query.where(AdjustmentModel.farmer_id == farmer_id)
        rows = self.session.execute(query.order_by(AdjustmentModel.id)).scalars()
        return [adjustment_to_dto(row) for row in rows]

    @staticmethod
    def _log(event: str, model: AdjustmentModel) -> None:
        with LogContext.bind(farmer_id=model.farmer_id, period_id=model.bill_period):
            logger.info(
                event,
                extra={"adjustment_id": model.id, "type": model.type, "amount": model.amount},
            )

    def _get(self, adjustment_id: str) -> AdjustmentModel:
        model = self.session.get(AdjustmentModel, adjustment_id)
        if model is None:
            raise AdjustmentNotFoundError(adjustment_id)
        return model
