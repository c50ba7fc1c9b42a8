"""
BillPeriodService -- bill-period definitions.

Bill periods are recurring day-of-month ranges ("1st" = 1..15,
"2nd" = 16..31).  Their order is significant: a date resolves to the first
definition whose range contains its day, so new definitions are appended.
An ``endDay`` of 31 means "to the end of the month".
"""

from typing import Any, Mapping

from sqlalchemy import func, select

from dairy_kernel.domain.dtos import BillPeriodDef, ValidationError
from dairy_kernel.domain.records import bill_period_from_record
from dairy_kernel.exceptions import ValidationFailedError
from dairy_kernel.logging_config import get_logger
from dairy_kernel.models.bill_period import BillPeriodModel
from dairy_kernel.models.mapping import bill_period_to_dto
from dairy_kernel.services.base import BaseService

logger = get_logger("services.bill_period")


def _validate(period: BillPeriodDef) -> list[ValidationError]:
    errors = []
    for name, day in (("startDay", period.start_day), ("endDay", period.end_day)):
        if not 1 <= day <= 31:
            errors.append(
                ValidationError(
                    code="DAY_OUT_OF_RANGE",
                    message=f"{name} must be between 1 and 31",
                    field=name,
                    details={"value": day},
                )
            )
    return errors


class BillPeriodService(BaseService[BillPeriodModel]):
    """Write service for bill-period definitions."""

    def create(self, record: Mapping[str, Any]) -> BillPeriodDef:
        period = bill_period_from_record(record)
        errors = _validate(period)
        if errors:
            raise ValidationFailedError("bill_period", errors)

        current = self.session.execute(select(func.max(BillPeriodModel.position))).scalar()
        model = BillPeriodModel(
            name=period.name,
            start_day=period.start_day,
            end_day=period.end_day,
            position=0 if current is None else current + 1,
        )
        if period.id:
            model.id = period.id
        self.session.add(model)
        self.session.flush()
        logger.info(
            "bill_period_created",
            extra={
                "period_def_id": model.id,
                "start_day": model.start_day,
                "end_day": model.end_day,
            },
        )
        return bill_period_to_dto(model)

    def list(self) -> list[BillPeriodDef]:
        rows = self.session.execute(
            select(BillPeriodModel).order_by(BillPeriodModel.position, BillPeriodModel.id)
        ).scalars()
        return [bill_period_to_dto(row) for row in rows]
