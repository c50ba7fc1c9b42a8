"""
FarmerService -- farmer master maintenance.

Responsibility:
    Create, update, delete and bulk-import farmers.  A farmer carries
    dated overrides (category windows and slab windows); edits that would
    change pricing inside a locked bill period are refused.

Architecture position:
    Kernel > Services.

Invariants enforced:
    - A write is refused when any bounded override window of the stored
      farmer, or of the farmer as it would be written, overlaps a locked
      period.
    - Bulk import never overwrites: a row whose code already exists (in the
      table or earlier in the same batch) is skipped, as is a row without
      a code or a name.

Failure modes:
    - LockedRangeError, FarmerNotFoundError.
"""

from typing import Any, Iterable, Mapping

from sqlalchemy import select

from dairy_engines.locks import override_windows
from dairy_kernel.domain.dtos import Farmer, ImportSummary
from dairy_kernel.domain.records import farmer_from_record, farmer_to_record
from dairy_kernel.exceptions import FarmerNotFoundError
from dairy_kernel.logging_config import LogContext, get_logger
from dairy_kernel.models.farmer import FarmerModel
from dairy_kernel.models.mapping import apply_farmer, farmer_to_dto
from dairy_kernel.services.base import BaseService
from dairy_kernel.services.lock_service import LockService

logger = get_logger("services.farmer")

_TARGET = "farmer"


class FarmerService(BaseService[FarmerModel]):
    """Write service for farmers and their pricing overrides."""

    def __init__(self, session, locks: LockService | None = None):
        super().__init__(session)
        self._locks = locks or LockService(session)

    def create(self, record: Mapping[str, Any]) -> Farmer:
        farmer = farmer_from_record(record)
        self._locks.assert_windows_unlocked(override_windows(farmer), _TARGET, "create")
        model = self._insert(farmer)
        with LogContext.bind(farmer_id=model.id):
            logger.info("farmer_created", extra={"code": model.code})
        return farmer_to_dto(model)

    def update(self, farmer_id: str, changes: Mapping[str, Any]) -> Farmer:
        model = self._get(farmer_id)
        existing = farmer_to_dto(model)
        self._locks.assert_windows_unlocked(override_windows(existing), _TARGET, "update")

        farmer = farmer_from_record({**farmer_to_record(existing), **changes})
        self._locks.assert_windows_unlocked(override_windows(farmer), _TARGET, "update")

        apply_farmer(model, farmer)
        self.session.flush()
        with LogContext.bind(farmer_id=farmer_id):
            logger.info("farmer_updated", extra={"code": model.code})
        return farmer_to_dto(model)

    def delete(self, farmer_id: str) -> None:
        model = self._get(farmer_id)
        self._locks.assert_windows_unlocked(
            override_windows(farmer_to_dto(model)), _TARGET, "delete"
        )
        self.session.delete(model)
        self.session.flush()
        with LogContext.bind(farmer_id=farmer_id):
            logger.info("farmer_deleted")

    def bulk_import(self, rows: Iterable[Mapping[str, Any]]) -> ImportSummary:
        known_codes = set(self.session.execute(select(FarmerModel.code)).scalars())
        registry = self._locks.registry()
        imported = skipped = 0
        errors: list[str] = []
        for index, record in enumerate(rows, start=1):
            farmer = farmer_from_record(record)
            if farmer.code in known_codes or not (farmer.code and farmer.name):
                skipped += 1
                continue
            try:
                locked = registry.any_window_locked(override_windows(farmer))
            except ValueError as exc:
                errors.append(f"Row {index}: {exc}")
                skipped += 1
                continue
            if locked:
                errors.append(f"Row {index}: Settings affect locked periods")
                skipped += 1
                continue
            self._insert(farmer)
            known_codes.add(farmer.code)
            imported += 1

        logger.info(
            "farmers_imported",
            extra={"imported": imported, "skipped": skipped},
        )
        return ImportSummary(imported=imported, skipped=skipped, errors=tuple(errors))

    def _insert(self, farmer: Farmer) -> FarmerModel:
        model = FarmerModel()
        if farmer.id:
            model.id = farmer.id
        apply_farmer(model, farmer)
        self.session.add(model)
        self.session.flush()
        return model

    def _get(self, farmer_id: str) -> FarmerModel:
        model = self.session.get(FarmerModel, farmer_id)
        if model is None:
            raise FarmerNotFoundError(farmer_id)
        return model
