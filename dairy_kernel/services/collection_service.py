"""
CollectionService -- milk collection writes with lock enforcement.

Responsibility:
    Create, update, delete, bulk-import and recalculate milk collections.
    Every write resolves the entry's bill period, refuses locked periods,
    values the entry with the pure valuator, and persists the raw input
    next to the derived figures.

Architecture position:
    Kernel > Services -- imperative shell.
    Reads master data through a ``MasterDataSource`` (SQL by default),
    consults ``LockService`` before mutating, calls
    ``dairy_engines.valuation``.

Invariants enforced:
    - Derived fields are never taken from the caller; they always come from
      ``valuate_collection``.
    - An update re-values the merged (stored raw input + changes) entry and
      is refused when either the stored or the new date is locked.
    - Bulk operations run row by row: one failing row is reported and the
      rest still apply.
    - Flush-only: never commits.

Failure modes:
    - LockedPeriodError: single-entry write into a locked bill period.
    - ValidationFailedError: create without date, shift, farmer, kg or fat.
    - CollectionNotFoundError: update/delete of an unknown id.
    - ValueError: delete_by_date without a date.
"""

from typing import Any, Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from dairy_engines.config_selector import select_config
from dairy_engines.interval import in_shift_range
from dairy_engines.locks import LockRegistry
from dairy_engines.valuation import snf_from_clr, valuate_collection
from dairy_kernel.domain.dtos import (
    CollectionInput,
    CollectionRecord,
    CollectionValuation,
    Farmer,
    ImportSummary,
    RecalculationSummary,
    ValidationError,
)
from dairy_kernel.domain.master_data import MasterDataSource
from dairy_kernel.domain.records import (
    collection_input_from_record,
    collection_input_to_record,
    missing_collection_fields,
    to_date_str,
)
from dairy_kernel.exceptions import (
    CollectionNotFoundError,
    DairyKernelError,
    LockedPeriodError,
    ValidationFailedError,
)
from dairy_kernel.logging_config import LogContext, get_logger
from dairy_kernel.models.collection import CollectionModel
from dairy_kernel.models.mapping import (
    apply_collection,
    apply_valuation,
    collection_input_of,
    collection_to_record,
    valuation_of,
)
from dairy_kernel.selectors.master_data_selector import SqlMasterData
from dairy_kernel.services.base import BaseService
from dairy_kernel.services.lock_service import LockService

logger = get_logger("services.collection")

_TARGET = "collection"


def entry_from_record(record: Mapping[str, Any]) -> CollectionInput:
    """Parse a raw record, deriving SNF from CLR when SNF is not given."""
    entry = collection_input_from_record(record)
    snf_given = record.get("snf") not in (None, "")
    if not snf_given and entry.clr is not None:
        return CollectionInput(
            date=entry.date,
            shift=entry.shift,
            farmer_id=entry.farmer_id,
            qty_kg=entry.qty_kg,
            fat=entry.fat,
            snf=snf_from_clr(entry.fat, entry.clr),
            qty=entry.qty,
            kg_fat=entry.kg_fat,
            kg_snf=entry.kg_snf,
            clr=entry.clr,
        )
    return entry


def _missing_fields_error(missing: list[str]) -> ValidationError:
    return ValidationError(
        code="MISSING_REQUIRED_FIELDS",
        message="Missing required fields",
        details={"fields": missing},
    )


class CollectionService(BaseService[CollectionModel]):
    """
    Service for milk collection entries.

    Contract:
        Accepts camelCase records (as entered or imported) and returns
        frozen ``CollectionRecord`` DTOs.

    Non-goals:
        - Does NOT maintain farmers or rate configs.
        - Does NOT enforce referential integrity on ``farmerId``.
    """

    def __init__(
        self,
        session: Session,
        master_data: MasterDataSource | None = None,
        locks: LockService | None = None,
    ):
        super().__init__(session)
        self._master_data = master_data or SqlMasterData(session)
        self._locks = locks or LockService(session)

    # -- single-entry writes ------------------------------------------------

    def create(self, record: Mapping[str, Any]) -> CollectionRecord:
        missing = missing_collection_fields(record)
        if missing:
            raise ValidationFailedError(_TARGET, [_missing_fields_error(missing)])
        entry = entry_from_record(record)
        self._locks.assert_date_unlocked(entry.date, _TARGET, "create")

        valuation = self._valuate(entry)
        model = CollectionModel()
        if record.get("id"):
            model.id = str(record["id"])
        apply_collection(model, entry, valuation)
        self.session.add(model)
        self.session.flush()

        with LogContext.bind(collection_id=model.id, farmer_id=entry.farmer_id):
            logger.info(
                "collection_created",
                extra={"date": entry.date, "shift": entry.shift, "amount": valuation.amount},
            )
        return collection_to_record(model)

    def update(self, collection_id: str, changes: Mapping[str, Any]) -> CollectionRecord:
        model = self._get(collection_id)
        self._locks.assert_date_unlocked(model.date, _TARGET, "update")

        merged = {**collection_input_to_record(collection_input_of(model)), **changes}
        if "clr" in changes and "snf" not in changes:
            merged.pop("snf", None)
        entry = entry_from_record(merged)
        if entry.date != model.date:
            self._locks.assert_date_unlocked(entry.date, _TARGET, "update")

        valuation = self._valuate(entry)
        apply_collection(model, entry, valuation)
        self.session.flush()

        with LogContext.bind(collection_id=model.id, farmer_id=entry.farmer_id):
            logger.info(
                "collection_updated",
                extra={"date": entry.date, "shift": entry.shift, "amount": valuation.amount},
            )
        return collection_to_record(model)

    def delete(self, collection_id: str) -> None:
        model = self._get(collection_id)
        self._locks.assert_date_unlocked(model.date, _TARGET, "delete")
        self.session.delete(model)
        self.session.flush()
        logger.info("collection_deleted", extra={"collection_id": collection_id})

    def delete_by_date(self, date: str, shift: str | None = None) -> int:
        """Delete every collection on ``date`` (optionally one shift only)."""
        date = to_date_str(date) or ""
        if not date:
            raise ValueError("Date is required")
        self._locks.assert_date_unlocked(date, _TARGET, "delete")

        wanted_shift = (shift or "").strip().lower()
        rows = self.session.execute(
            select(CollectionModel).where(CollectionModel.date == date)
        ).scalars().all()
        deleted = 0
        for row in rows:
            if wanted_shift and (row.shift or "").strip().lower() != wanted_shift:
                continue
            self.session.delete(row)
            deleted += 1
        self.session.flush()
        logger.info(
            "collections_deleted_by_date",
            extra={"date": date, "shift": shift or "All", "deleted": deleted},
        )
        return deleted

    # -- bulk ---------------------------------------------------------------

    def bulk_import(self, rows: Iterable[Mapping[str, Any]]) -> ImportSummary:
        """
        Import raw rows one at a time.

        Rows are numbered from 1 in error messages.  A row missing a
        required field, or dated in a locked period, is skipped and
        reported; the others are imported.
        """
        registry = self._locks.registry()
        imported = 0
        errors: list[str] = []
        for index, record in enumerate(rows, start=1):
            if missing_collection_fields(record):
                errors.append(f"Row {index}: Missing required fields")
                continue
            entry = entry_from_record(record)
            if registry.is_date_locked(entry.date):
                errors.append(f"Row {index}: Date {entry.date} belongs to a locked period")
                continue
            try:
                valuation = self._valuate(entry)
            except (DairyKernelError, ArithmeticError, ValueError) as exc:
                errors.append(f"Row {index}: {exc}")
                continue
            self.session.add(apply_collection(CollectionModel(), entry, valuation))
            imported += 1
        self.session.flush()

        summary = ImportSummary(imported=imported, skipped=len(errors), errors=tuple(errors))
        logger.info(
            "collections_imported",
            extra={"imported": summary.imported, "skipped": summary.skipped},
        )
        return summary

    def recalculate(
        self,
        from_date: str | None = None,
        to_date: str | None = None,
        from_shift: str | None = None,
        to_shift: str | None = None,
    ) -> RecalculationSummary:
        """
        Re-value stored collections in a date+shift range from their raw input.

        Entries dated in a locked period are left untouched and reported.
        """
        registry = self._locks.registry()
        configs = self._master_data.rate_configs()
        farmers: dict[str, Farmer | None] = {}
        updated = 0
        errors: list[str] = []

        rows = self.session.execute(
            select(CollectionModel).order_by(CollectionModel.date, CollectionModel.id)
        ).scalars().all()
        for model in rows:
            if not in_shift_range(model.date, model.shift, from_date, from_shift, to_date, to_shift):
                continue
            try:
                self._recalculate_one(model, registry, configs, farmers)
            except (DairyKernelError, ArithmeticError, ValueError) as exc:
                errors.append(f"Entry {model.id}: {exc}")
                continue
            updated += 1
        self.session.flush()

        logger.info(
            "recalculation_completed",
            extra={
                "from_date": from_date,
                "to_date": to_date,
                "updated": updated,
                "errors": len(errors),
            },
        )
        return RecalculationSummary(updated=updated, errors=tuple(errors))

    def _recalculate_one(
        self,
        model: CollectionModel,
        registry: LockRegistry,
        configs,
        farmers: dict[str, Farmer | None],
    ) -> None:
        if registry.is_date_locked(model.date):
            raise LockedPeriodError(_TARGET, registry.resolve(model.date), "recalculate")
        entry = collection_input_of(model)
        if entry.farmer_id not in farmers:
            farmers[entry.farmer_id] = self._master_data.farmer(entry.farmer_id)
        config = select_config(entry.date, entry.shift, configs)
        valuation = valuate_collection(entry, farmers[entry.farmer_id], config)
        if valuation != valuation_of(model):
            apply_valuation(model, valuation)

    # -- helpers ------------------------------------------------------------

    def _valuate(self, entry: CollectionInput) -> CollectionValuation:
        config = select_config(entry.date, entry.shift, self._master_data.rate_configs())
        farmer = self._master_data.farmer(entry.farmer_id)
        return valuate_collection(entry, farmer, config)

    def _get(self, collection_id: str) -> CollectionModel:
        model = self.session.get(CollectionModel, collection_id)
        if model is None:
            raise CollectionNotFoundError(collection_id)
        return model
