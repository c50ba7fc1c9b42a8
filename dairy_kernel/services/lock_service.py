"""
LockService -- persistence-backed bill-period locking.

Responsibility:
    Stores the set of locked bill-period ids and answers lock questions for
    every other write service.  Each ``assert_*`` method raises a typed
    ``LockedPeriodError`` so callers can reject a write before the session
    is touched.

Architecture position:
    Kernel > Services.  Builds a pure ``dairy_engines.locks.LockRegistry``
    from the current rows on every check, so lock toggles made earlier in
    the same transaction are honoured.

Invariants enforced:
    - ``toggle_lock`` flips membership and returns the full, sorted lock
      set; ``lock_period`` only ever adds.
    - A write whose date resolves to no bill period is never rejected.
    - Range checks are bounded by ``max_lock_scan_days``.

Failure modes:
    - ValueError: empty period id, or a range longer than the scan limit.
    - LockedPeriodError / LockedRangeError from the ``assert_*`` methods.
"""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from dairy_engines.locks import DEFAULT_MAX_LOCK_SCAN_DAYS, LockRegistry
from dairy_kernel.domain.dtos import Window
from dairy_kernel.exceptions import LockedPeriodError, LockedRangeError
from dairy_kernel.logging_config import get_logger
from dairy_kernel.models.bill_period import LockedPeriodModel
from dairy_kernel.selectors.master_data_selector import SqlMasterData
from dairy_kernel.services.base import BaseService

logger = get_logger("services.lock")


class LockService(BaseService[LockedPeriodModel]):
    """
    Service owning the locked-period set.

    Contract:
        Lock checks read bill periods and locked ids through the session.
        Lock mutations flush within the caller's transaction.

    Non-goals:
        - Does NOT decide which dates an operation touches; callers pass
          the dates, ranges or period ids involved.
    """

    def __init__(
        self,
        session: Session,
        max_lock_scan_days: int = DEFAULT_MAX_LOCK_SCAN_DAYS,
    ):
        super().__init__(session)
        self._source = SqlMasterData(session)
        self._max_days = max_lock_scan_days

    def registry(self) -> LockRegistry:
        return LockRegistry.build(
            self._source.bill_periods(),
            self._source.locked_period_ids(),
            self._max_days,
        )

    # -- queries ------------------------------------------------------------

    def resolve_period(self, date: str) -> str:
        return self.registry().resolve(date)

    def list_locked(self) -> list[str]:
        return sorted(self._source.locked_period_ids())

    def is_date_locked(self, date: str | None) -> bool:
        return self.registry().is_date_locked(date)

    def is_period_id_locked(self, period_id: str) -> bool:
        return self.registry().is_period_id_locked(period_id)

    def is_range_locked(self, from_date: str | None, to_date: str | None) -> bool:
        return self.registry().is_range_locked(from_date, to_date)

    # -- mutations ----------------------------------------------------------

    def toggle_lock(self, period_id: str) -> list[str]:
        """Flip ``period_id`` in the lock set and return the whole set."""
        if not period_id:
            raise ValueError("periodId is required")
        row = self._find(period_id)
        if row is None:
            self.session.add(LockedPeriodModel(period_id=period_id))
            action = "locked"
        else:
            self.session.delete(row)
            action = "unlocked"
        self.session.flush()
        logger.info(
            "period_lock_toggled",
            extra={"period_id": period_id, "action": action},
        )
        return self.list_locked()

    def lock_period(self, period_id: str) -> list[str]:
        """Add ``period_id`` to the lock set; a no-op when already locked."""
        if not period_id:
            raise ValueError("periodId is required")
        if self._find(period_id) is None:
            self.session.add(LockedPeriodModel(period_id=period_id))
            self.session.flush()
            logger.info("period_locked", extra={"period_id": period_id})
        return self.list_locked()

    def _find(self, period_id: str) -> LockedPeriodModel | None:
        return self.session.execute(
            select(LockedPeriodModel).where(LockedPeriodModel.period_id == period_id)
        ).scalar_one_or_none()

    # -- guards -------------------------------------------------------------

    def assert_date_unlocked(self, date: str | None, target: str, operation: str) -> None:
        registry = self.registry()
        if registry.is_date_locked(date):
            period_id = registry.resolve(date)
            self._reject(target, operation, period_id=period_id, date=date)
            raise LockedPeriodError(target, period_id, operation)

    def assert_period_unlocked(self, period_id: str, target: str, operation: str) -> None:
        if self.registry().is_period_id_locked(period_id):
            self._reject(target, operation, period_id=period_id)
            raise LockedPeriodError(target, period_id, operation)

    def assert_range_unlocked(
        self,
        from_date: str | None,
        to_date: str | None,
        target: str,
        operation: str,
    ) -> None:
        registry = self.registry()
        if registry.is_range_locked(from_date, to_date):
            self._reject(
                target,
                operation,
                period_id=registry.first_locked_period(from_date, to_date),
                from_date=from_date,
                to_date=to_date,
            )
            raise LockedRangeError(target, from_date or "", to_date or "", operation)

    def assert_windows_unlocked(
        self, windows: Iterable[Window], target: str, operation: str
    ) -> None:
        for window in windows:
            self.assert_range_unlocked(window.from_date, window.to_date, target, operation)

    @staticmethod
    def _reject(target: str, operation: str, **fields) -> None:
        logger.warning(
            "locked_write_rejected",
            extra={"target": target, "operation": operation, **fields},
        )
