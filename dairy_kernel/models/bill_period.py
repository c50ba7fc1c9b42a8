"""
Module: dairy_kernel.models.bill_period
Responsibility: ORM persistence for bill-period definitions and the set of
    locked period ids.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - BillPeriodModel.position fixes resolution order (first match wins).
    - LockedPeriodModel.period_id is unique: the lock set has no duplicates.
"""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from dairy_kernel.db.base import Base, TrackedBase


class BillPeriodModel(TrackedBase):
    """Recurring day-of-month range; ``end_day`` 31 means month end."""

    __tablename__ = "bill_periods"

    name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    start_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    end_day: Mapped[int] = mapped_column(Integer, default=31, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<BillPeriod {self.id}: day {self.start_day}..{self.end_day}>"


class LockedPeriodModel(Base):
    """Membership row: the bill period ``period_id`` is frozen."""

    __tablename__ = "locked_periods"

    __table_args__ = (
        UniqueConstraint("period_id", name="uq_locked_period_id"),
    )

    period_id: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<LockedPeriod {self.period_id}>"
