"""
Module: dairy_kernel.models.adjustment
Responsibility: ORM persistence for per-farmer bill-period additions and
    deductions (bonus heads, loan recoveries, feed advances...).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Writes are refused when the old or new ``bill_period`` is locked
      (service layer).
"""

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from dairy_kernel.db.base import TrackedBase


class AdjustmentModel(TrackedBase):
    """One addition or deduction line on a farmer's bill."""

    __tablename__ = "adjustments"

    __table_args__ = (
        Index("idx_adjustment_farmer_period", "farmer_id", "bill_period"),
    )

    farmer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    bill_period: Mapped[str] = mapped_column(String(64), nullable=False)
    head_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    description: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<Adjustment {self.type} {self.amount} farmer={self.farmer_id}>"
