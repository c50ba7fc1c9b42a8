"""
Module: dairy_kernel.models.collection
Responsibility: ORM persistence for milk collections: the raw entry and the
    derived valuation written next to it.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Derived columns are written only from a CollectionValuation, never
      from user input.
    - Raw measured values (``input_qty``, ``input_kg_fat``,
      ``input_kg_snf``) are kept apart from their derived counterparts so a
      recalculation over unchanged master data reproduces identical output.
    - Rows dated in a locked bill period are immutable (service checks plus
      the ORM listeners in db/immutability.py).

Non-goals:
    - ``farmer_id`` is not a foreign key; an unknown farmer values as
      "no overrides".
"""

from decimal import Decimal

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from dairy_kernel.db.base import TrackedBase


class CollectionModel(TrackedBase):
    """One procurement transaction."""

    __tablename__ = "collections"

    __table_args__ = (
        Index("idx_collection_date_shift", "date", "shift"),
        Index("idx_collection_farmer", "farmer_id"),
    )

    # Raw entry
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    shift: Mapped[str] = mapped_column(String(10), nullable=False)
    farmer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    qty_kg: Mapped[Decimal] = mapped_column(nullable=False)
    fat: Mapped[Decimal] = mapped_column(nullable=False)
    snf: Mapped[Decimal] = mapped_column(nullable=False)
    clr: Mapped[Decimal | None] = mapped_column(nullable=True)
    input_qty: Mapped[Decimal | None] = mapped_column(nullable=True)
    input_kg_fat: Mapped[Decimal | None] = mapped_column(nullable=True)
    input_kg_snf: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Derived
    qty: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    kg_fat: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    kg_snf: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    milk_value: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    fat_incentive: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    fat_deduction: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    snf_incentive: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    snf_deduction: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    extra_rate_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    cartage_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    qty_incentive_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    bonus_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    def __repr__(self) -> str:
        return f"<Collection {self.id} {self.date} {self.shift} farmer={self.farmer_id}>"
