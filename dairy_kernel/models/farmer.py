"""
Module: dairy_kernel.models.farmer
Responsibility: ORM persistence for milk suppliers and their pricing overrides.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Override category settings and slab lists share the rate config JSON
      shape, so one mapping routine serves both.
    - A farmer whose override windows (old or new) touch a locked bill
      period cannot be updated or deleted (service layer).
"""

from typing import Any

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from dairy_kernel.db.base import TrackedBase


class FarmerModel(TrackedBase):
    """Supplier master record."""

    __tablename__ = "farmers"

    __table_args__ = (
        Index("idx_farmer_code", "code"),
        Index("idx_farmer_branch_route", "branch_id", "route_id"),
    )

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    mobile: Mapped[str] = mapped_column(String(30), default="", nullable=False)
    village: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    category: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    branch_id: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    route_id: Mapped[str] = mapped_column(String(64), default="", nullable=False)
    bank_name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    account_number: Mapped[str] = mapped_column(String(50), default="", nullable=False)
    ifsc_code: Mapped[str] = mapped_column(String(20), default="", nullable=False)

    category_settings: Mapped[dict[str, Any]] = mapped_column(default=dict)
    slabs: Mapped[dict[str, Any]] = mapped_column(default=dict)

    def __repr__(self) -> str:
        return f"<Farmer {self.code}: {self.name}>"
