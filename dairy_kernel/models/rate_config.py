"""
Module: dairy_kernel.models.rate_config
Responsibility: ORM persistence for time-boxed rate configurations.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``position`` fixes the order configs are offered to the selector;
      selection is first-match-wins in that order.
    - Category settings, slab lists and the base-rate chart are stored as
      JSON in the camelCase record shape (see dairy_kernel.domain.records).

Failure modes:
    - LockedRangeError (service layer) when a write's old or new validity
      window touches a locked bill period.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from dairy_kernel.db.base import TrackedBase


class RateConfigModel(TrackedBase):
    """
    Named pricing policy with a date+shift validity window.

    Non-goals:
        - Overlapping windows are not rejected; see
          dairy_engines.config_selector.find_overlapping_configs.
    """

    __tablename__ = "rate_configs"

    __table_args__ = (
        Index("idx_rate_config_position", "position"),
    )

    name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    from_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    from_shift: Mapped[str | None] = mapped_column(String(10), nullable=True)
    to_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    to_shift: Mapped[str | None] = mapped_column(String(10), nullable=True)

    purchase_method: Mapped[str] = mapped_column(String(20), default="", nullable=False)

    standard_rate: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    standard_fat: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    standard_snf: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    cartage_per_liter: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    fixed_cartage_per_shift: Mapped[Decimal] = mapped_column(default=Decimal("0"))

    category_settings: Mapped[dict[str, Any]] = mapped_column(default=dict)
    slabs: Mapped[dict[str, Any]] = mapped_column(default=dict)
    base_rates: Mapped[list[dict[str, Any]]] = mapped_column(default=list)

    def __repr__(self) -> str:
        return f"<RateConfig {self.id} {self.name!r} {self.from_date}..{self.to_date}>"
