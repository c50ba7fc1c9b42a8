"""
Module: dairy_kernel.selectors.collection_selector
Responsibility: Read-side queries over stored collections.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Results are ordered by date, then AM before PM, then id.
    - Range filters use the same date+shift ordering as config windows.
"""

from sqlalchemy import select

from dairy_engines.bill_period import resolve_period
from dairy_engines.interval import in_shift_range, shift_ordinal
from dairy_kernel.domain.dtos import CollectionRecord
from dairy_kernel.models.collection import CollectionModel
from dairy_kernel.models.mapping import collection_to_record
from dairy_kernel.selectors.base import BaseSelector
from dairy_kernel.selectors.master_data_selector import SqlMasterData


def _ordered(records: list[CollectionRecord]) -> list[CollectionRecord]:
    return sorted(
        records,
        key=lambda r: (r.entry.date, shift_ordinal(r.entry.shift), r.id),
    )


class CollectionSelector(BaseSelector[CollectionModel]):
    """Queries over the ``collections`` table returning CollectionRecord DTOs."""

    def get(self, collection_id: str) -> CollectionRecord | None:
        model = self.session.get(CollectionModel, collection_id)
        return None if model is None else collection_to_record(model)

    def list_all(self, farmer_id: str | None = None) -> list[CollectionRecord]:
        query = select(CollectionModel)
        if farmer_id:
            query = query.where(CollectionModel.farmer_id == farmer_id)
        return _ordered([collection_to_record(m) for m in self.session.execute(query).scalars()])

    def in_range(
        self,
        from_date: str | None = None,
        to_date: str | None = None,
        from_shift: str | None = None,
        to_shift: str | None = None,
        farmer_id: str | None = None,
    ) -> list[CollectionRecord]:
        """Collections between two date+shift instants, both inclusive."""
        return [
            record
            for record in self.list_all(farmer_id)
            if in_shift_range(
                record.entry.date, record.entry.shift,
                from_date, from_shift, to_date, to_shift,
            )
        ]

    def for_period(self, period_id: str, farmer_id: str | None = None) -> list[CollectionRecord]:
        """Collections whose date resolves to ``period_id``."""
        defs = SqlMasterData(self.session).bill_periods()
        return [
            record
            for record in self.list_all(farmer_id)
            if resolve_period(record.entry.date, defs) == period_id
        ]
