"""MasterDataSource -- read port for the master data a valuation needs.

The valuator never reads storage itself: services and scripts hand it a
RateConfig, a Farmer (or None) and the lock set.  Those come from a
MasterDataSource.  SqlMasterData (dairy_kernel.selectors.master_data_selector)
reads the ORM tables; InMemoryMasterData wraps already-parsed DTOs, e.g. the
output of dairy_config.load_master_data or test fixtures.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from dairy_kernel.domain.dtos import BillPeriodDef, Farmer, RateConfig


@runtime_checkable
class MasterDataSource(Protocol):
    """Protocol for the master data consulted during valuation and locking.

    Ordering of ``rate_configs()`` and ``bill_periods()`` is significant:
    config selection and period resolution are first-match-wins.
    """

    def rate_configs(self) -> tuple[RateConfig, ...]:
        ...

    def farmer(self, farmer_id: str) -> Farmer | None:
        """Return the farmer, or None when the id is unknown."""
        ...

    def bill_periods(self) -> tuple[BillPeriodDef, ...]:
        ...

    def locked_period_ids(self) -> frozenset[str]:
        ...


class InMemoryMasterData:
    """MasterDataSource over DTOs held in memory."""

    def __init__(
        self,
        rate_configs: Iterable[RateConfig] = (),
        farmers: Iterable[Farmer] = (),
        bill_periods: Iterable[BillPeriodDef] = (),
        locked_period_ids: Iterable[str] = (),
    ) -> None:
        self._rate_configs = tuple(rate_configs)
        self._farmers = {f.id: f for f in farmers}
        self._bill_periods = tuple(bill_periods)
        self._locked = frozenset(locked_period_ids)

    def rate_configs(self) -> tuple[RateConfig, ...]:
        return self._rate_configs

    def farmer(self, farmer_id: str) -> Farmer | None:
        return self._farmers.get(farmer_id)

    def bill_periods(self) -> tuple[BillPeriodDef, ...]:
        return self._bill_periods

    def locked_period_ids(self) -> frozenset[str]:
        return self._locked

    def farmers(self) -> tuple[Farmer, ...]:
        return tuple(self._farmers.values())
