"""
RateConfigService -- administrative maintenance of rate configurations.

Responsibility:
    Create, update, delete and list RateConfigs.  A config's validity
    window decides which collections it prices, so a config whose window
    (before or after the edit) reaches into a locked bill period is frozen.

Architecture position:
    Kernel > Services.  Uses ``LockService`` for range checks and
    ``dairy_kernel.domain.records`` to parse camelCase input.

Invariants enforced:
    - Create: the new window must not overlap a locked period.
    - Update: neither the stored nor the merged window may overlap one.
    - Delete: the stored window must not overlap one.
    - New configs are appended (``position`` = max + 1) so the selector's
      first-match order is the order of creation.
    - Only the config's own ``fromDate``..``toDate`` span is checked, and
      only when both bounds are present.

Failure modes:
    - LockedRangeError, RateConfigNotFoundError.
    - ValueError when a window spans more than the lock scan limit.
"""

from typing import Any, Mapping

from sqlalchemy import func, select

from dairy_engines.config_selector import find_overlapping_configs
from dairy_engines.locks import config_windows
from dairy_kernel.domain.dtos import RateConfig
from dairy_kernel.domain.records import rate_config_from_record, rate_config_to_record
from dairy_kernel.exceptions import RateConfigNotFoundError
from dairy_kernel.logging_config import LogContext, get_logger
from dairy_kernel.models.mapping import apply_rate_config, rate_config_to_dto
from dairy_kernel.models.rate_config import RateConfigModel
from dairy_kernel.services.base import BaseService
from dairy_kernel.services.lock_service import LockService

logger = get_logger("services.rate_config")

_TARGET = "rate_config"


class RateConfigService(BaseService[RateConfigModel]):
    """Write service for RateConfig rows."""

    def __init__(self, session, locks: LockService | None = None):
        super().__init__(session)
        self._locks = locks or LockService(session)

    def list(self) -> list[RateConfig]:
        rows = self.session.execute(
            select(RateConfigModel).order_by(RateConfigModel.position, RateConfigModel.id)
        ).scalars()
        return [rate_config_to_dto(row) for row in rows]

    def create(self, record: Mapping[str, Any]) -> RateConfig:
        config = rate_config_from_record(record)
        self._locks.assert_windows_unlocked(config_windows(config), _TARGET, "create")

        model = RateConfigModel(position=self._next_position())
        if config.id:
            model.id = config.id
        apply_rate_config(model, config)
        self.session.add(model)
        self.session.flush()

        created = rate_config_to_dto(model)
        logger.info(
            "rate_config_created",
            extra={
                "config_id": model.id,
                "purchase_method": created.purchase_method,
                "from_date": created.window.from_date,
                "to_date": created.window.to_date,
            },
        )
        self._warn_on_overlap(model.id)
        return created

    def update(self, config_id: str, changes: Mapping[str, Any]) -> RateConfig:
        model = self._get(config_id)
        existing = rate_config_to_dto(model)
        self._locks.assert_windows_unlocked(config_windows(existing), _TARGET, "update")

        config = rate_config_from_record({**rate_config_to_record(existing), **changes})
        self._locks.assert_windows_unlocked(config_windows(config), _TARGET, "update")

        apply_rate_config(model, config)
        self.session.flush()
        with LogContext.bind(config_id=config_id):
            logger.info("rate_config_updated")
            self._warn_on_overlap(config_id)
        return rate_config_to_dto(model)

    def delete(self, config_id: str) -> None:
        model = self._get(config_id)
        existing = rate_config_to_dto(model)
        self._locks.assert_windows_unlocked(config_windows(existing), _TARGET, "delete")
        self.session.delete(model)
        self.session.flush()
        with LogContext.bind(config_id=config_id):
            logger.info("rate_config_deleted")

    def _warn_on_overlap(self, config_id: str) -> None:
        for overlap in find_overlapping_configs(self.list()):
            if config_id in (overlap.first_id, overlap.second_id):
                logger.warning(
                    "rate_config_overlap",
                    extra={"first_id": overlap.first_id, "second_id": overlap.second_id},
                )

    def _next_position(self) -> int:
        current = self.session.execute(select(func.max(RateConfigModel.position))).scalar()
        return 0 if current is None else current + 1

    def _get(self, config_id: str) -> RateConfigModel:
        model = self.session.get(RateConfigModel, config_id)
        if model is None:
            raise RateConfigNotFoundError(config_id)
        return model
