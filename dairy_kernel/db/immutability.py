"""
ORM-Level Lock Enforcement for collections.

===============================================================================
WHAT THIS GUARDS
===============================================================================

Services refuse writes into locked bill periods before they touch the
session (LockService.assert_*).  This module is the second layer: mapper
event listeners that fire during flush and refuse to UPDATE or DELETE a
collection row dated in a locked bill period, whatever code path produced
the change.

    session.flush()
         |
         v
    [before_update] --> _check_collection_update() --> ImmutabilityViolationError
         |
         v
    [before_delete] --> _check_collection_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

===============================================================================
RULES
===============================================================================

Entity      | Operation | Refused when
------------|-----------|-----------------------------------------------
Collection  | UPDATE    | the stored date OR the new date is locked
Collection  | DELETE    | the stored date is locked

``updated_at`` is audit metadata and never counts as a change.

The lock set and bill-period definitions are read through the flushing
connection, so the check sees uncommitted lock toggles made in the same
transaction.

===============================================================================
USAGE
===============================================================================

    from dairy_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup (create_tables does it)

Tests that need to plant rows inside locked periods may call
unregister_immutability_listeners() and re-register afterwards.
"""

from sqlalchemy import event, inspect, select
from sqlalchemy.engine import Connection

from dairy_kernel.exceptions import ImmutabilityViolationError
from dairy_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

_AUDIT_FIELDS = frozenset({"updated_at", "created_at"})


def _registry_for(connection: Connection):
    from dairy_engines.locks import LockRegistry
    from dairy_kernel.domain.dtos import BillPeriodDef
    from dairy_kernel.models.bill_period import BillPeriodModel, LockedPeriodModel

    locked = connection.execute(select(LockedPeriodModel.period_id)).scalars().all()
    if not locked:
        return None
    rows = connection.execute(
        select(
            BillPeriodModel.id,
            BillPeriodModel.name,
            BillPeriodModel.start_day,
            BillPeriodModel.end_day,
        ).order_by(BillPeriodModel.position, BillPeriodModel.id)
    ).all()
    defs = [BillPeriodDef(id=r.id, name=r.name, start_day=r.start_day, end_day=r.end_day) for r in rows]
    return LockRegistry.build(defs, locked)


def _stored_date(target) -> str:
    history = inspect(target).attrs.date.history
    if history.deleted:
        return history.deleted[0]
    return target.date


def _blocked(target, operation: str, date: str, registry) -> None:
    period_id = registry.resolve(date)
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "Collection",
            "entity_id": str(target.id),
            "operation": operation,
            "date": date,
            "period_id": period_id,
        },
    )
    raise ImmutabilityViolationError(
        entity_type="Collection",
        entity_id=str(target.id),
        reason=f"bill period {period_id} is locked",
    )


def _check_collection_update(mapper, connection, target):
    insp = inspect(target)
    changed = [
        attr.key for attr in insp.attrs
        if attr.key not in _AUDIT_FIELDS and attr.history.has_changes()
    ]
    if not changed:
        return
    registry = _registry_for(connection)
    if registry is None:
        return
    old_date = _stored_date(target)
    if registry.is_date_locked(old_date):
        _blocked(target, "UPDATE", old_date, registry)
    if target.date != old_date and registry.is_date_locked(target.date):
        _blocked(target, "UPDATE", target.date, registry)


def _check_collection_delete(mapper, connection, target):
    registry = _registry_for(connection)
    if registry is None:
        return
    old_date = _stored_date(target)
    if registry.is_date_locked(old_date):
        _blocked(target, "DELETE", old_date, registry)


def register_immutability_listeners():
    """Register the lock enforcement listeners (idempotent)."""
    from dairy_kernel.models.collection import CollectionModel

    if not event.contains(CollectionModel, "before_update", _check_collection_update):
        event.listen(CollectionModel, "before_update", _check_collection_update)
    if not event.contains(CollectionModel, "before_delete", _check_collection_delete):
        event.listen(CollectionModel, "before_delete", _check_collection_delete)
    logger.debug("immutability_listeners_registered")


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the lock enforcement listeners.

    WARNING: Only use this in tests that must plant rows the listeners
    would refuse.
    """
    from dairy_kernel.models.collection import CollectionModel

    _safe_remove_listener(CollectionModel, "before_update", _check_collection_update)
    _safe_remove_listener(CollectionModel, "before_delete", _check_collection_delete)
