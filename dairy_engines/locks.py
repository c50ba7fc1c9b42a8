"""
dairy_engines.locks -- Bill-period lock registry.

Responsibility:
    Answer "is this date / period id / date span frozen?" against an
    explicit set of locked period ids and the bill-period definitions.
    Every mutating operation on collections, rate configs, farmers and
    adjustments consults this registry before writing.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The persistence-backed counterpart is
    ``dairy_kernel.services.lock_service.LockService``, which loads the
    locked ids and raises ``LockedPeriodError``.

Invariants enforced:
    - A date that resolves to no bill period is never locked.
    - Range checks walk calendar dates (not timestamps) inclusively and
      stop at the first locked day.
    - Range checks are bounded by ``max_days``; longer spans raise
      ``ValueError`` rather than silently scanning for years.
    - The registry is immutable: ``toggle`` and ``lock`` return a new one.

Failure modes:
    - ValueError from ``is_range_locked`` when the span exceeds ``max_days``.
    - ValueError from ``toggle``/``lock`` for an empty period id.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Iterator

from dairy_engines.bill_period import resolve_period
from dairy_kernel.domain.dtos import (
    BillPeriodDef,
    Category,
    Farmer,
    RateConfig,
    Window,
)
from dairy_kernel.domain.values import parse_date

DEFAULT_MAX_LOCK_SCAN_DAYS = 3660

_YMD = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")


def parse_calendar_date(value: str | None) -> date | None:
    """Leading ``YYYY-MM-DD`` of a string, else any layout ``parse_date`` reads."""
    if not value:
        return None
    match = _YMD.match(str(value))
    if match is None:
        return parse_date(value)
    try:
        return date(*(int(g) for g in match.groups()))
    except ValueError:
        return None


@dataclass(frozen=True)
class LockRegistry:
    """
    Immutable view of the locked bill periods.

    Contract:
        ``period_defs`` order matters (first match wins in resolution).
        ``locked_ids`` is a pure membership set.
    """

    period_defs: tuple[BillPeriodDef, ...] = ()
    locked_ids: frozenset[str] = field(default_factory=frozenset)
    max_days: int = DEFAULT_MAX_LOCK_SCAN_DAYS

    @classmethod
    def build(
        cls,
        period_defs: Iterable[BillPeriodDef],
        locked_ids: Iterable[str],
        max_days: int = DEFAULT_MAX_LOCK_SCAN_DAYS,
    ) -> LockRegistry:
        return cls(tuple(period_defs), frozenset(locked_ids), max_days)

    def resolve(self, value: str | date) -> str:
        return resolve_period(value, self.period_defs)

    def is_period_id_locked(self, period_id: str) -> bool:
        return bool(period_id) and period_id in self.locked_ids

    def is_date_locked(self, value: str | date | None) -> bool:
        if not value:
            return False
        period_id = self.resolve(value)
        return self.is_period_id_locked(period_id)

    def is_range_locked(self, from_date: str | None, to_date: str | None) -> bool:
        """True when any day in ``[from_date, to_date]`` is in a locked period."""
        if not from_date or not to_date:
            return False
        start = parse_calendar_date(from_date)
        end = parse_calendar_date(to_date)
        if start is None or end is None:
            return False
        span = (end - start).days
        if span > self.max_days:
            raise ValueError(
                f"Range {from_date}..{to_date} spans {span} days, "
                f"more than the {self.max_days}-day lock scan limit"
            )
        if not self.locked_ids:
            return False
        return any(self.is_date_locked(day) for day in _days(start, end))

    def first_locked_period(self, from_date: str | None, to_date: str | None) -> str:
        """Period id of the first locked day in the range, or ``""``."""
        start = parse_calendar_date(from_date)
        end = parse_calendar_date(to_date)
        if start is None or end is None or not self.locked_ids:
            return ""
        for day in _days(start, end):
            period_id = self.resolve(day)
            if self.is_period_id_locked(period_id):
                return period_id
        return ""

    def toggle(self, period_id: str) -> LockRegistry:
        _require_period_id(period_id)
        if period_id in self.locked_ids:
            locked = self.locked_ids - {period_id}
        else:
            locked = self.locked_ids | {period_id}
        return LockRegistry(self.period_defs, locked, self.max_days)

    def lock(self, period_id: str) -> LockRegistry:
        _require_period_id(period_id)
        if period_id in self.locked_ids:
            return self
        return LockRegistry(self.period_defs, self.locked_ids | {period_id}, self.max_days)

    def any_window_locked(self, windows: Iterable[Window]) -> bool:
        return any(self.is_range_locked(w.from_date, w.to_date) for w in windows)


def _require_period_id(period_id: str) -> None:
    if not period_id:
        raise ValueError("periodId is required")


def _days(start: date, end: date) -> Iterator[date]:
    current = start
    one_day = timedelta(days=1)
    while current <= end:
        yield current
        current += one_day


def override_windows(owner: Farmer | RateConfig) -> list[Window]:
    """
    Date spans a farmer (or config) override touches.

    Covers every category window and every slab window that carries both
    bound dates.  Used to refuse edits that would alter locked history.
    """
    windows: list[Window] = []
    for category in Category:
        setting = owner.categories.get(category)
        if setting is not None and setting.window.is_bounded:
            windows.append(setting.window)
    for slabs in owner.slabs.values():
        windows.extend(slab.window for slab in slabs if slab.window.is_bounded)
    return windows


def config_windows(config: RateConfig) -> list[Window]:
    """The config's own validity window, when bounded."""
    return [config.window] if config.window.is_bounded else []
