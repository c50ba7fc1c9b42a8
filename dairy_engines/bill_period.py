"""
dairy_engines.bill_period -- Bill-period resolution and naming.

Responsibility:
    Map a collection date onto a concrete bill-period id
    ``"{monthIndex0}-{year}-{definitionId}"`` using the administratively
    defined day-of-month ranges, and derive the display attributes of a
    period id (name, calendar range, financial year).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the lock registry (every lock check starts here) and by the
    farmer bill engine.

Invariants enforced:
    - First matching definition wins, in the order supplied.
    - ``end_day == 31`` means "to the end of the month", whatever its length.
    - Month index in the id is zero-based (June 2025 -> ``"5-2025-..."``).
    - Unresolvable input yields ``""``: a date with no period cannot be
      locked.

Failure modes:
    None.  Malformed dates and period ids yield ``""`` / ``None``.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Sequence

from dairy_kernel.domain.dtos import BillPeriodDef
from dairy_kernel.domain.values import parse_date

MONTH_END_DAY = 31

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

_YMD_PREFIX = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")


@dataclass(frozen=True)
class PeriodKey:
    """Parsed form of a bill-period id."""

    month_index: int
    year: int
    definition_id: str

    @property
    def period_id(self) -> str:
        return f"{self.month_index}-{self.year}-{self.definition_id}"


def _date_parts(value: Any) -> tuple[int, int, int] | None:
    """(year, zero-based month, day) or None."""
    if isinstance(value, datetime):
        return value.year, value.month - 1, value.day
    if isinstance(value, date):
        return value.year, value.month - 1, value.day
    if not isinstance(value, str) or not value.strip():
        return None
    match = _YMD_PREFIX.match(value)
    if match is not None:
        year, month, day = (int(g) for g in match.groups())
        return year, month - 1, day
    parsed = parse_date(value)
    if parsed is None:
        return None
    return parsed.year, parsed.month - 1, parsed.day


def _matches(definition: BillPeriodDef, day: int) -> bool:
    if definition.end_day == MONTH_END_DAY:
        return day >= definition.start_day
    return definition.start_day <= day <= definition.end_day


def resolve_period(value: Any, period_defs: Sequence[BillPeriodDef]) -> str:
    """Return the bill-period id containing ``value``, or ``""``."""
    if not period_defs:
        return ""
    parts = _date_parts(value)
    if parts is None:
        return ""
    year, month_index, day = parts
    for definition in period_defs:
        if _matches(definition, day):
            return f"{month_index}-{year}-{definition.id}"
    return ""


def parse_period_id(period_id: str) -> PeriodKey | None:
    """Split ``"5-2025-P1"`` into its parts; None when malformed."""
    if not period_id:
        return None
    parts = str(period_id).split("-", 2)
    if len(parts) != 3 or not parts[2]:
        return None
    try:
        month_index, year = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not 0 <= month_index <= 11:
        return None
    return PeriodKey(month_index=month_index, year=year, definition_id=parts[2])


def _find_definition(
    definition_id: str, period_defs: Sequence[BillPeriodDef]
) -> BillPeriodDef | None:
    for definition in period_defs:
        if definition.id == definition_id:
            return definition
    return None


def ordinal_label(definition_id: str) -> str:
    """``1st``, ``2nd``, ``3rd``, otherwise ``{id}th``."""
    return {"1": "1st", "2": "2nd", "3": "3rd"}.get(definition_id, f"{definition_id}th")


def period_name(period_id: str, period_defs: Sequence[BillPeriodDef]) -> str:
    """Display name such as ``"Jun-25 1st"``; ``"-"`` when unknown."""
    key = parse_period_id(period_id)
    if key is None or _find_definition(key.definition_id, period_defs) is None:
        return "-"
    year_short = str(key.year)[-2:]
    return f"{_MONTH_ABBR[key.month_index]}-{year_short} {ordinal_label(key.definition_id)}"


def period_date_range(
    period_id: str, period_defs: Sequence[BillPeriodDef]
) -> tuple[date, date] | None:
    """First and last calendar day covered by a period id."""
    key = parse_period_id(period_id)
    if key is None:
        return None
    definition = _find_definition(key.definition_id, period_defs)
    if definition is None:
        return None
    month = key.month_index + 1
    last_day = calendar.monthrange(key.year, month)[1]
    start_day = min(max(definition.start_day, 1), last_day)
    if definition.end_day == MONTH_END_DAY:
        end_day = last_day
    else:
        end_day = min(max(definition.end_day, start_day), last_day)
    return date(key.year, month, start_day), date(key.year, month, end_day)


def period_range_label(period_id: str, period_defs: Sequence[BillPeriodDef]) -> str:
    """``"01-Jun-25 AM to 15-Jun-25 PM"``; empty when unknown."""
    bounds = period_date_range(period_id, period_defs)
    if bounds is None:
        return ""
    start, end = bounds
    return f"{_short_date(start)} AM to {_short_date(end)} PM"


def _short_date(value: date) -> str:
    return f"{value.day:02d}-{_MONTH_ABBR[value.month - 1]}-{str(value.year)[-2:]}"


def financial_year(month_index: int, year: int) -> str:
    """April-March financial year label, e.g. ``"2025-26"``."""
    start = year if month_index >= 3 else year - 1
    return f"{start}-{str(start + 1)[-2:]}"
