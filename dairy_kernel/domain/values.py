"""
Values -- numeric coercion and rounding for milk valuation.

Responsibility:
    Converts loosely-typed record values (strings from forms, floats from
    JSON, None for absent fields) into ``Decimal`` and rounds derived
    figures for storage and display.  Also reads collection dates typed
    in the common non-ISO layouts.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by the DTO parsers and by every engine.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str`` so that
      ``0.1`` becomes ``Decimal("0.1")``, never its binary expansion.
    - Coercion never raises: absent, empty, NaN, infinite or non-numeric
      inputs coerce to the supplied default (zero unless stated).
    - Rounding is ROUND_HALF_UP at a fixed number of places per field;
      whole-unit bill totals round halves towards positive infinity.

Failure modes:
    None.  Every function here is total over its input domain.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
ONE_HUNDRED = Decimal("100")

# Liters per kilogram of milk: liters = kg / MILK_DENSITY
MILK_DENSITY = Decimal("1.03")

# Leading numeric prefix, mirroring how form inputs like "4.5%" are read.
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_PLACES: dict[int, Decimal] = {}


def optional_decimal(value: Any) -> Decimal | None:
    """Parse a value into a finite Decimal, or None when it has no number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return Decimal(str(value))
    match = _NUMERIC_PREFIX.match(str(value))
    if match is None:
        return None
    try:
        parsed = Decimal(match.group(1))
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def safe_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Parse a value into a Decimal, falling back to ``default``."""
    parsed = optional_decimal(value)
    return default if parsed is None else parsed


def positive_or_none(value: Any) -> Decimal | None:
    """Parse a value and keep it only when it is strictly positive."""
    parsed = optional_decimal(value)
    if parsed is None or parsed <= ZERO:
        return None
    return parsed


def safe_int(value: Any, default: int = 0) -> int:
    """Parse an integer-valued field such as a day-of-month."""
    parsed = optional_decimal(value)
    if parsed is None:
        return default
    return int(parsed)


def quantize(value: Decimal, places: int) -> Decimal:
    """Round ``value`` half-up to ``places`` decimal places."""
    exp = _PLACES.get(places)
    if exp is None:
        exp = Decimal(1).scaleb(-places)
        _PLACES[places] = exp
    return value.quantize(exp, rounding=ROUND_HALF_UP)


def round_money(value: Decimal) -> Decimal:
    """Round a monetary amount (or per-liter rate) to 2 places."""
    return quantize(value, 2)


def round_whole(value: Decimal) -> Decimal:
    """
    Round to whole currency units, as printed on farmer bills.

    Halves go towards positive infinity: 2.5 -> 3 but -2.5 -> -2.
    """
    rounding = ROUND_HALF_UP if value >= ZERO else ROUND_HALF_DOWN
    return value.quantize(Decimal(1), rounding=rounding)


# Tried in order after ISO 8601; "06/10/2025" reads month first.
DATE_FORMATS = (
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y-%m-%d",
)


def parse_date(value: Any) -> date | None:
    """Calendar date of a date-ish value; None when it cannot be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
