"""
dairy_engines.interval -- Date+shift window matching.

Responsibility:
    Decide whether a collection instant (date, shift) falls inside a
    validity window.  Every time-versioned rule in the system (rate configs,
    per-category overrides, slabs, farmer overrides) is gated by this check.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Shifts are totally ordered: AM (alias "Morning") < anything else.
    - Dates compare lexically as ``YYYY-MM-DD`` strings.
    - Bounds are inclusive on both date and shift.
    - A window missing either bound date is always active.

Failure modes:
    None.  Unknown shift labels count as PM.
"""

from __future__ import annotations

from dairy_kernel.domain.dtos import Window

_MORNING_LABELS = frozenset({"AM", "Morning"})


def shift_ordinal(shift: str | None) -> int:
    """0 for the morning session, 1 for everything else."""
    return 0 if shift in _MORNING_LABELS else 1


def is_window_active(
    date: str,
    shift: str,
    from_date: str | None,
    from_shift: str | None,
    to_date: str | None,
    to_shift: str | None,
) -> bool:
    if not from_date or not to_date:
        return True
    if date < from_date or date > to_date:
        return False
    current = shift_ordinal(shift)
    if date == from_date and current < shift_ordinal(from_shift):
        return False
    if date == to_date and current > shift_ordinal(to_shift):
        return False
    return True


def window_active(window: Window, date: str, shift: str) -> bool:
    """``is_window_active`` over a ``Window`` value object."""
    return is_window_active(
        date,
        shift,
        window.from_date,
        window.from_shift,
        window.to_date,
        window.to_shift,
    )


def in_shift_range(
    date: str,
    shift: str,
    from_date: str | None = None,
    from_shift: str | None = None,
    to_date: str | None = None,
    to_shift: str | None = None,
) -> bool:
    """
    Open-ended variant used to scope recalculation sweeps.

    Each bound applies independently; a bound shift without its date is
    ignored.
    """
    current = shift_ordinal(shift)
    if from_date:
        if date < from_date:
            return False
        if from_shift and date == from_date and current < shift_ordinal(from_shift):
            return False
    if to_date:
        if date > to_date:
            return False
        if to_shift and date == to_date and current > shift_ordinal(to_shift):
            return False
    return True
