"""
dairy_engines.farmer_bill -- Farmer bill statement for one bill period.

Responsibility:
    Aggregate a farmer's valued collections and manual adjustments falling
    in one bill period into a payable statement, and summarize statements
    across farmers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    ``dairy_kernel.selectors.farmer_bill_selector`` loads the rows and calls
    into this module.

Invariants enforced:
    - Collections belong to a period by resolving their date with the same
      bill-period resolver the lock registry uses.
    - Daily lines are ordered by date, AM before PM.
    - Bonus is reported but is not part of earnings.
    - ``net_payable`` is rounded to whole currency units, halves towards
      positive infinity.
    - No collections and no adjustments means no bill (None).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from dairy_engines.bill_period import resolve_period
from dairy_engines.interval import shift_ordinal
from dairy_engines.tracer import traced_engine
from dairy_kernel.domain.dtos import (
    Adjustment,
    AdjustmentType,
    BillPeriodDef,
    CollectionRecord,
    Farmer,
)
from dairy_kernel.domain.values import ONE_HUNDRED, ZERO, quantize, round_whole


@dataclass(frozen=True)
class BillTotals:
    """Column sums over a farmer's daily lines."""

    qty_kg: Decimal = ZERO
    milk_value: Decimal = ZERO
    fat_incentive: Decimal = ZERO
    fat_deduction: Decimal = ZERO
    snf_incentive: Decimal = ZERO
    snf_deduction: Decimal = ZERO
    qty_incentive: Decimal = ZERO
    extra: Decimal = ZERO
    cartage: Decimal = ZERO
    bonus: Decimal = ZERO
    kg_fat: Decimal = ZERO
    kg_snf: Decimal = ZERO

    @property
    def avg_fat(self) -> Decimal:
        if self.qty_kg <= ZERO:
            return ZERO
        return quantize(self.kg_fat / self.qty_kg * ONE_HUNDRED, 1)

    @property
    def avg_snf(self) -> Decimal:
        if self.qty_kg <= ZERO:
            return ZERO
        return quantize(self.kg_snf / self.qty_kg * ONE_HUNDRED, 2)


@dataclass(frozen=True)
class FarmerBill:
    """A farmer's statement for one bill period."""

    farmer_id: str
    period_id: str
    entries: tuple[CollectionRecord, ...]
    totals: BillTotals
    additions: tuple[Adjustment, ...]
    deductions: tuple[Adjustment, ...]
    total_earnings: Decimal
    total_deductions: Decimal
    net_payable: Decimal


@dataclass(frozen=True)
class BillSummaryRow:
    """One line of the period summary across farmers."""

    farmer_id: str
    code: str
    name: str
    village: str
    qty_kg: Decimal
    net_payable: Decimal


def _sum_totals(entries: Iterable[CollectionRecord]) -> BillTotals:
    fields = {name: ZERO for name in BillTotals.__dataclass_fields__}
    for record in entries:
        v = record.valuation
        fields["qty_kg"] += v.qty_kg
        fields["milk_value"] += v.milk_value
        fields["fat_incentive"] += v.fat_incentive
        fields["fat_deduction"] += v.fat_deduction
        fields["snf_incentive"] += v.snf_incentive
        fields["snf_deduction"] += v.snf_deduction
        fields["qty_incentive"] += v.qty_incentive_amount
        fields["extra"] += v.extra_rate_amount
        fields["cartage"] += v.cartage_amount
        fields["bonus"] += v.bonus_amount
        fields["kg_fat"] += v.kg_fat
        fields["kg_snf"] += v.kg_snf
    return BillTotals(**fields)


@traced_engine("farmer_bill", "1.0", fingerprint_fields=("farmer_id", "period_id"))
def build_farmer_bill(
    farmer_id: str,
    period_id: str,
    collections: Iterable[CollectionRecord],
    adjustments: Iterable[Adjustment],
    period_defs: Sequence[BillPeriodDef],
) -> FarmerBill | None:
    entries = tuple(
        sorted(
            (
                c for c in collections
                if c.entry.farmer_id == farmer_id
                and resolve_period(c.entry.date, period_defs) == period_id
            ),
            key=lambda c: (c.entry.date, shift_ordinal(c.entry.shift)),
        )
    )
    own_adjustments = [
        a for a in adjustments
        if a.farmer_id == farmer_id and a.bill_period == period_id
    ]
    if not entries and not own_adjustments:
        return None

    totals = _sum_totals(entries)
    additions = tuple(a for a in own_adjustments if a.type is AdjustmentType.ADDITION)
    deductions = tuple(a for a in own_adjustments if a.type is AdjustmentType.DEDUCTION)

    total_earnings = (
        totals.milk_value
        + totals.fat_incentive
        + totals.snf_incentive
        + totals.qty_incentive
        + totals.extra
        + totals.cartage
        + sum((a.amount for a in additions), ZERO)
    )
    total_deductions = (
        totals.fat_deduction
        + totals.snf_deduction
        + sum((a.amount for a in deductions), ZERO)
    )
    return FarmerBill(
        farmer_id=farmer_id,
        period_id=period_id,
        entries=entries,
        totals=totals,
        additions=additions,
        deductions=deductions,
        total_earnings=total_earnings,
        total_deductions=total_deductions,
        net_payable=round_whole(total_earnings - total_deductions),
    )


_DIGITS = re.compile(r"(\d+)")


def natural_key(code: str) -> tuple:
    """Sort key treating digit runs numerically: "F2" < "F10"."""
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in _DIGITS.split(code or "")
        if part
    )


def summarize_bills(
    farmers: Iterable[Farmer],
    period_id: str,
    collections: Sequence[CollectionRecord],
    adjustments: Sequence[Adjustment],
    period_defs: Sequence[BillPeriodDef],
) -> list[BillSummaryRow]:
    """One row per farmer with a bill in the period, ordered by code."""
    rows: list[BillSummaryRow] = []
    for farmer in farmers:
        bill = build_farmer_bill(farmer.id, period_id, collections, adjustments, period_defs)
        if bill is None:
            continue
        rows.append(
            BillSummaryRow(
                farmer_id=farmer.id,
                code=farmer.code,
                name=farmer.name,
                village=farmer.village,
                qty_kg=bill.totals.qty_kg,
                net_payable=bill.net_payable,
            )
        )
    rows.sort(key=lambda r: natural_key(r.code))
    return rows
