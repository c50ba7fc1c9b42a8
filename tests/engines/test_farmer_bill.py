"""
Tests for farmer bill aggregation.

Verifies:
- Only the farmer's collections resolving to the period are included
- Daily lines ordered by date, AM before PM
- Earnings/deductions composition (bonus excluded)
- Whole-unit rounding of net payable
- Summary ordering by natural farmer code
"""

from decimal import Decimal

from dairy_engines.farmer_bill import build_farmer_bill, natural_key, summarize_bills
from dairy_kernel.domain.dtos import (
    Adjustment,
    AdjustmentType,
    BillPeriodDef,
    CollectionInput,
    CollectionRecord,
    CollectionValuation,
    Farmer,
)

D = Decimal
PERIODS = (
    BillPeriodDef(id="1", start_day=1, end_day=15),
    BillPeriodDef(id="2", start_day=16, end_day=31),
)
ZEROS = {name: D("0") for name in CollectionValuation.__dataclass_fields__}


def _record(record_id, date, shift, farmer_id="f-1", **valuation) -> CollectionRecord:
    figures = dict(ZEROS)
    figures.update({k: D(v) for k, v in valuation.items()})
    return CollectionRecord(
        id=record_id,
        entry=CollectionInput(date=date, shift=shift, farmer_id=farmer_id, qty_kg=figures["qty_kg"]),
        valuation=CollectionValuation(**figures),
    )


def _adjustment(kind, amount, farmer_id="f-1", period="5-2025-1") -> Adjustment:
    return Adjustment(
        id=f"a-{kind.value}-{amount}",
        farmer_id=farmer_id,
        bill_period=period,
        head_name="Feed" if kind is AdjustmentType.DEDUCTION else "Arrears",
        type=kind,
        amount=D(amount),
    )


COLLECTIONS = [
    _record("c3", "2025-06-02", "AM", qty_kg="50", milk_value="200", fat_incentive="10",
            kg_fat="2.5", kg_snf="4.25", bonus_amount="5"),
    _record("c2", "2025-06-01", "PM", qty_kg="40", milk_value="160", fat_deduction="4",
            kg_fat="1.6", kg_snf="3.4"),
    _record("c1", "2025-06-01", "AM", qty_kg="60", milk_value="240.40", qty_incentive_amount="6",
            cartage_amount="20", extra_rate_amount="3", kg_fat="3", kg_snf="5.1"),
    _record("c4", "2025-06-20", "AM", qty_kg="70", milk_value="999"),
    _record("c5", "2025-06-05", "AM", farmer_id="f-2", qty_kg="10", milk_value="40"),
]


class TestBuildFarmerBill:

    def test_selects_period_and_orders_lines(self):
        bill = build_farmer_bill("f-1", "5-2025-1", COLLECTIONS, [], PERIODS)
        assert [r.id for r in bill.entries] == ["c1", "c2", "c3"]

    def test_totals(self):
        bill = build_farmer_bill("f-1", "5-2025-1", COLLECTIONS, [], PERIODS)
        assert bill.totals.qty_kg == D("150")
        assert bill.totals.milk_value == D("600.40")
        assert bill.totals.kg_fat == D("7.1")
        assert bill.totals.avg_fat == D("4.7")
        assert bill.totals.avg_snf == D("8.50")
        assert bill.totals.bonus == D("5")

    def test_earnings_deductions_and_net(self):
        adjustments = [
            _adjustment(AdjustmentType.ADDITION, "15"),
            _adjustment(AdjustmentType.DEDUCTION, "100"),
            _adjustment(AdjustmentType.DEDUCTION, "999", period="5-2025-2"),
            _adjustment(AdjustmentType.DEDUCTION, "999", farmer_id="f-2"),
        ]
        bill = build_farmer_bill("f-1", "5-2025-1", COLLECTIONS, adjustments, PERIODS)
        # 600.40 milk + 10 fat inc + 6 qty inc + 3 extra + 20 cartage + 15 addition
        assert bill.total_earnings == D("654.40")
        # 4 fat deduction + 100 feed
        assert bill.total_deductions == D("104")
        assert bill.net_payable == D("550")
        assert len(bill.additions) == 1
        assert len(bill.deductions) == 1

    def test_net_payable_rounds_half_up(self):
        records = [_record("x", "2025-06-03", "AM", qty_kg="1", milk_value="10.50")]
        assert build_farmer_bill("f-1", "5-2025-1", records, [], PERIODS).net_payable == D("11")

    def test_negative_net_half_rounds_towards_zero(self):
        records = [_record("x", "2025-06-03", "AM", qty_kg="1", milk_value="10")]
        adjustments = [_adjustment(AdjustmentType.DEDUCTION, "12.50")]
        bill = build_farmer_bill("f-1", "5-2025-1", records, adjustments, PERIODS)
        assert bill.net_payable == D("-2")

    def test_adjustments_only(self):
        bill = build_farmer_bill(
            "f-1", "5-2025-1", [], [_adjustment(AdjustmentType.ADDITION, "25")], PERIODS
        )
        assert bill.entries == ()
        assert bill.totals.avg_fat == D("0")
        assert bill.net_payable == D("25")

    def test_nothing_to_bill(self):
        assert build_farmer_bill("f-9", "5-2025-1", COLLECTIONS, [], PERIODS) is None


class TestSummary:

    def test_natural_code_order(self):
        assert sorted(["F10", "F2", "f1"], key=natural_key) == ["f1", "F2", "F10"]
        assert sorted(["10", "9", "100"], key=natural_key) == ["9", "10", "100"]

    def test_one_row_per_billed_farmer(self):
        farmers = [
            Farmer(id="f-2", code="10", name="Lakshmi", village="Kothur"),
            Farmer(id="f-1", code="2", name="Ramesh", village="Kothur"),
            Farmer(id="f-3", code="3", name="Idle"),
        ]
        rows = summarize_bills(farmers, "5-2025-1", COLLECTIONS, [], PERIODS)
        assert [r.code for r in rows] == ["2", "10"]
        assert rows[0].qty_kg == D("150")
        assert rows[1].net_payable == D("40")
