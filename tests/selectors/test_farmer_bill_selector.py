"""
Tests for FarmerBillSelector against stored collections and adjustments.
"""

from decimal import Decimal

import pytest

from dairy_kernel.selectors import CollectionSelector, FarmerBillSelector

D = Decimal
PERIOD = "5-2025-1"


@pytest.fixture
def billing_setup(
    session, bill_period_service, kg_fat_config, farmer, farmer_service,
    collection_service, adjustment_service, make_collection,
):
    bill_period_service.create({"id": "1", "startDay": 1, "endDay": 15})
    bill_period_service.create({"id": "2", "startDay": 16, "endDay": 31})
    farmer_service.create({"id": "f-2", "code": "2", "name": "Lakshmi", "branchId": "b2"})

    collection_service.create(make_collection(shift="PM"))
    collection_service.create(make_collection(shift="AM"))
    collection_service.create(make_collection(date="2025-06-20"))
    collection_service.create(make_collection(farmerId="f-2", date="2025-06-11"))
    adjustment_service.create(
        {"farmerId": "f-1", "billPeriod": PERIOD, "headName": "Feed",
         "type": "deduction", "amount": "25.50"}
    )
    return FarmerBillSelector(session)


class TestFarmerBillSelector:

    def test_bill(self, billing_setup):
        bill = billing_setup.bill("f-1", PERIOD)
        assert [r.entry.shift for r in bill.entries] == ["AM", "PM"]
        assert bill.total_earnings == D("320.00")
        assert bill.total_deductions == D("25.50")
        assert bill.net_payable == D("295")

    def test_no_bill_for_idle_farmer(self, billing_setup):
        assert billing_setup.bill("f-9", PERIOD) is None

    def test_summary_and_filters(self, billing_setup):
        assert [r.code for r in billing_setup.summary(PERIOD)] == ["1", "2"]
        assert [r.code for r in billing_setup.summary(PERIOD, branch_id="b2")] == ["2"]
        assert billing_setup.summary(PERIOD, route_id="r9") == []

    def test_period_title(self, billing_setup):
        assert billing_setup.period_title(PERIOD) == "Jun-25 1st (01-Jun-25 AM to 15-Jun-25 PM)"


class TestCollectionSelector:

    def test_ordering_and_ranges(self, billing_setup, session):
        selector = CollectionSelector(session)
        rows = selector.list_all("f-1")
        assert [(r.entry.date, r.entry.shift) for r in rows] == [
            ("2025-06-10", "AM"), ("2025-06-10", "PM"), ("2025-06-20", "AM"),
        ]
        in_range = selector.in_range("2025-06-10", "2025-06-11", from_shift="PM")
        assert [(r.entry.date, r.entry.shift) for r in in_range] == [
            ("2025-06-10", "PM"), ("2025-06-11", "AM"),
        ]
        assert len(selector.for_period("5-2025-2")) == 1
