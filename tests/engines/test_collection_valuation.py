"""
Tests for the collection valuator.

Covers:
- kg_fat, formula and liter (chart) purchase methods
- Sign-gated fat/SNF incentives and deductions
- Slab precedence, farmer overrides and farmer bonus slabs
- Quantity incentive thresholds and qty slabs
- Extra rate and cartage add-ons, including the config-level
  cartagePerLiter that only kg_fat pricing charges
- Zero floor for negative kg_fat amounts
- Rounding of reported figures
"""

from decimal import Decimal

import pytest

from dairy_engines.valuation import snf_from_clr, valuate_collection, valuate_from_source
from dairy_kernel.domain.dtos import CollectionInput, RateConfig
from dairy_kernel.domain.master_data import InMemoryMasterData
from dairy_kernel.domain.records import farmer_from_record, rate_config_from_record

D = Decimal


def _config(**fields) -> RateConfig:
    record = {
        "id": "cfg",
        "purchaseMethod": "kg_fat",
        "standardRate": "30",
        "standardFat": "4.0",
        "standardSnf": "8.5",
        "fatIncRate": "2",
        "fatIncMethod": "kg_fat",
    }
    record.update(fields)
    return rate_config_from_record(record)


def _entry(**fields) -> CollectionInput:
    values = {
        "date": "2025-06-10",
        "shift": "AM",
        "farmer_id": "f-1",
        "qty_kg": D("100"),
        "fat": D("5.0"),
        "snf": D("8.5"),
    }
    values.update(fields)
    return CollectionInput(**values)


class TestKgFatMethod:

    def test_reference_scenario(self):
        """100 kg at 5.0% fat, 30 per kg fat, 2 per kg fat above 4.0%."""
        v = valuate_collection(_entry(), None, _config())
        assert v.kg_fat == D("5.000")
        assert v.kg_snf == D("8.500")
        assert v.qty == D("97.09")
        assert v.milk_value == D("150.00")
        assert v.fat_incentive == D("10.00")
        assert v.fat_deduction == D("0.00")
        assert v.amount == D("160.00")
        assert v.rate == D("1.65")

    def test_fat_below_standard_is_deducted(self):
        config = _config(fatDedRate="1.5", fatDedMethod="kg_fat")
        v = valuate_collection(_entry(fat=D("3.5")), None, config)
        assert v.fat_incentive == D("0.00")
        assert v.fat_deduction == D("5.25")
        assert v.amount == D("99.75")
        assert v.rate == D("1.03")

    def test_fat_at_standard_has_no_component(self):
        config = _config(fatDedRate="1.5")
        v = valuate_collection(_entry(fat=D("4.0")), None, config)
        assert v.fat_incentive == v.fat_deduction == D("0.00")
        assert v.amount == D("120.00")

    def test_snf_incentive_uses_kg_snf(self):
        config = _config(snfIncRate="1", snfIncMethod="kg_snf")
        v = valuate_collection(_entry(snf=D("9.0")), None, config)
        assert v.snf_incentive == D("9.00")
        assert v.amount == D("169.00")

    def test_per_liter_incentive(self):
        config = _config(fatIncMethod="liter")
        v = valuate_collection(_entry(qty_kg=D("103")), None, config)
        assert v.qty == D("100.00")
        assert v.fat_incentive == D("200.00")

    def test_negative_amount_floors_at_zero(self):
        config = _config(fatDedRate="100", fatDedMethod="kg_fat")
        v = valuate_collection(_entry(fat=D("3.0")), None, config)
        assert v.fat_deduction == D("300.00")
        assert v.amount == D("0.00")
        assert v.rate == D("0.00")

    def test_measured_liters_and_kg_fat_are_used(self):
        v = valuate_collection(_entry(qty=D("90"), kg_fat=D("4.8")), None, _config())
        assert v.qty == D("90.00")
        assert v.kg_fat == D("4.800")
        assert v.amount == D("153.60")
        assert v.rate == D("1.71")

    def test_extra_rate_per_kg_fat(self):
        v = valuate_collection(_entry(), None, _config(extraRate="2"))
        assert v.extra_rate_amount == D("10.00")
        assert v.amount == D("170.00")

    @pytest.mark.parametrize(
        "method,expected",
        [("shift", D("20.00")), ("liter", D("1941.75")), ("kg_fat", D("100.00")), ("other", D("0.00"))],
    )
    def test_cartage_bases(self, method, expected):
        v = valuate_collection(_entry(), None, _config(cartageRate="20", cartageMethod=method))
        assert v.cartage_amount == expected
        assert v.amount == D("160.00") + expected


class TestQuantityIncentive:

    def test_above_threshold(self):
        config = _config(qtyIncRate="0.5", qtyIncMethod="liter", qtyIncThreshold="50")
        v = valuate_collection(_entry(), None, config)
        assert v.qty_incentive_amount == D("48.54")
        assert v.amount == D("208.54")

    def test_below_threshold(self):
        config = _config(qtyIncRate="0.5", qtyIncMethod="liter", qtyIncThreshold="200")
        assert valuate_collection(_entry(), None, config).qty_incentive_amount == D("0.00")

    def test_qty_slab_ignores_threshold(self):
        config = _config(
            qtyIncRate="0.5",
            qtyIncThreshold="200",
            qtyIncentiveSlabs=[{"minQty": "90", "maxQty": "500", "rate": "1", "method": "liter"}],
        )
        v = valuate_collection(_entry(), None, config)
        assert v.qty_incentive_amount == D("97.09")
        assert v.amount == D("257.09")

    def test_kg_fat_basis(self):
        config = _config(qtyIncRate="1", qtyIncMethod="kg_fat")
        assert valuate_collection(_entry(), None, config).qty_incentive_amount == D("5.00")


class TestFormulaMethod:

    def test_incentive_amount_is_folded_into_rate(self):
        """The per-liter rate is standardRate plus the incentive amounts."""
        config = _config(
            purchaseMethod="formula",
            standardRate="35",
            fatIncRate="0.5",
            fatIncMethod="liter",
        )
        v = valuate_collection(_entry(qty_kg=D("103"), fat=D("4.5")), None, config)
        assert v.milk_value == D("3500.00")
        assert v.fat_incentive == D("50.00")
        assert v.rate == D("85.00")
        assert v.amount == D("8500.00")

    def test_negative_rate_floors_at_zero(self):
        config = _config(purchaseMethod="formula", standardRate="1", fatDedRate="5", fatDedMethod="liter")
        v = valuate_collection(_entry(qty_kg=D("103"), fat=D("3.0")), None, config)
        assert v.rate == D("0.00")
        assert v.amount == D("0.00")


class TestLiterMethod:

    def _chart_config(self, **fields) -> RateConfig:
        return _config(
            purchaseMethod="liter",
            fatIncRate="0",
            baseRates=[{"fat": "4.5", "snf": "8.5", "rate": "42"}],
            **fields,
        )

    def test_exact_chart_match(self):
        v = valuate_collection(_entry(qty_kg=D("103"), fat=D("4.5")), None, self._chart_config())
        assert v.rate == D("42.00")
        assert v.milk_value == D("4200.00")
        assert v.amount == D("4200.00")

    def test_chart_miss_prices_at_zero(self):
        v = valuate_collection(_entry(qty_kg=D("103"), fat=D("4.6")), None, self._chart_config())
        assert v.rate == D("0.00")
        assert v.amount == D("0.00")

    def test_extra_rate_recomputes_rate(self):
        v = valuate_collection(
            _entry(qty_kg=D("103"), fat=D("4.5")), None, self._chart_config(extraRate="10")
        )
        assert v.extra_rate_amount == D("46.35")
        assert v.amount == D("4246.35")
        assert v.rate == D("42.46")


class TestConfigCartageAddOns:
    """cartagePerLiter is charged by kg_fat pricing only; fixedCartagePerShift by every method."""

    def test_kg_fat_charges_both(self):
        config = _config(standardFat="5.0", cartagePerLiter="1", fixedCartagePerShift="10")
        v = valuate_collection(_entry(qty_kg=D("103")), None, config)
        assert v.milk_value == D("154.50")
        assert v.amount == D("264.50")
        assert v.rate == D("2.65")
        assert v.cartage_amount == D("0.00")

    def test_liter_ignores_per_liter_cartage(self):
        config = _config(
            purchaseMethod="liter",
            fatIncRate="0",
            baseRates=[{"fat": "4.5", "snf": "8.5", "rate": "42"}],
            cartagePerLiter="1",
            fixedCartagePerShift="10",
        )
        v = valuate_collection(_entry(qty_kg=D("103"), fat=D("4.5")), None, config)
        assert v.amount == D("4210.00")
        assert v.rate == D("42.00")

    def test_no_liters_no_fixed_cartage(self):
        config = _config(fixedCartagePerShift="10")
        assert valuate_collection(_entry(qty_kg=D("0")), None, config).amount == D("0.00")


class TestOverridesAndSlabs:

    def test_fat_slab_overrides_flat_rate(self):
        config = _config(
            fatIncentiveSlabs=[{"minFat": "4.5", "maxFat": "6.0", "rate": "3", "method": "kg_fat"}]
        )
        v = valuate_collection(_entry(), None, config)
        assert v.fat_incentive == D("15.00")
        assert v.amount == D("165.00")

    def test_slab_outside_range_keeps_flat_rate(self):
        config = _config(fatIncentiveSlabs=[{"minFat": "6.0", "maxFat": "9.0", "rate": "3"}])
        assert valuate_collection(_entry(), None, config).fat_incentive == D("10.00")

    def test_farmer_override_wins(self):
        farmer = farmer_from_record({"id": "f-1", "fatIncRate": "4", "fatIncMethod": "kg_fat"})
        v = valuate_collection(_entry(), farmer, _config())
        assert v.fat_incentive == D("20.00")
        assert v.amount == D("170.00")

    def test_farmer_zero_rate_keeps_config(self):
        farmer = farmer_from_record({"id": "f-1", "fatIncRate": "0"})
        assert valuate_collection(_entry(), farmer, _config()).fat_incentive == D("10.00")

    def test_slab_beats_farmer_override(self):
        farmer = farmer_from_record({"id": "f-1", "fatIncRate": "4", "fatIncMethod": "kg_fat"})
        config = _config(fatIncentiveSlabs=[{"minFat": "4.5", "maxFat": "6.0", "rate": "3"}])
        assert valuate_collection(_entry(), farmer, config).fat_incentive == D("15.00")

    def test_bonus_is_reported_outside_amount(self):
        config = _config(bonusSlabs=[{"minQty": "50", "maxQty": "200", "rate": "0.5"}])
        v = valuate_collection(_entry(), None, config)
        assert v.bonus_amount == D("48.54")
        assert v.amount == D("160.00")

    def test_farmer_bonus_replaces_config_bonus(self):
        config = _config(bonusSlabs=[{"minQty": "50", "maxQty": "200", "rate": "0.5"}])
        farmer = farmer_from_record(
            {"id": "f-1", "bonusSlabs": [{"minQty": "500", "maxQty": "900", "rate": "1"}]}
        )
        assert valuate_collection(_entry(), farmer, config).bonus_amount == D("0.00")


class TestPurityAndHelpers:

    def test_same_input_same_output(self):
        config = _config(extraRate="1.25", cartageRate="7", cartageMethod="liter")
        first = valuate_collection(_entry(), None, config)
        second = valuate_collection(_entry(), None, config)
        assert first == second

    def test_empty_config_values_nothing(self):
        v = valuate_collection(_entry(), None, RateConfig.empty())
        assert v.amount == D("0.00")
        assert v.qty == D("97.09")

    def test_snf_from_clr(self):
        assert snf_from_clr(D("4.0"), D("28")) == D("8.20")

    def test_valuate_from_source(self):
        source = InMemoryMasterData(
            rate_configs=[_config()],
            farmers=[farmer_from_record({"id": "f-1", "fatIncRate": "4"})],
        )
        assert valuate_from_source(_entry(), source).fat_incentive == D("20.00")
        assert valuate_from_source(_entry(farmer_id="unknown"), source).fat_incentive == D("10.00")

    def test_trace_record_emitted(self, captured_logs):
        valuate_collection(_entry(), None, _config())
        traces = [r for r in captured_logs() if r["message"] == "DAIRY_ENGINE_TRACE"]
        assert traces
        assert traces[-1]["engine_name"] == "valuation"
        assert len(traces[-1]["input_fingerprint"]) == 16
