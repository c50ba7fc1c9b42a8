"""
dairy_engines.valuation -- Collection valuator.

Responsibility:
    Turn one raw collection entry (date, shift, kg, fat%, SNF%) into its
    payable figures under a resolved RateConfig and an optional Farmer:
    base milk value, fat/SNF incentives and deductions, quantity incentive,
    extra rate, cartage, bonus, the effective per-liter rate and the total
    amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Services select the config (``config_selector``) and look up the farmer
    before calling ``valuate_collection``; the result is persisted next to
    the raw input.  Recalculation re-runs this function over stored inputs.

Invariants enforced:
    - Purity: identical (entry, farmer, config) always yield an identical
      CollectionValuation.  Nothing is read from ambient state.
    - Decimal-only arithmetic; absent or malformed numbers count as zero.
    - Slabs come from the config only; bonus slabs come from the farmer
      when it has any, otherwise from the config.
    - Bonus is reported separately and never folded into ``amount``.
    - ``kg_fat`` pricing floors a negative amount (and its rate) at zero;
      ``formula`` and ``liter`` floor the rate at zero before the amount is
      built.
    - ``cartagePerLiter`` is charged by ``kg_fat`` pricing only, while
      ``fixedCartagePerShift`` is charged by every method when liters > 0.

Failure modes:
    None.  The valuator never raises on input data.

Rounding (ROUND_HALF_UP):
    qtyKg, qty, rate and money fields to 2 places; fat to 1; snf to 2;
    kgFat and kgSnf to 3.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from dairy_engines.config_selector import select_config
from dairy_engines.overrides import Effective, resolve_effective
from dairy_engines.slabs import bonus_slabs, resolve_slab
from dairy_engines.tracer import traced_engine
from dairy_kernel.domain.dtos import (
    Category,
    CollectionInput,
    CollectionValuation,
    Farmer,
    PurchaseMethod,
    RateBasis,
    RateConfig,
    SlabKind,
)
from dairy_kernel.domain.master_data import MasterDataSource
from dairy_kernel.domain.values import (
    MILK_DENSITY,
    ONE_HUNDRED,
    ZERO,
    quantize,
    round_money,
)

_CLR_DIVISOR = Decimal("4")
_CLR_FAT_FACTOR = Decimal("0.21")
_CLR_CONSTANT = Decimal("0.36")


def snf_from_clr(fat: Decimal, clr: Decimal) -> Decimal:
    """SNF% from a corrected lactometer reading: CLR/4 + 0.21*fat + 0.36."""
    return quantize(clr / _CLR_DIVISOR + _CLR_FAT_FACTOR * fat + _CLR_CONSTANT, 2)


@dataclass(frozen=True)
class _Measures:
    kgs: Decimal
    liters: Decimal
    fat: Decimal
    snf: Decimal
    kg_fat: Decimal
    kg_snf: Decimal


def _measure(entry: CollectionInput) -> _Measures:
    kgs = entry.qty_kg
    if entry.qty is not None and entry.qty > ZERO:
        liters = entry.qty
    elif kgs > ZERO:
        liters = kgs / MILK_DENSITY
    else:
        liters = ZERO
    kg_fat = entry.kg_fat if entry.kg_fat else kgs * entry.fat / ONE_HUNDRED
    kg_snf = entry.kg_snf if entry.kg_snf else kgs * entry.snf / ONE_HUNDRED
    return _Measures(kgs, liters, entry.fat, entry.snf, kg_fat, kg_snf)


def _component(effective: Effective, per_unit_base: Decimal, liters: Decimal) -> Decimal:
    """Incentive/deduction amount: per liter, otherwise per kg of solids."""
    if effective.method == RateBasis.LITER.value:
        return effective.value * liters
    return per_unit_base * effective.value


def _qty_incentive(effective: Effective, m: _Measures) -> Decimal:
    if effective.method == RateBasis.KG_FAT.value:
        return effective.value * m.kg_fat
    return effective.value * m.liters


def _cartage(effective: Effective, m: _Measures) -> Decimal:
    if effective.method == RateBasis.SHIFT.value:
        return effective.value
    if effective.method == RateBasis.LITER.value:
        return effective.value * m.liters
    if effective.method == RateBasis.KG_FAT.value:
        return effective.value * m.kg_fat
    return ZERO


@traced_engine(
    "valuation", "1.0", fingerprint_fields=("entry", "farmer", "config")
)
def valuate_collection(
    entry: CollectionInput,
    farmer: Farmer | None,
    config: RateConfig,
) -> CollectionValuation:
    """
    Value one collection entry.

    Args:
        entry: Raw collection input.
        farmer: The supplying farmer, or None when unknown (no overrides).
        config: The RateConfig selected for the entry's date and shift.
    """
    m = _measure(entry)
    date, shift = entry.date, entry.shift

    def effective(category: Category) -> Effective:
        return resolve_effective(category, config, farmer, date, shift)

    fat_inc = effective(Category.FAT_INC)
    fat_ded = effective(Category.FAT_DED)
    snf_inc = effective(Category.SNF_INC)
    snf_ded = effective(Category.SNF_DED)
    qty_inc = effective(Category.QTY_INC)
    extra = effective(Category.EXTRA)
    cartage = effective(Category.CARTAGE)

    slab = resolve_slab(m.fat, config.slab_list(SlabKind.FAT_INCENTIVE), date, shift)
    if slab is not None:
        fat_inc = fat_inc.with_slab(slab, RateBasis.KG_FAT.value)
    slab = resolve_slab(m.fat, config.slab_list(SlabKind.FAT_DEDUCTION), date, shift)
    if slab is not None:
        fat_ded = fat_ded.with_slab(slab, RateBasis.KG_FAT.value)
    slab = resolve_slab(m.snf, config.slab_list(SlabKind.SNF_INCENTIVE), date, shift)
    if slab is not None:
        snf_inc = snf_inc.with_slab(slab, RateBasis.KG_SNF.value)
    slab = resolve_slab(m.snf, config.slab_list(SlabKind.SNF_DEDUCTION), date, shift)
    if slab is not None:
        snf_ded = snf_ded.with_slab(slab, RateBasis.KG_SNF.value)
    slab = resolve_slab(m.liters, config.slab_list(SlabKind.QTY_INCENTIVE), date, shift)
    qty_slab_found = slab is not None
    if slab is not None:
        qty_inc = qty_inc.with_slab(slab, RateBasis.LITER.value)

    bonus = ZERO
    slab = resolve_slab(m.liters, bonus_slabs(config, farmer), date, shift)
    if slab is not None:
        bonus = slab.rate * m.liters

    qty_incentive_applies = qty_slab_found or m.liters > qty_inc.threshold

    fat_incentive = fat_deduction = snf_incentive = snf_deduction = ZERO
    extra_amount = cartage_amount = qty_incentive = ZERO
    method = config.purchase_method

    if method in (PurchaseMethod.FORMULA.value, PurchaseMethod.KG_FAT.value):
        if method == PurchaseMethod.FORMULA.value:
            base_amount = m.liters * config.standard_rate
        else:
            base_amount = m.kg_fat * config.standard_rate
        if m.fat > config.standard_fat:
            fat_incentive = _component(fat_inc, m.kg_fat, m.liters)
        elif m.fat < config.standard_fat:
            fat_deduction = _component(fat_ded, m.kg_fat, m.liters)
        if m.snf > config.standard_snf:
            snf_incentive = _component(snf_inc, m.kg_snf, m.liters)
        elif m.snf < config.standard_snf:
            snf_deduction = _component(snf_ded, m.kg_snf, m.liters)
        rate = (
            config.standard_rate
            + fat_incentive
            - fat_deduction
            + snf_incentive
            - snf_deduction
        )
    else:
        chart_rate = ZERO
        for row in config.base_rates:
            if row.fat == m.fat and row.snf == m.snf:
                chart_rate = row.rate
                break
        base_amount = m.liters * chart_rate
        fat_incentive = _component(fat_inc, m.kg_fat, m.liters)
        fat_deduction = _component(fat_ded, m.kg_fat, m.liters)
        snf_incentive = _component(snf_inc, m.kg_snf, m.liters)
        snf_deduction = _component(snf_ded, m.kg_snf, m.liters)
        rate = chart_rate + fat_incentive - fat_deduction + snf_incentive - snf_deduction

    if method == PurchaseMethod.KG_FAT.value:
        if qty_incentive_applies:
            qty_incentive = _qty_incentive(qty_inc, m)
        amount = (
            base_amount
            + fat_incentive
            + snf_incentive
            + qty_incentive
            - (fat_deduction + snf_deduction)
        )
        if extra.value > ZERO:
            extra_amount = extra.value * m.kg_fat
            amount += extra_amount
        if cartage.value > ZERO:
            cartage_amount = _cartage(cartage, m)
            amount += cartage_amount
        if m.liters > ZERO:
            amount += config.cartage_per_liter * m.liters
            amount += config.fixed_cartage_per_shift
        rate = amount / m.liters if m.liters > ZERO else ZERO
        if amount < ZERO:
            amount = ZERO
            rate = ZERO
    else:
        if qty_incentive_applies:
            qty_incentive = _qty_incentive(qty_inc, m)
        if rate < ZERO:
            rate = ZERO
        amount = m.liters * rate + qty_incentive
        if extra.value > ZERO:
            extra_amount = extra.value * m.kg_fat
            amount += extra_amount
            if m.liters > ZERO:
                rate = amount / m.liters
        if cartage.value > ZERO:
            cartage_amount = _cartage(cartage, m)
            amount += cartage_amount
            if m.liters > ZERO:
                rate = amount / m.liters
        if m.liters > ZERO:
            amount += config.fixed_cartage_per_shift

    return CollectionValuation(
        qty_kg=round_money(m.kgs),
        qty=round_money(m.liters),
        fat=quantize(m.fat, 1),
        snf=quantize(m.snf, 2),
        kg_fat=quantize(m.kg_fat, 3),
        kg_snf=quantize(m.kg_snf, 3),
        rate=round_money(rate),
        amount=round_money(amount),
        milk_value=round_money(base_amount),
        fat_incentive=round_money(fat_incentive),
        fat_deduction=round_money(fat_deduction),
        snf_incentive=round_money(snf_incentive),
        snf_deduction=round_money(snf_deduction),
        extra_rate_amount=round_money(extra_amount),
        cartage_amount=round_money(cartage_amount),
        qty_incentive_amount=round_money(qty_incentive),
        bonus_amount=round_money(bonus),
    )


def valuate_from_source(entry: CollectionInput, source: MasterDataSource) -> CollectionValuation:
    """Select the config and farmer for ``entry`` from ``source`` and value it."""
    config = select_config(entry.date, entry.shift, source.rate_configs())
    farmer = source.farmer(entry.farmer_id)
    return valuate_collection(entry, farmer, config)
