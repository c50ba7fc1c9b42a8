"""
Module: dairy_kernel.models.mapping
Responsibility: Convert between ORM rows and the frozen domain DTOs.
Architecture position: Kernel > Models.  Imports models and
    dairy_kernel.domain only; services and selectors call in here so that
    no engine ever sees an ORM object.

Invariants enforced:
    - JSON columns hold the camelCase record shape produced by
      dairy_kernel.domain.records, so parsing is shared with YAML and bulk
      input.
    - ``apply_*`` functions overwrite every mapped column they own; partial
      updates are merged at the record level before reaching here.
"""

from decimal import Decimal

from dairy_kernel.domain.dtos import (
    Adjustment,
    AdjustmentType,
    BillPeriodDef,
    CollectionInput,
    CollectionRecord,
    CollectionValuation,
    Farmer,
    RateConfig,
    Window,
)
from dairy_kernel.domain.records import (
    base_rates_from_record,
    base_rates_to_record,
    categories_from_record,
    categories_to_record,
    slabs_from_record,
    slabs_to_record,
)
from dairy_kernel.domain.values import ZERO, quantize
from dairy_kernel.models.adjustment import AdjustmentModel
from dairy_kernel.models.bill_period import BillPeriodModel
from dairy_kernel.models.collection import CollectionModel
from dairy_kernel.models.farmer import FarmerModel
from dairy_kernel.models.rate_config import RateConfigModel


def _dec(value: Decimal | None) -> Decimal:
    return ZERO if value is None else Decimal(value)


def _opt_dec(value: Decimal | None) -> Decimal | None:
    return None if value is None else Decimal(value)


# ---------------------------------------------------------------------------
# Rate configs
# ---------------------------------------------------------------------------


def rate_config_to_dto(model: RateConfigModel) -> RateConfig:
    return RateConfig(
        id=model.id,
        name=model.name or "",
        window=Window(model.from_date, model.from_shift, model.to_date, model.to_shift),
        purchase_method=model.purchase_method or "",
        standard_rate=_dec(model.standard_rate),
        standard_fat=_dec(model.standard_fat),
        standard_snf=_dec(model.standard_snf),
        cartage_per_liter=_dec(model.cartage_per_liter),
        fixed_cartage_per_shift=_dec(model.fixed_cartage_per_shift),
        categories=categories_from_record(model.category_settings or {}),
        slabs=slabs_from_record(model.slabs or {}),
        base_rates=base_rates_from_record(model.base_rates or []),
    )


def apply_rate_config(model: RateConfigModel, config: RateConfig) -> RateConfigModel:
    model.name = config.name
    model.from_date = config.window.from_date
    model.from_shift = config.window.from_shift
    model.to_date = config.window.to_date
    model.to_shift = config.window.to_shift
    model.purchase_method = config.purchase_method
    model.standard_rate = config.standard_rate
    model.standard_fat = config.standard_fat
    model.standard_snf = config.standard_snf
    model.cartage_per_liter = config.cartage_per_liter
    model.fixed_cartage_per_shift = config.fixed_cartage_per_shift
    model.category_settings = categories_to_record(config.categories)
    model.slabs = slabs_to_record(config.slabs)
    model.base_rates = base_rates_to_record(config.base_rates)
    return model


# ---------------------------------------------------------------------------
# Farmers
# ---------------------------------------------------------------------------


def farmer_to_dto(model: FarmerModel) -> Farmer:
    return Farmer(
        id=model.id,
        code=model.code or "",
        name=model.name or "",
        mobile=model.mobile or "",
        village=model.village or "",
        farmer_category=model.category or "",
        branch_id=model.branch_id or "",
        route_id=model.route_id or "",
        bank_name=model.bank_name or "",
        account_number=model.account_number or "",
        ifsc_code=model.ifsc_code or "",
        categories=categories_from_record(model.category_settings or {}),
        slabs=slabs_from_record(model.slabs or {}),
    )


def apply_farmer(model: FarmerModel, farmer: Farmer) -> FarmerModel:
    model.code = farmer.code
    model.name = farmer.name
    model.mobile = farmer.mobile
    model.village = farmer.village
    model.category = farmer.farmer_category
    model.branch_id = farmer.branch_id
    model.route_id = farmer.route_id
    model.bank_name = farmer.bank_name
    model.account_number = farmer.account_number
    model.ifsc_code = farmer.ifsc_code
    model.category_settings = categories_to_record(farmer.categories)
    model.slabs = slabs_to_record(farmer.slabs)
    return model


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def collection_input_of(model: CollectionModel) -> CollectionInput:
    return CollectionInput(
        date=model.date,
        shift=model.shift,
        farmer_id=model.farmer_id,
        qty_kg=_dec(model.qty_kg),
        fat=_dec(model.fat),
        snf=_dec(model.snf),
        qty=_opt_dec(model.input_qty),
        kg_fat=_opt_dec(model.input_kg_fat),
        kg_snf=_opt_dec(model.input_kg_snf),
        clr=_opt_dec(model.clr),
    )


def valuation_of(model: CollectionModel) -> CollectionValuation:
    return CollectionValuation(
        qty_kg=quantize(_dec(model.qty_kg), 2),
        qty=quantize(_dec(model.qty), 2),
        fat=quantize(_dec(model.fat), 1),
        snf=quantize(_dec(model.snf), 2),
        kg_fat=quantize(_dec(model.kg_fat), 3),
        kg_snf=quantize(_dec(model.kg_snf), 3),
        rate=quantize(_dec(model.rate), 2),
        amount=quantize(_dec(model.amount), 2),
        milk_value=quantize(_dec(model.milk_value), 2),
        fat_incentive=quantize(_dec(model.fat_incentive), 2),
        fat_deduction=quantize(_dec(model.fat_deduction), 2),
        snf_incentive=quantize(_dec(model.snf_incentive), 2),
        snf_deduction=quantize(_dec(model.snf_deduction), 2),
        extra_rate_amount=quantize(_dec(model.extra_rate_amount), 2),
        cartage_amount=quantize(_dec(model.cartage_amount), 2),
        qty_incentive_amount=quantize(_dec(model.qty_incentive_amount), 2),
        bonus_amount=quantize(_dec(model.bonus_amount), 2),
    )


def collection_to_record(model: CollectionModel) -> CollectionRecord:
    return CollectionRecord(
        id=model.id,
        entry=collection_input_of(model),
        valuation=valuation_of(model),
    )


def apply_collection(
    model: CollectionModel,
    entry: CollectionInput,
    valuation: CollectionValuation,
) -> CollectionModel:
    model.date = entry.date
    model.shift = entry.shift
    model.farmer_id = entry.farmer_id
    model.qty_kg = entry.qty_kg
    model.fat = entry.fat
    model.snf = entry.snf
    model.clr = entry.clr
    model.input_qty = entry.qty
    model.input_kg_fat = entry.kg_fat
    model.input_kg_snf = entry.kg_snf
    apply_valuation(model, valuation)
    return model


def apply_valuation(model: CollectionModel, valuation: CollectionValuation) -> CollectionModel:
    model.qty = valuation.qty
    model.kg_fat = valuation.kg_fat
    model.kg_snf = valuation.kg_snf
    model.rate = valuation.rate
    model.amount = valuation.amount
    model.milk_value = valuation.milk_value
    model.fat_incentive = valuation.fat_incentive
    model.fat_deduction = valuation.fat_deduction
    model.snf_incentive = valuation.snf_incentive
    model.snf_deduction = valuation.snf_deduction
    model.extra_rate_amount = valuation.extra_rate_amount
    model.cartage_amount = valuation.cartage_amount
    model.qty_incentive_amount = valuation.qty_incentive_amount
    model.bonus_amount = valuation.bonus_amount
    return model


# ---------------------------------------------------------------------------
# Bill periods and adjustments
# ---------------------------------------------------------------------------


def bill_period_to_dto(model: BillPeriodModel) -> BillPeriodDef:
    return BillPeriodDef(
        id=model.id,
        name=model.name or "",
        start_day=model.start_day,
        end_day=model.end_day,
    )


def adjustment_to_dto(model: AdjustmentModel) -> Adjustment:
    return Adjustment(
        id=model.id,
        farmer_id=model.farmer_id,
        bill_period=model.bill_period,
        head_name=model.head_name or "",
        type=AdjustmentType(model.type),
        amount=_dec(model.amount),
        description=model.description or "",
    )


def apply_adjustment(model: AdjustmentModel, adjustment: Adjustment) -> AdjustmentModel:
    model.farmer_id = adjustment.farmer_id
    model.bill_period = adjustment.bill_period
    model.head_name = adjustment.head_name
    model.type = adjustment.type.value
    model.amount = adjustment.amount
    model.description = adjustment.description
    return model
