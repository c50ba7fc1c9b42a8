"""
Records -- camelCase plain-record conversion for the dairy DTOs.

Responsibility:
    The surrounding CRUD layer, the YAML master-data fragments and the JSON
    columns of the ORM models all speak in flat camelCase records
    (``fatIncRate``, ``fatIncFromDate``, ``fatIncentiveSlabs`` ...).  This
    module is the single translation point between those records and the
    typed DTOs in ``dtos.py``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Parsing never raises on malformed numbers: values go through
      ``safe_decimal`` / ``optional_decimal``.
    - Category field aliases are resolved here and nowhere else:
      value keys ``{p}Rate``, ``{p}RateAmount``, ``{p}Amount``;
      method keys ``{p}Method``, ``{p}Type``, ``{p}RateType``,
      ``{p}PurchaseMethod``.
    - ``*_to_record`` emits Decimal values as strings so the output is
      JSON-safe and round-trips exactly.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from dairy_kernel.domain.dtos import (
    Adjustment,
    AdjustmentType,
    BaseRate,
    BillPeriodDef,
    Category,
    CategorySetting,
    CollectionInput,
    Farmer,
    RateConfig,
    Slab,
    SlabKind,
    Window,
)
from dairy_kernel.domain.values import (
    ZERO,
    optional_decimal,
    parse_date,
    positive_or_none,
    safe_decimal,
    safe_int,
)

_VALUE_SUFFIXES = ("Rate", "RateAmount", "Amount")
_METHOD_SUFFIXES = ("Method", "Type", "RateType", "PurchaseMethod")

_SLAB_BOUNDS: dict[SlabKind, tuple[str, str]] = {
    SlabKind.FAT_INCENTIVE: ("minFat", "maxFat"),
    SlabKind.FAT_DEDUCTION: ("minFat", "maxFat"),
    SlabKind.SNF_INCENTIVE: ("minSnf", "maxSnf"),
    SlabKind.SNF_DEDUCTION: ("minSnf", "maxSnf"),
    SlabKind.QTY_INCENTIVE: ("minQty", "maxQty"),
    SlabKind.BONUS: ("minQty", "maxQty"),
}


def to_date_str(value: Any) -> str | None:
    """
    Normalize a date-ish value to ``YYYY-MM-DD`` (or None when absent).

    Windows compare dates as strings, so "06/10/2025" is stored as
    "2025-06-10".  Text no date format accepts is kept as entered.
    """
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.isoformat()
    text = str(value).strip()
    return text or None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


def _first(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _key(prefix: str, name: str) -> str:
    if prefix:
        return f"{prefix}{name}"
    return name[0].lower() + name[1:]


def _dec_str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


# ---------------------------------------------------------------------------
# Windows, categories, slabs
# ---------------------------------------------------------------------------


def window_from_record(
    record: Mapping[str, Any],
    prefix: str = "",
    default_from_shift: str | None = None,
    default_to_shift: str | None = None,
) -> Window:
    return Window(
        from_date=to_date_str(record.get(_key(prefix, "FromDate"))),
        from_shift=_optional_text(record.get(_key(prefix, "FromShift"))) or default_from_shift,
        to_date=to_date_str(record.get(_key(prefix, "ToDate"))),
        to_shift=_optional_text(record.get(_key(prefix, "ToShift"))) or default_to_shift,
    )


def window_to_record(window: Window, prefix: str = "") -> dict[str, Any]:
    return {
        _key(prefix, "FromDate"): window.from_date,
        _key(prefix, "FromShift"): window.from_shift,
        _key(prefix, "ToDate"): window.to_date,
        _key(prefix, "ToShift"): window.to_shift,
    }


def category_from_record(record: Mapping[str, Any], category: Category) -> CategorySetting:
    prefix = category.value
    rate = _first(record, tuple(f"{prefix}{s}" for s in _VALUE_SUFFIXES))
    method = _first(record, tuple(f"{prefix}{s}" for s in _METHOD_SUFFIXES))
    return CategorySetting(
        rate=safe_decimal(rate),
        method=_optional_text(method),
        threshold=safe_decimal(record.get(f"{prefix}Threshold")),
        window=window_from_record(record, prefix),
    )


def categories_from_record(record: Mapping[str, Any]) -> dict[Category, CategorySetting]:
    return {category: category_from_record(record, category) for category in Category}


def categories_to_record(categories: Mapping[Category, CategorySetting]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for category, setting in categories.items():
        prefix = category.value
        out[f"{prefix}Rate"] = str(setting.rate)
        out[f"{prefix}Method"] = setting.method
        out[f"{prefix}Threshold"] = str(setting.threshold)
        out.update(window_to_record(setting.window, prefix))
    return out


def slab_from_record(record: Mapping[str, Any], kind: SlabKind) -> Slab:
    min_key, max_key = _SLAB_BOUNDS[kind]
    return Slab(
        min_value=optional_decimal(_first(record, (min_key, "min"))),
        max_value=optional_decimal(_first(record, (max_key, "max"))),
        rate=safe_decimal(record.get("rate")),
        method=_optional_text(record.get("method")),
        # Slab shifts default to the full day
        window=window_from_record(record, "", "AM", "PM"),
    )


def slab_to_record(slab: Slab, kind: SlabKind) -> dict[str, Any]:
    min_key, max_key = _SLAB_BOUNDS[kind]
    return {
        min_key: _dec_str(slab.min_value),
        max_key: _dec_str(slab.max_value),
        "rate": str(slab.rate),
        "method": slab.method,
        **window_to_record(slab.window),
    }


def slabs_from_record(record: Mapping[str, Any]) -> dict[SlabKind, tuple[Slab, ...]]:
    slabs: dict[SlabKind, tuple[Slab, ...]] = {}
    for kind in SlabKind:
        raw = record.get(kind.value)
        if isinstance(raw, (list, tuple)) and raw:
            slabs[kind] = tuple(
                slab_from_record(item, kind) for item in raw if isinstance(item, Mapping)
            )
    return slabs


def slabs_to_record(slabs: Mapping[SlabKind, tuple[Slab, ...]]) -> dict[str, list[dict[str, Any]]]:
    return {
        kind.value: [slab_to_record(slab, kind) for slab in items]
        for kind, items in slabs.items()
    }


def base_rates_from_record(raw: Any) -> tuple[BaseRate, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    rows = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        fat = optional_decimal(item.get("fat"))
        snf = optional_decimal(item.get("snf"))
        if fat is None or snf is None:
            continue
        rows.append(BaseRate(fat=fat, snf=snf, rate=safe_decimal(item.get("rate"))))
    return tuple(rows)


def base_rates_to_record(rows: tuple[BaseRate, ...]) -> list[dict[str, str]]:
    return [{"fat": str(r.fat), "snf": str(r.snf), "rate": str(r.rate)} for r in rows]


# ---------------------------------------------------------------------------
# Master data
# ---------------------------------------------------------------------------


def rate_config_from_record(record: Mapping[str, Any]) -> RateConfig:
    return RateConfig(
        id=_text(record.get("id")),
        name=_text(record.get("name")),
        window=window_from_record(record),
        purchase_method=_text(record.get("purchaseMethod")),
        standard_rate=safe_decimal(record.get("standardRate")),
        standard_fat=safe_decimal(record.get("standardFat")),
        standard_snf=safe_decimal(record.get("standardSnf")),
        cartage_per_liter=safe_decimal(record.get("cartagePerLiter")),
        fixed_cartage_per_shift=safe_decimal(record.get("fixedCartagePerShift")),
        categories=categories_from_record(record),
        slabs=slabs_from_record(record),
        base_rates=base_rates_from_record(record.get("baseRates")),
    )


def rate_config_to_record(config: RateConfig) -> dict[str, Any]:
    return {
        "id": config.id,
        "name": config.name,
        **window_to_record(config.window),
        "purchaseMethod": config.purchase_method,
        "standardRate": str(config.standard_rate),
        "standardFat": str(config.standard_fat),
        "standardSnf": str(config.standard_snf),
        "cartagePerLiter": str(config.cartage_per_liter),
        "fixedCartagePerShift": str(config.fixed_cartage_per_shift),
        **categories_to_record(config.categories),
        **slabs_to_record(config.slabs),
        "baseRates": base_rates_to_record(config.base_rates),
    }


def farmer_from_record(record: Mapping[str, Any]) -> Farmer:
    return Farmer(
        id=_text(record.get("id")),
        code=_text(record.get("code")),
        name=_text(record.get("name")),
        mobile=_text(record.get("mobile")),
        village=_text(record.get("village")),
        farmer_category=_text(record.get("category")),
        branch_id=_text(record.get("branchId")),
        route_id=_text(record.get("routeId")),
        bank_name=_text(record.get("bankName")),
        account_number=_text(record.get("accountNumber")),
        ifsc_code=_text(record.get("ifscCode")),
        categories=categories_from_record(record),
        slabs=slabs_from_record(record),
    )


def farmer_to_record(farmer: Farmer) -> dict[str, Any]:
    return {
        "id": farmer.id,
        "code": farmer.code,
        "name": farmer.name,
        "mobile": farmer.mobile,
        "village": farmer.village,
        "category": farmer.farmer_category,
        "branchId": farmer.branch_id,
        "routeId": farmer.route_id,
        "bankName": farmer.bank_name,
        "accountNumber": farmer.account_number,
        "ifscCode": farmer.ifsc_code,
        **categories_to_record(farmer.categories),
        **slabs_to_record(farmer.slabs),
    }


def bill_period_from_record(record: Mapping[str, Any]) -> BillPeriodDef:
    return BillPeriodDef(
        id=_text(record.get("id")),
        name=_text(record.get("name")),
        start_day=safe_int(record.get("startDay"), 1),
        end_day=safe_int(record.get("endDay"), 31),
    )


def adjustment_from_record(record: Mapping[str, Any]) -> Adjustment:
    raw_type = _text(record.get("type")).lower()
    kind = AdjustmentType.DEDUCTION if raw_type == "deduction" else AdjustmentType.ADDITION
    return Adjustment(
        id=_text(record.get("id")),
        farmer_id=_text(record.get("farmerId")),
        bill_period=_text(record.get("billPeriod")),
        head_name=_text(record.get("headName")),
        type=kind,
        amount=safe_decimal(_first(record, ("amount", "defaultValue"))),
        description=_text(record.get("description")),
    )


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


def collection_input_from_record(record: Mapping[str, Any]) -> CollectionInput:
    return CollectionInput(
        date=to_date_str(record.get("date")) or "",
        shift=_text(record.get("shift")),
        farmer_id=_text(record.get("farmerId")),
        qty_kg=safe_decimal(record.get("qtyKg")),
        fat=safe_decimal(record.get("fat")),
        snf=safe_decimal(record.get("snf")),
        qty=positive_or_none(record.get("qty")),
        kg_fat=positive_or_none(record.get("kgFat")),
        kg_snf=positive_or_none(record.get("kgSnf")),
        clr=optional_decimal(record.get("clr")),
    )


def collection_input_to_record(entry: CollectionInput) -> dict[str, Any]:
    return {
        "date": entry.date,
        "shift": entry.shift,
        "farmerId": entry.farmer_id,
        "qtyKg": str(entry.qty_kg),
        "fat": str(entry.fat),
        "snf": str(entry.snf),
        "qty": _dec_str(entry.qty),
        "kgFat": _dec_str(entry.kg_fat),
        "kgSnf": _dec_str(entry.kg_snf),
        "clr": _dec_str(entry.clr),
    }


# Raw fields a collection record must carry to be imported
REQUIRED_COLLECTION_FIELDS = ("date", "shift", "farmerId", "qtyKg", "fat")


def missing_collection_fields(record: Mapping[str, Any]) -> list[str]:
    """Names of required raw fields that are absent, empty or zero."""
    missing = []
    for key in REQUIRED_COLLECTION_FIELDS:
        value = record.get(key)
        if value is None or _text(value) == "":
            missing.append(key)
        elif key in ("qtyKg", "fat") and safe_decimal(value) == ZERO:
            missing.append(key)
    return missing
