"""CLI command handlers.  Each takes the parsed args and an open session."""

import sys
from pathlib import Path

import yaml
from sqlalchemy.orm import Session

from dairy_config import MasterDataSet, load_master_data
from dairy_kernel.domain.records import farmer_to_record, rate_config_to_record
from dairy_kernel.models.bill_period import BillPeriodModel
from dairy_kernel.models.farmer import FarmerModel
from dairy_kernel.models.rate_config import RateConfigModel
from dairy_kernel.selectors.farmer_bill_selector import FarmerBillSelector
from dairy_kernel.services import (
    BillPeriodService,
    CollectionService,
    FarmerService,
    LockService,
    RateConfigService,
)
from scripts.dairy_cli.util import fmt_amount, render_bill


def seed_master_data(session: Session, master: MasterDataSet, max_lock_scan_days: int) -> dict[str, int]:
    """Insert master data not yet present (matched by id); locks are applied last."""
    counts = {"bill_periods": 0, "rate_configs": 0, "farmers": 0, "locked_periods": 0}
    locks = LockService(session, max_lock_scan_days)

    periods = BillPeriodService(session)
    for period in master.bill_periods:
        if session.get(BillPeriodModel, period.id) is None:
            periods.create(
                {"id": period.id, "name": period.name,
                 "startDay": period.start_day, "endDay": period.end_day}
            )
            counts["bill_periods"] += 1

    configs = RateConfigService(session, locks)
    for config in master.rate_configs:
        if session.get(RateConfigModel, config.id) is None:
            configs.create(rate_config_to_record(config))
            counts["rate_configs"] += 1

    farmers = FarmerService(session, locks)
    for farmer in master.farmers:
        if session.get(FarmerModel, farmer.id) is None:
            farmers.create(farmer_to_record(farmer))
            counts["farmers"] += 1

    already = set(locks.list_locked())
    for period_id in master.locked_periods:
        if period_id not in already:
            locks.lock_period(period_id)
            counts["locked_periods"] += 1
    return counts


def cmd_seed(args, session: Session, settings) -> int:
    master = load_master_data(args.file)
    counts = seed_master_data(session, master, settings.max_lock_scan_days)
    print(f"Seeded from {args.file} (checksum {master.checksum[:12]})")
    for name, count in counts.items():
        print(f"  {name:<16}{count:>6}")
    return 0


def cmd_import_collections(args, session: Session, settings) -> int:
    with open(Path(args.file)) as f:
        rows = yaml.safe_load(f) or []
    if not isinstance(rows, list):
        print(f"ERROR: {args.file} must contain a list of collection rows", file=sys.stderr)
        return 1
    summary = CollectionService(session, locks=LockService(session, settings.max_lock_scan_days)).bulk_import(rows)
    print(f"Imported {summary.imported}, skipped {summary.skipped}")
    for error in summary.errors:
        print(f"  {error}")
    return 0


def cmd_recalculate(args, session: Session, settings) -> int:
    service = CollectionService(session, locks=LockService(session, settings.max_lock_scan_days))
    summary = service.recalculate(args.from_date, args.to_date, args.from_shift, args.to_shift)
    print(f"Recalculated {summary.updated} collections")
    for error in summary.errors:
        print(f"  {error}")
    return 0


def cmd_toggle_lock(args, session: Session, settings) -> int:
    locked = LockService(session, settings.max_lock_scan_days).toggle_lock(args.period_id)
    state = "locked" if args.period_id in locked else "unlocked"
    print(f"{args.period_id} {state}")
    print("Locked periods: " + (", ".join(locked) if locked else "(none)"))
    return 0


def cmd_list_locks(args, session: Session, settings) -> int:
    locks = LockService(session, settings.max_lock_scan_days)
    for period_id in locks.list_locked():
        print(period_id)
    return 0


def cmd_farmer_bill(args, session: Session, settings) -> int:
    selector = FarmerBillSelector(session)
    bill = selector.bill(args.farmer_id, args.period_id)
    if bill is None:
        print(f"No collections or adjustments for {args.farmer_id} in {args.period_id}")
        return 1
    print(render_bill(bill, selector.period_title(args.period_id)))
    return 0


def cmd_bill_summary(args, session: Session, settings) -> int:
    selector = FarmerBillSelector(session)
    rows = selector.summary(args.period_id, args.branch, args.route)
    print(selector.period_title(args.period_id))
    total = 0
    for row in rows:
        print(f"  {row.code:<8}{row.name:<24}{row.village:<16}{fmt_amount(row.qty_kg):>12}{fmt_amount(row.net_payable):>14}")
        total += row.net_payable
    print(f"  {'Total':<48}{'':>12}{fmt_amount(total):>14}")
    return 0
