"""CLI utilities: formatting, logging mute/restore."""

import logging
from decimal import Decimal

from dairy_engines.farmer_bill import FarmerBill


def fmt_amount(v) -> str:
    """Format an amount for display (e.g. 1,234.50)."""
    d = Decimal(str(v))
    return f"{d:,.2f}"


def enable_quiet_logging():
    """Mute console handlers so CLI output stays clean. Returns list to pass to restore_logging."""
    dk_logger = logging.getLogger("dairy_kernel")
    muted = []
    for h in dk_logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            muted.append((h, h.level))
            h.setLevel(logging.CRITICAL + 1)
    return muted


def restore_logging(muted):
    """Restore muted handlers after a quiet-logging section."""
    for h, orig_level in muted:
        h.setLevel(orig_level)


def render_bill(bill: FarmerBill, title: str) -> str:
    lines = [f"Farmer {bill.farmer_id}  {title}", ""]
    lines.append(f"  {'Date':<12}{'Shift':<6}{'Kg':>10}{'Fat':>6}{'SNF':>7}{'Rate':>9}{'Amount':>12}")
    for record in bill.entries:
        v = record.valuation
        lines.append(
            f"  {record.entry.date:<12}{record.entry.shift:<6}{fmt_amount(v.qty_kg):>10}"
            f"{v.fat:>6}{v.snf:>7}{fmt_amount(v.rate):>9}{fmt_amount(v.amount):>12}"
        )
    t = bill.totals
    lines.append("")
    lines.append(f"  Quantity (kg)     {fmt_amount(t.qty_kg):>14}   avg fat {t.avg_fat}  avg snf {t.avg_snf}")
    lines.append(f"  Milk value        {fmt_amount(t.milk_value):>14}")
    lines.append(f"  Incentives        {fmt_amount(t.fat_incentive + t.snf_incentive + t.qty_incentive):>14}")
    lines.append(f"  Extra + cartage   {fmt_amount(t.extra + t.cartage):>14}")
    for a in bill.additions:
        lines.append(f"  + {a.head_name:<15} {fmt_amount(a.amount):>14}")
    for a in bill.deductions:
        lines.append(f"  - {a.head_name:<15} {fmt_amount(a.amount):>14}")
    lines.append(f"  Total earnings    {fmt_amount(bill.total_earnings):>14}")
    lines.append(f"  Total deductions  {fmt_amount(bill.total_deductions):>14}")
    lines.append(f"  Net payable       {fmt_amount(bill.net_payable):>14}")
    if t.bonus:
        lines.append(f"  (bonus, paid separately: {fmt_amount(t.bonus)})")
    return "\n".join(lines)
