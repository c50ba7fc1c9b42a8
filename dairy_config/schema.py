"""
Configuration schema.

Frozen dataclasses for the two YAML artifacts the project reads:

  AppSettings    = runtime settings (database, logging, lock scan limit)
  MasterDataSet  = seed master data (bill periods, rate configs, farmers,
                   locked period ids) parsed into kernel DTOs
"""

from __future__ import annotations

from dataclasses import dataclass

from dairy_engines.locks import DEFAULT_MAX_LOCK_SCAN_DAYS
from dairy_kernel.domain.dtos import BillPeriodDef, Farmer, RateConfig


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings."""

    database_url: str = "sqlite:///dairy.db"
    echo_sql: bool = False
    log_level: str = "INFO"
    max_lock_scan_days: int = DEFAULT_MAX_LOCK_SCAN_DAYS


@dataclass(frozen=True)
class MasterDataSet:
    """Master data fragment, in file order (order matters for first-match)."""

    bill_periods: tuple[BillPeriodDef, ...] = ()
    rate_configs: tuple[RateConfig, ...] = ()
    farmers: tuple[Farmer, ...] = ()
    locked_periods: tuple[str, ...] = ()
    checksum: str = ""
