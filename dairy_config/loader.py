"""
Configuration Loader (``dairy_config.loader``).

Responsibility
--------------
Loads the settings file and master-data fragments from YAML and parses
them into the frozen dataclasses of ``dairy_config.schema``.  Master-data
entries use the same camelCase field names as collection and farmer
records, and are parsed by ``dairy_kernel.domain.records``.

Architecture position
---------------------
**Config layer**.  Imports kernel DTOs and record parsers; the kernel never
imports this package.  Scripts call ``load_settings`` and
``load_master_data`` and pass the results into kernel services.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; required identifying fields are never defaulted.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  fragment for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError``.
* Wrong value types  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any

import yaml

from dairy_config.schema import AppSettings, MasterDataSet
from dairy_kernel.domain.records import (
    bill_period_from_record,
    farmer_from_record,
    rate_config_from_record,
)

CONFIG_ENV_VAR = "DAIRY_CONFIG"
DATABASE_URL_ENV_VAR = "DATABASE_URL"

DEFAULTS_DIR = Path(__file__).parent / "defaults"
DEFAULT_SETTINGS_PATH = DEFAULTS_DIR / "settings.yaml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")
    return data


def parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"{name}: cannot parse boolean from {value!r}")


def parse_positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name}: expected an integer, got {value!r}") from None
    if number <= 0:
        raise ValueError(f"{name}: must be positive, got {number}")
    return number


def parse_settings(data: dict[str, Any]) -> AppSettings:
    """Parse ``AppSettings`` from the ``database``/``logging``/``locks`` sections."""
    defaults = AppSettings()
    database = data.get("database") or {}
    logging_section = data.get("logging") or {}
    locks = data.get("locks") or {}
    return AppSettings(
        database_url=str(database.get("url", defaults.database_url)),
        echo_sql=parse_bool(database.get("echo", defaults.echo_sql), "database.echo"),
        log_level=str(logging_section.get("level", defaults.log_level)).upper(),
        max_lock_scan_days=parse_positive_int(
            locks.get("max_scan_days", defaults.max_lock_scan_days),
            "locks.max_scan_days",
        ),
    )


def load_settings(path: str | Path | None = None) -> AppSettings:
    """
    Load runtime settings.

    The file is ``path``, else ``$DAIRY_CONFIG``, else the packaged
    defaults.  ``$DATABASE_URL`` overrides the configured database URL.
    """
    resolved = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_SETTINGS_PATH)
    settings = parse_settings(load_yaml_file(resolved))
    override = os.environ.get(DATABASE_URL_ENV_VAR)
    if override:
        settings = AppSettings(
            database_url=override,
            echo_sql=settings.echo_sql,
            log_level=settings.log_level,
            max_lock_scan_days=settings.max_lock_scan_days,
        )
    return settings


def _entries(data: dict[str, Any], section: str) -> list[dict[str, Any]]:
    entries = data.get(section) or []
    if not isinstance(entries, list):
        raise ValueError(f"{section}: expected a list, got {type(entries).__name__}")
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"{section}[{index}]: expected a mapping")
    return entries


def _require(entry: dict[str, Any], section: str, index: int, *keys: str) -> None:
    for key in keys:
        if entry.get(key) in (None, ""):
            raise KeyError(f"{section}[{index}]: missing required field {key!r}")


def parse_master_data(data: dict[str, Any]) -> MasterDataSet:
    """Parse a master-data document into a ``MasterDataSet``."""
    bill_periods = []
    for index, entry in enumerate(_entries(data, "bill_periods")):
        _require(entry, "bill_periods", index, "id", "startDay", "endDay")
        bill_periods.append(bill_period_from_record(entry))

    rate_configs = []
    for index, entry in enumerate(_entries(data, "rate_configs")):
        _require(entry, "rate_configs", index, "id", "purchaseMethod")
        rate_configs.append(rate_config_from_record(entry))

    farmers = []
    for index, entry in enumerate(_entries(data, "farmers")):
        _require(entry, "farmers", index, "id", "code", "name")
        farmers.append(farmer_from_record(entry))

    locked = data.get("locked_periods") or []
    if not isinstance(locked, list):
        raise ValueError("locked_periods: expected a list of period ids")

    return MasterDataSet(
        bill_periods=tuple(bill_periods),
        rate_configs=tuple(rate_configs),
        farmers=tuple(farmers),
        locked_periods=tuple(str(p) for p in locked),
        checksum=compute_checksum(data),
    )


def load_master_data(path: str | Path) -> MasterDataSet:
    return parse_master_data(load_yaml_file(Path(path)))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
