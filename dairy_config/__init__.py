"""
Dairy configuration package.

Reads YAML settings and master-data fragments and returns frozen
dataclasses.  Only scripts and tests import this package; kernel services
receive plain values and DTOs.

Usage:
    from dairy_config import load_settings, load_master_data

    settings = load_settings()
    master = load_master_data("dairy_config/defaults/master_data.yaml")
"""

from dairy_config.loader import (
    CONFIG_ENV_VAR,
    DATABASE_URL_ENV_VAR,
    DEFAULT_SETTINGS_PATH,
    compute_checksum,
    load_master_data,
    load_settings,
    parse_master_data,
    parse_settings,
)
from dairy_config.schema import AppSettings, MasterDataSet

DEFAULT_MASTER_DATA_PATH = DEFAULT_SETTINGS_PATH.parent / "master_data.yaml"

__all__ = [
    "AppSettings",
    "CONFIG_ENV_VAR",
    "DATABASE_URL_ENV_VAR",
    "DEFAULT_MASTER_DATA_PATH",
    "DEFAULT_SETTINGS_PATH",
    "MasterDataSet",
    "compute_checksum",
    "load_master_data",
    "load_settings",
    "parse_master_data",
    "parse_settings",
]
