"""
Pytest fixtures for the dairy kernel test suite.

Provides:
- Structured logging configured once per session, LogContext isolation
- ``captured_logs`` for asserting on emitted JSON log records
- A fresh in-memory SQLite database per test (``engine``/``session``)
- Builders for rate configs, farmers, bill periods and collection rows

Environment Variables:
- DATABASE_URL: when set to a PostgreSQL URL, tests marked ``postgres`` run
  against it; everything else uses SQLite in memory.
"""

import json
import logging
from io import StringIO
from typing import Any, Generator

import pytest
from sqlalchemy.orm import Session

from dairy_kernel.db.engine import build_engine, create_tables
from dairy_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from dairy_kernel.domain.dtos import BillPeriodDef
from dairy_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from dairy_kernel.services import (
    AdjustmentService,
    BillPeriodService,
    CollectionService,
    FarmerService,
    LockService,
    RateConfigService,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture dairy_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, collection_service):
            collection_service.create(...)
            logs = captured_logs()
            assert any(r["message"] == "collection_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("dairy_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "postgres: mark test as requiring PostgreSQL"
    )


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(scope="function")
def engine():
    """A private in-memory SQLite database with all tables and lock listeners."""
    eng = build_engine("sqlite://")
    create_tables(eng, install_listeners=True)
    yield eng
    eng.dispose()


@pytest.fixture(scope="function")
def session(engine) -> Generator[Session, None, None]:
    sess = Session(bind=engine, expire_on_commit=False)
    yield sess
    try:
        sess.rollback()
    finally:
        sess.close()


@pytest.fixture
def without_listeners():
    """Disable the ORM lock listeners for the duration of one test."""
    unregister_immutability_listeners()
    yield
    register_immutability_listeners()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def lock_service(session) -> LockService:
    return LockService(session)


@pytest.fixture
def collection_service(session, lock_service) -> CollectionService:
    return CollectionService(session, locks=lock_service)


@pytest.fixture
def rate_config_service(session, lock_service) -> RateConfigService:
    return RateConfigService(session, lock_service)


@pytest.fixture
def farmer_service(session, lock_service) -> FarmerService:
    return FarmerService(session, lock_service)


@pytest.fixture
def bill_period_service(session) -> BillPeriodService:
    return BillPeriodService(session)


@pytest.fixture
def adjustment_service(session, lock_service) -> AdjustmentService:
    return AdjustmentService(session, lock_service)


# =============================================================================
# Master-data builders
# =============================================================================

HALF_MONTH_PERIODS = (
    BillPeriodDef(id="P1", name="1st", start_day=1, end_day=15),
    BillPeriodDef(id="P2", name="2nd", start_day=16, end_day=31),
)


def kg_fat_config_record(**overrides: Any) -> dict[str, Any]:
    """The reference kg-fat policy: rate 30 per kg fat, standard 4.0 / 8.5."""
    record: dict[str, Any] = {
        "id": "cfg-kgfat",
        "name": "kg fat 2025",
        "fromDate": "2025-01-01",
        "fromShift": "AM",
        "toDate": "2025-12-31",
        "toShift": "PM",
        "purchaseMethod": "kg_fat",
        "standardRate": "30",
        "standardFat": "4.0",
        "standardSnf": "8.5",
        "fatIncRate": "2",
        "fatIncMethod": "kg_fat",
    }
    record.update(overrides)
    return record


def collection_record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "date": "2025-06-10",
        "shift": "AM",
        "farmerId": "f-1",
        "qtyKg": "100",
        "fat": "5.0",
        "snf": "8.5",
    }
    record.update(overrides)
    return record


@pytest.fixture
def half_month_periods(bill_period_service):
    """Bill periods P1 (1-15) and P2 (16-end of month)."""
    for period in HALF_MONTH_PERIODS:
        bill_period_service.create(
            {"id": period.id, "name": period.name,
             "startDay": period.start_day, "endDay": period.end_day}
        )
    return HALF_MONTH_PERIODS


@pytest.fixture
def kg_fat_config(rate_config_service):
    return rate_config_service.create(kg_fat_config_record())


@pytest.fixture
def farmer(farmer_service):
    return farmer_service.create(
        {"id": "f-1", "code": "1", "name": "Ramesh", "village": "Kothur",
         "branchId": "b1", "routeId": "r1"}
    )


@pytest.fixture
def priced_setup(half_month_periods, kg_fat_config, farmer):
    """Periods, the reference kg-fat config and one farmer."""
    return {"periods": half_month_periods, "config": kg_fat_config, "farmer": farmer}


@pytest.fixture
def make_collection():
    """Factory for raw collection records (defaults: 100 kg, fat 5.0, snf 8.5)."""
    return collection_record


@pytest.fixture
def make_config_record():
    """Factory for rate config records based on the reference kg-fat policy."""
    return kg_fat_config_record
