"""Shared fixtures: a fixed clock, an explicit app config and record builders."""

from collections.abc import Callable, Iterator
from datetime import UTC, date, datetime
from typing import Any

import pytest

from clinical_core.config import (
    AggregationConfig,
    AppConfig,
    DataStoreConfig,
    LoggingConfig,
    get_config,
)
from clinical_core.domain.models import (
    Alert,
    BedRecord,
    BedStatus,
    DepartmentMetricSample,
    VitalReading,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        data_store=DataStoreConfig(
            url="http://localhost:54321", timeout_seconds=1.0, max_concurrent_fetches=4
        ),
        aggregation=AggregationConfig(),
        logging=LoggingConfig(),
    )


@pytest.fixture
def make_vital() -> Callable[..., VitalReading]:
    """Vital reading at a safe baseline, with any field overridden."""

    def _make(**overrides: Any) -> VitalReading:
        values: dict[str, Any] = {
            "patient_id": "pat-1",
            "patient_number": "NC360-1001",
            "heart_rate": 75.0,
            "oxygen_saturation": 98.0,
            "bp_systolic": 120.0,
            "bp_diastolic": 80.0,
            "temperature_celsius": 36.8,
            "respiratory_rate": 16.0,
            "recorded_at": NOW,
            "ward": "Medical",
            "bed_number": "M-01",
        }
        values.update(overrides)
        return VitalReading(**values)

    return _make


@pytest.fixture
def make_alert() -> Callable[..., Alert]:
    counter = iter(range(10_000))

    def _make(severity: str = "low", category: str | None = "cardiac", **overrides: Any) -> Alert:
        values: dict[str, Any] = {
            "id": f"alt-{next(counter)}",
            "severity": severity,
            "category": category,
            "title": "Alert",
            "patient_id": "pat-1",
            "created_at": NOW,
        }
        values.update(overrides)
        return Alert(**values)

    return _make


@pytest.fixture
def make_bed() -> Callable[..., BedRecord]:
    def _make(status: str, facility_id: str = "fac-1", **overrides: Any) -> BedRecord:
        values: dict[str, Any] = {
            "facility_id": facility_id,
            "facility_name": "General Hospital",
            "status": BedStatus(status),
        }
        values.update(overrides)
        return BedRecord(**values)

    return _make


@pytest.fixture
def make_sample() -> Callable[..., DepartmentMetricSample]:
    def _make(**overrides: Any) -> DepartmentMetricSample:
        values: dict[str, Any] = {
            "department_id": "dep-1",
            "department_name": "Cardiology",
            "department_code": "CARD",
            "facility_name": "General Hospital",
            "date": date(2025, 3, 1),
            "avg_length_of_stay": 4.0,
            "readmission_rate": 4.0,
            "mortality_rate": 1.0,
            "patient_count": 20,
            "satisfaction_score": 4.6,
        }
        values.update(overrides)
        return DepartmentMetricSample(**values)

    return _make
