"""
Upstream record access with concurrent fan-out.

Key patterns:
- Protocol-based data store so any backend (SQL, REST, in-memory) plugs in
- Result type for expected fetch failures instead of exceptions
- Structured concurrency with asyncio.TaskGroup
- Per-fetch timeout and a concurrency cap
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, datetime
from typing import Any, Generic, Protocol, TypeVar

import structlog
from pydantic import BaseModel, Field

from clinical_core.domain.models import (
    AdmissionRecord,
    AdmissionStatus,
    AdmissionType,
    Alert,
    BedRecord,
    BedType,
    DepartmentMetricSample,
    EquipmentRecord,
    HospitalMetricSample,
    LabOrder,
    PatientRef,
    Severity,
    StaffRatioRecord,
    SupplyRecord,
    VitalReading,
)

# Configure structured logging (production-ready observability)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)
RecordT = TypeVar("RecordT")


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    An unreachable data store is an expected condition for a dashboard: the
    caller decides whether to substitute a fallback or an empty input.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_or(self, default: Any) -> Any:
        return self._value if self._error is None else default

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error


class ClinicalDataStore(Protocol):
    """
    Read access to the hospital data store.

    Implementations apply the filters themselves and raise on failure; the
    engine never builds queries. Sequences come back newest first where a
    timestamp exists.
    """

    store_name: str

    async def fetch_admissions(
        self,
        facility_id: str | None,
        since: datetime | None,
        *,
        admission_type: AdmissionType | None = None,
        status: AdmissionStatus | None = None,
        ward: str | None = None,
        limit: int | None = None,
    ) -> list[AdmissionRecord]: ...

    async def fetch_latest_vitals(
        self,
        *,
        patient_id: str | None = None,
        facility_id: str | None = None,
        limit: int | None = 50,
    ) -> list[VitalReading]: ...

    async def fetch_unresolved_alerts(
        self, facility_id: str | None = None, min_severity: Severity | None = None
    ) -> list[Alert]: ...

    async def fetch_beds(
        self, facility_id: str | None = None, bed_type: BedType | None = None
    ) -> list[BedRecord]: ...

    async def fetch_department_samples(
        self, facility_id: str | None, since_date: date
    ) -> list[DepartmentMetricSample]: ...

    async def fetch_hospital_metrics(
        self, facility_id: str | None, since_date: date
    ) -> list[HospitalMetricSample]: ...

    async def fetch_lab_orders(
        self, facility_id: str | None, since: datetime
    ) -> list[LabOrder]: ...

    async def fetch_patients(
        self, *, facility_id: str | None = None, county_id: str | None = None
    ) -> list[PatientRef]: ...

    async def fetch_equipment(self, facility_id: str | None = None) -> list[EquipmentRecord]: ...

    async def fetch_staff_ratios(
        self, facility_id: str | None = None
    ) -> list[StaffRatioRecord]: ...

    async def fetch_supplies(self, facility_id: str | None = None) -> list[SupplyRecord]: ...


FetchFactory = Callable[[], Awaitable[Sequence[Any]]]


class FetchConfig(BaseModel):
    """Limits applied to every upstream read."""

    timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Timeout for an individual fetch in seconds.",
    )
    max_concurrent_fetches: int = Field(
        default=8,
        gt=0,
        description="Max number of fetches in flight at once.",
    )


class RecordFetcher:
    """
    Runs independent store reads concurrently and reports each as a Result.

    Design principles:
    - One failing or slow read never cancels its siblings
    - Results are keyed by name, so completion order is irrelevant
    - Observable (structured logging per failed read and per batch)
    """

    def __init__(self, config: FetchConfig | None = None) -> None:
        self.config = config or FetchConfig()
        self.logger = logger.bind(component="record_fetcher")

    async def _guarded(
        self, name: str, factory: FetchFactory, semaphore: asyncio.Semaphore
    ) -> Result[Sequence[Any], Exception]:
        async with semaphore:
            try:
                records = await asyncio.wait_for(factory(), timeout=self.config.timeout_seconds)
            except TimeoutError as e:
                self.logger.warning(
                    "record_fetch_timeout",
                    fetch=name,
                    timeout_seconds=self.config.timeout_seconds,
                )
                return Result.err(e)
            except Exception as e:
                self.logger.warning("record_fetch_failed", fetch=name, error=str(e))
                return Result.err(e)

        return Result.ok(list(records))

    async def gather(
        self, requests: dict[str, FetchFactory]
    ) -> dict[str, Result[Sequence[Any], Exception]]:
        """
        Fetch every named request concurrently.

        Args:
            requests: Name to zero-argument coroutine factory.

        Returns:
            Name to Result, one entry per request.
        """
        start_time = time.perf_counter()
        semaphore = asyncio.Semaphore(self.config.max_concurrent_fetches)

        async with asyncio.TaskGroup() as task_group:
            tasks = {
                name: task_group.create_task(self._guarded(name, factory, semaphore), name=name)
                for name, factory in requests.items()
            }

        results = {name: task.result() for name, task in tasks.items()}
        failed = [name for name, result in results.items() if result.is_err()]

        self.logger.info(
            "record_fetch_completed",
            total_fetches=len(results),
            failed_fetches=failed,
            duration_seconds=round(time.perf_counter() - start_time, 3),
        )
        return results

    async def fetch_each(
        self, name: str, factories: Sequence[FetchFactory]
    ) -> list[Result[Sequence[Any], Exception]]:
        """Run one fetch per entity concurrently, results in input order."""
        keyed = {f"{name}[{index}]": factory for index, factory in enumerate(factories)}
        results = await self.gather(keyed) if keyed else {}
        return [results[key] for key in keyed]


def records_or_none(result: Result[Sequence[RecordT], Exception]) -> list[RecordT] | None:
    """Unwrap a fetch result into records, or None when the fetch failed."""
    return None if result.is_err() else list(result.unwrap())
