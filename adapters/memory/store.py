"""
In-memory clinical data store.

Implements the ClinicalDataStore protocol over plain lists so the engine can
run without a database: in tests, in the console demo and in local
development. Filtering and ordering follow the production store contract:
- Facility filters match the record's ``facility_id`` exactly
- Ward filters match case-insensitively on a substring ("icu" matches "ICU-A")
- Time-stamped sequences come back newest first
"""

import asyncio
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import TypeVar

import structlog

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
from clinical_core.services.alerts import meets_min_severity

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT")


def _for_facility(records: Iterable[RecordT], facility_id: str | None) -> list[RecordT]:
    if facility_id is None:
        return list(records)
    return [r for r in records if getattr(r, "facility_id", None) == facility_id]


def _limited(records: list[RecordT], limit: int | None) -> list[RecordT]:
    return records[:limit] if limit else records


class InMemoryClinicalStore:
    """
    Clinical data store backed by in-process lists.

    Operations named in ``fail_on`` raise ConnectionError and ``delay_seconds``
    is awaited before every read, so callers can exercise fallbacks and
    timeouts.
    """

    def __init__(
        self,
        store_name: str = "memory",
        *,
        admissions: Sequence[AdmissionRecord] = (),
        vitals: Sequence[VitalReading] = (),
        alerts: Sequence[Alert] = (),
        beds: Sequence[BedRecord] = (),
        department_samples: Sequence[DepartmentMetricSample] = (),
        hospital_metrics: Sequence[HospitalMetricSample] = (),
        lab_orders: Sequence[LabOrder] = (),
        patients: Sequence[PatientRef] = (),
        equipment: Sequence[EquipmentRecord] = (),
        staff_ratios: Sequence[StaffRatioRecord] = (),
        supplies: Sequence[SupplyRecord] = (),
        fail_on: Iterable[str] = (),
        delay_seconds: float = 0.0,
    ) -> None:
        self.store_name = store_name
        self.admissions = list(admissions)
        self.vitals = list(vitals)
        self.alerts = list(alerts)
        self.beds = list(beds)
        self.department_samples = list(department_samples)
        self.hospital_metrics = list(hospital_metrics)
        self.lab_orders = list(lab_orders)
        self.patients = list(patients)
        self.equipment = list(equipment)
        self.staff_ratios = list(staff_ratios)
        self.supplies = list(supplies)

        self.fail_on = set(fail_on)
        self.delay_seconds = delay_seconds
        self.calls: list[str] = []
        self.logger = logger.bind(store=store_name)

    async def _read(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if operation in self.fail_on:
            self.logger.debug("simulated_store_failure", operation=operation)
            raise ConnectionError(f"{self.store_name}: {operation} unavailable")

    async def fetch_admissions(
        self,
        facility_id: str | None,
        since: datetime | None,
        *,
        admission_type: AdmissionType | None = None,
        status: AdmissionStatus | None = None,
        ward: str | None = None,
        limit: int | None = None,
    ) -> list[AdmissionRecord]:
        await self._read("fetch_admissions")

        rows = _for_facility(self.admissions, facility_id)
        if since is not None:
            rows = [a for a in rows if a.admission_date >= since]
        if admission_type is not None:
            rows = [a for a in rows if a.admission_type is admission_type]
        if status is not None:
            rows = [a for a in rows if a.status is status]
        if ward:
            rows = [a for a in rows if ward.lower() in (a.ward or "").lower()]

        rows.sort(key=lambda a: a.admission_date, reverse=True)
        return _limited(rows, limit)

    async def fetch_latest_vitals(
        self,
        *,
        patient_id: str | None = None,
        facility_id: str | None = None,
        limit: int | None = 50,
    ) -> list[VitalReading]:
        await self._read("fetch_latest_vitals")

        rows = _for_facility(self.vitals, facility_id)
        if patient_id is not None:
            rows = [v for v in rows if v.patient_id == patient_id]

        rows.sort(key=lambda v: v.recorded_at, reverse=True)
        return _limited(rows, limit)

    async def fetch_unresolved_alerts(
        self, facility_id: str | None = None, min_severity: Severity | None = None
    ) -> list[Alert]:
        await self._read("fetch_unresolved_alerts")

        rows = [
            a
            for a in _for_facility(self.alerts, facility_id)
            if not a.resolved and meets_min_severity(a.severity, min_severity)
        ]
        rows.sort(key=lambda a: a.created_at, reverse=True)
        return rows

    async def fetch_beds(
        self, facility_id: str | None = None, bed_type: BedType | None = None
    ) -> list[BedRecord]:
        await self._read("fetch_beds")

        rows = _for_facility(self.beds, facility_id)
        if bed_type is not None:
            rows = [b for b in rows if b.bed_type is bed_type]
        return rows

    async def fetch_department_samples(
        self, facility_id: str | None, since_date: date
    ) -> list[DepartmentMetricSample]:
        await self._read("fetch_department_samples")

        rows = [
            s for s in _for_facility(self.department_samples, facility_id) if s.date >= since_date
        ]
        rows.sort(key=lambda s: s.date, reverse=True)
        return rows

    async def fetch_hospital_metrics(
        self, facility_id: str | None, since_date: date
    ) -> list[HospitalMetricSample]:
        await self._read("fetch_hospital_metrics")

        rows = [
            s for s in _for_facility(self.hospital_metrics, facility_id) if s.date >= since_date
        ]
        rows.sort(key=lambda s: s.date, reverse=True)
        return rows

    async def fetch_lab_orders(self, facility_id: str | None, since: datetime) -> list[LabOrder]:
        await self._read("fetch_lab_orders")

        rows = [o for o in _for_facility(self.lab_orders, facility_id) if o.ordered_at >= since]
        rows.sort(key=lambda o: o.ordered_at, reverse=True)
        return rows

    async def fetch_patients(
        self, *, facility_id: str | None = None, county_id: str | None = None
    ) -> list[PatientRef]:
        await self._read("fetch_patients")

        rows = _for_facility(self.patients, facility_id)
        if county_id is not None:
            rows = [p for p in rows if p.county_id == county_id]
        return rows

    async def fetch_equipment(self, facility_id: str | None = None) -> list[EquipmentRecord]:
        await self._read("fetch_equipment")
        return _for_facility(self.equipment, facility_id)

    async def fetch_staff_ratios(self, facility_id: str | None = None) -> list[StaffRatioRecord]:
        await self._read("fetch_staff_ratios")
        return _for_facility(self.staff_ratios, facility_id)

    async def fetch_supplies(self, facility_id: str | None = None) -> list[SupplyRecord]:
        await self._read("fetch_supplies")
        return _for_facility(self.supplies, facility_id)
