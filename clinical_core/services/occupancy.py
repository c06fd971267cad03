"""
Bed occupancy, ICU capacity and device utilization.

All functions are folds over snapshot records. Rates are whole or one-decimal
percentages and are 0, never undefined, for an empty record set.
"""

from collections import OrderedDict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from clinical_core.domain.models import (
    AdmissionRecord,
    Alert,
    BedRecord,
    BedStatus,
    BedType,
    EquipmentRecord,
    Severity,
)
from clinical_core.domain.payloads import (
    BedResourceReport,
    DeviceCounts,
    DeviceUtilization,
    DeviceView,
    FacilityOccupancy,
    IcuCapacity,
    WardUtilization,
)
from clinical_core.services.alerts import meets_min_severity
from clinical_core.services.numeric import mean_of, round_half_up, round_percent, safe_ratio

UNKNOWN_FACILITY = "Unknown"
DEFAULT_ICU_AVERAGE_STAY_DAYS = 4.2
SECONDS_PER_DAY = 24 * 60 * 60

DEVICE_TYPE_NAMES: dict[str, str] = {
    "ventilator": "Ventilator",
    "monitor": "Cardiac Monitor",
    "pump": "Infusion Pump",
}


@dataclass
class _FacilityCounter:
    facility_id: str
    facility_name: str
    total: int = 0
    occupied: int = 0
    available: int = 0
    maintenance: int = 0

    def add(self, status: BedStatus) -> None:
        self.total += 1
        if status is BedStatus.OCCUPIED:
            self.occupied += 1
        elif status is BedStatus.AVAILABLE:
            self.available += 1
        else:
            self.maintenance += 1

    def freeze(self) -> FacilityOccupancy:
        return FacilityOccupancy(
            facility_id=self.facility_id,
            facility_name=self.facility_name,
            total=self.total,
            occupied=self.occupied,
            available=self.available,
            maintenance=self.maintenance,
            occupancy_rate=round_percent(self.occupied, self.total),
        )


def aggregate_occupancy(beds: Iterable[BedRecord]) -> OrderedDict[str, FacilityOccupancy]:
    """
    Count beds per facility and status.

    Returns:
        Facility id to occupancy, in order of first occurrence.
    """
    counters: OrderedDict[str, _FacilityCounter] = OrderedDict()
    for bed in beds:
        counter = counters.get(bed.facility_id)
        if counter is None:
            counter = counters[bed.facility_id] = _FacilityCounter(
                facility_id=bed.facility_id,
                facility_name=bed.facility_name or UNKNOWN_FACILITY,
            )
        counter.add(bed.status)

    return OrderedDict((key, counter.freeze()) for key, counter in counters.items())


def summarize_bed_resources(occupancy: Iterable[FacilityOccupancy]) -> BedResourceReport:
    rows = [
        WardUtilization(
            ward=facility.facility_name,
            total=facility.total,
            occupied=facility.occupied,
            available=facility.available,
            utilization=facility.occupancy_rate,
        )
        for facility in occupancy
    ]
    total_beds = sum(row.total for row in rows)
    occupied_beds = sum(row.occupied for row in rows)

    return BedResourceReport(
        bed_resources=rows,
        total_beds=total_beds,
        occupied_beds=occupied_beds,
        overall_utilization=round_percent(occupied_beds, total_beds),
    )


def average_stay_days(discharged: Iterable[AdmissionRecord]) -> float | None:
    """Mean length of stay of discharged admissions, None if none have a discharge date."""
    stays = [
        (admission.discharge_date - admission.admission_date).total_seconds() / SECONDS_PER_DAY
        for admission in discharged
        if admission.discharge_date is not None
    ]
    return mean_of(stays) if stays else None


def compute_icu_capacity(
    beds: Iterable[BedRecord],
    discharged_admissions: Iterable[AdmissionRecord] = (),
    alerts: Iterable[Alert] = (),
) -> IcuCapacity:
    """
    ICU bed counts, average stay and the number of high or critical alerts.

    Non-ICU beds in ``beds`` are ignored, so callers may pass a facility's
    full bed list.
    """
    icu_beds = [bed for bed in beds if bed.bed_type is BedType.ICU]
    occupied = sum(1 for bed in icu_beds if bed.status is BedStatus.OCCUPIED)
    available = sum(1 for bed in icu_beds if bed.status is BedStatus.AVAILABLE)
    maintenance = sum(1 for bed in icu_beds if bed.status is BedStatus.MAINTENANCE)

    stay = average_stay_days(discharged_admissions)
    if stay is None:
        stay = DEFAULT_ICU_AVERAGE_STAY_DAYS

    return IcuCapacity(
        total_beds=len(icu_beds),
        available_beds=available,
        occupied_beds=occupied,
        maintenance_beds=maintenance,
        occupancy_rate=round_percent(occupied, len(icu_beds)),
        average_stay=round_half_up(stay, 1),
        active_alerts=sum(1 for a in alerts if meets_min_severity(a.severity, Severity.HIGH)),
    )


def summarize_devices(equipment: Sequence[EquipmentRecord]) -> DeviceUtilization:
    devices = [
        DeviceView(
            id=item.id,
            type=DEVICE_TYPE_NAMES.get(item.equipment_type, item.equipment_type),
            patient=item.patient_number,
            status=item.status,
            location=item.location,
        )
        for item in equipment
    ]
    active = sum(1 for d in devices if d.status == "in-use")

    return DeviceUtilization(
        devices=devices,
        utilization_rate=round_half_up(safe_ratio(active, len(devices)) * 100, 1),
        summary=DeviceCounts(
            total=len(devices),
            active=active,
            available=sum(1 for d in devices if d.status == "available"),
            maintenance=sum(1 for d in devices if d.status == "maintenance"),
        ),
    )


def select_icu_devices(equipment: Iterable[EquipmentRecord]) -> list[EquipmentRecord]:
    """Ventilators, monitors and pumps located in an ICU, grouped by type."""
    selected = [
        item
        for item in equipment
        if item.equipment_type in DEVICE_TYPE_NAMES and "icu" in (item.location or "").lower()
    ]
    return sorted(selected, key=lambda item: item.equipment_type)
