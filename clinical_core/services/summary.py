"""
Dashboard payload composition.

One pure function per use case. Each takes the records fetched for that use
case and returns the payload the transport layer serializes.

Key rules:
- Any input may be None (the fetch failed) or empty
- A failed lab, distribution, staff or supply fetch yields a fixed sample so
  the dashboard keeps rendering; every other failed input is treated as empty
- Nothing here performs I/O or reads the clock unless ``now`` is omitted
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

import structlog

from clinical_core.domain.models import (
    AdmissionRecord,
    Alert,
    BedRecord,
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
from clinical_core.domain.payloads import (
    AlertView,
    BedResourceReport,
    ClinicalAlertFeed,
    CriticalAlertFeed,
    DashboardFilters,
    DashboardOverview,
    DepartmentReport,
    DistributionReport,
    IcuCommandCenter,
    KpiReport,
    LabMetrics,
    LabReport,
    LabTestCount,
    LiveVitalsReport,
    MonitoringCounts,
    MonitoringFeed,
    PatientStatus,
    RegionShare,
    StaffReport,
    SupplyReport,
)
from clinical_core.services.admissions import compute_admission_stats, compute_emergency_load
from clinical_core.services.alerts import (
    aggregate_alerts_by_category,
    build_critical_alert_feed,
    critical_only,
    filter_by_min_severity,
)
from clinical_core.services.distribution import (
    DEFAULT_TOP_N,
    UNKNOWN_PATIENT_REGION,
    UNKNOWN_REGION,
    distribute_by_region,
)
from clinical_core.services.laboratory import compute_lab_metrics, turnaround_hours
from clinical_core.services.numeric import round_half_up
from clinical_core.services.occupancy import (
    aggregate_occupancy,
    compute_icu_capacity,
    select_icu_devices,
    summarize_bed_resources,
    summarize_devices,
)
from clinical_core.services.performance import (
    calculate_clinical_kpis,
    score_departments,
    summarize_cohort,
)
from clinical_core.services.resources import summarize_staff, summarize_supplies
from clinical_core.services.vitals import build_live_vitals, build_patient_status

logger = structlog.get_logger(__name__)


# Fixed samples shown when the corresponding fetch fails

LAB_FALLBACK = LabMetrics(
    tests_today=150,
    avg_turnaround_time=3.4,
    pending_results=15,
    completed_tests=135,
    top_tests=[
        LabTestCount(test_type="CBC", count=45, icon="🩸"),
        LabTestCount(test_type="Blood Chemistry", count=38, icon="🧪"),
        LabTestCount(test_type="Urinalysis", count=32, icon="🥛"),
        LabTestCount(test_type="COVID-19 PCR", count=28, icon="🦠"),
        LabTestCount(test_type="Liver Function", count=22, icon="🫘"),
    ],
)

DISTRIBUTION_FALLBACK = [
    RegionShare(region_name="Nairobi Central", count=145, percentage=35.2),
    RegionShare(region_name="Westlands", count=98, percentage=23.8),
    RegionShare(region_name="Eastlands", count=76, percentage=18.4),
    RegionShare(region_name="Kileleshwa", count=54, percentage=13.1),
    RegionShare(region_name="Other Areas", count=39, percentage=9.5),
]
DISTRIBUTION_FALLBACK_TOTAL = 412

# (department, nurses, patients, ratio, target, status)
_STAFF_FALLBACK_ROWS = (
    ("ICU", 8, 12, 1.5, 2.0, "low"),
    ("Surgery", 6, 32, 5.3, 4.0, "over"),
    ("Pediatrics", 4, 18, 4.5, 4.0, "good"),
    ("General", 12, 45, 3.8, 4.0, "good"),
)
STAFF_FALLBACK = [
    StaffRatioRecord(
        department=department,
        nurses_on_duty=nurses,
        total_patients=patients,
        ratio=ratio,
        target_ratio=target,
        status=status,
    )
    for department, nurses, patients, ratio, target, status in _STAFF_FALLBACK_ROWS
]

SUPPLY_FALLBACK = [
    SupplyRecord(
        item="N95 Masks", current_stock=450, minimum_level=200, maximum_level=800, status="good"
    ),
    SupplyRecord(
        item="Surgical Gloves",
        current_stock=2400,
        minimum_level=1000,
        maximum_level=5000,
        status="good",
    ),
    SupplyRecord(
        item="Hand Sanitizer", current_stock=85, minimum_level=100, maximum_level=300, status="low"
    ),
    SupplyRecord(
        item="Oxygen Tanks", current_stock=45, minimum_level=30, maximum_level=80, status="good"
    ),
    SupplyRecord(
        item="IV Bags", current_stock=180, minimum_level=150, maximum_level=500, status="good"
    ),
    SupplyRecord(
        item="Syringes", current_stock=950, minimum_level=500, maximum_level=2000, status="good"
    ),
]

# Patient statuses counted in the monitoring summary
CRITICAL_STATUS = "critical"
MONITORING_STATUS = "monitoring"
STABLE_STATUS = "stable"


def _or_empty(records: Sequence | None) -> Sequence:
    return records if records is not None else ()


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def _pair_latest(
    admissions: Sequence[AdmissionRecord],
    latest_vitals: Sequence[VitalReading | None] | None,
) -> list[tuple[AdmissionRecord, VitalReading | None]]:
    """Pair each admission with its latest reading by position; missing readings become None."""
    readings = list(latest_vitals or ())
    readings.extend([None] * (len(admissions) - len(readings)))
    return list(zip(admissions, readings))


# Overview


def compose_dashboard_overview(
    *,
    admissions: Sequence[AdmissionRecord] | None,
    beds: Sequence[BedRecord] | None,
    lab_orders: Sequence[LabOrder] | None,
    alerts: Sequence[Alert] | None,
    patients: Sequence[PatientRef] | None,
    filters: DashboardFilters,
    critical_alert_limit: int = 10,
    region_top_n: int = DEFAULT_TOP_N,
    now: datetime | None = None,
) -> DashboardOverview:
    """
    Executive overview for one facility or county.

    Args:
        admissions: Admissions inside the resolved timeframe, any type.
        beds: Current bed snapshot.
        lab_orders: Orders placed inside the timeframe.
        alerts: Unresolved alerts; only critical ones are shown.
        patients: Patients in scope, for the regional split.
        filters: Echo of the request filters.
    """
    current = _now(now)
    admitted = _or_empty(admissions)

    return DashboardOverview(
        admissions=compute_admission_stats(admitted, current),
        bed_occupancy=list(aggregate_occupancy(_or_empty(beds)).values()),
        emergency=compute_emergency_load(admitted),
        laboratory=compute_lab_metrics(lab_orders) if lab_orders is not None else LAB_FALLBACK,
        alerts=build_critical_alert_feed(_or_empty(alerts), critical_alert_limit, current),
        patient_distribution=distribute_by_region(
            (p.region for p in _or_empty(patients)), UNKNOWN_REGION, region_top_n
        ),
        filters=filters,
        timestamp=current,
    )


# ICU and patient monitoring


def compose_icu_command_center(
    *,
    beds: Sequence[BedRecord] | None,
    discharged_admissions: Sequence[AdmissionRecord] | None,
    active_admissions: Sequence[AdmissionRecord] | None,
    latest_vitals: Sequence[VitalReading | None] | None,
    equipment: Sequence[EquipmentRecord] | None,
    alerts: Sequence[Alert] | None,
    alert_limit: int = 10,
    now: datetime | None = None,
) -> IcuCommandCenter:
    """
    ICU wall display: capacity, anonymized patients, devices and urgent alerts.

    ``latest_vitals`` is positional: entry i is the newest reading of the
    patient in ``active_admissions[i]``, or None.
    """
    current = _now(now)
    urgent = filter_by_min_severity(_or_empty(alerts), Severity.HIGH)

    patients = [
        build_patient_status(admission, latest, current, anonymize=True)
        for admission, latest in _pair_latest(_or_empty(active_admissions), latest_vitals)
    ]

    return IcuCommandCenter(
        capacity=compute_icu_capacity(
            _or_empty(beds), _or_empty(discharged_admissions), urgent
        ),
        patients=patients,
        devices=summarize_devices(select_icu_devices(_or_empty(equipment))),
        alerts=[AlertView.from_alert(alert) for alert in urgent[:alert_limit]],
        timestamp=current,
    )


def _count_statuses(patients: Iterable[PatientStatus]) -> MonitoringCounts:
    statuses = [p.status for p in patients]
    return MonitoringCounts(
        total_patients=len(statuses),
        critical_count=statuses.count(CRITICAL_STATUS),
        monitoring_count=statuses.count(MONITORING_STATUS),
        stable_count=statuses.count(STABLE_STATUS),
    )


def compose_monitoring_feed(
    *,
    active_admissions: Sequence[AdmissionRecord] | None,
    latest_vitals: Sequence[VitalReading | None] | None,
    live_readings: Sequence[VitalReading] | None,
    alerts: Sequence[Alert] | None,
    status: str | None = None,
    alert_limit: int = 20,
    now: datetime | None = None,
) -> MonitoringFeed:
    """
    Ward monitoring board.

    Patients are optionally filtered by their patient status after the
    readings are joined. Alerts without a patient are dropped before the
    newest ``alert_limit`` are grouped by category.
    """
    current = _now(now)
    patients = [
        build_patient_status(admission, latest, current)
        for admission, latest in _pair_latest(_or_empty(active_admissions), latest_vitals)
    ]
    if status:
        patients = [p for p in patients if p.status == status]

    patient_alerts = [a for a in _or_empty(alerts) if a.patient_id is not None][:alert_limit]

    return MonitoringFeed(
        active_patients=patients,
        live_vitals=build_live_vitals(_or_empty(live_readings)),
        clinical_alerts=aggregate_alerts_by_category(patient_alerts, patient_only=True),
        summary=_count_statuses(patients),
        timestamp=current,
    )


def compose_live_vitals(
    readings: Sequence[VitalReading] | None, now: datetime | None = None
) -> LiveVitalsReport:
    vitals = build_live_vitals(_or_empty(readings))
    return LiveVitalsReport(vitals=vitals, count=len(vitals), timestamp=_now(now))


# Outcomes


def compose_department_report(
    samples: Sequence[DepartmentMetricSample] | None,
    attention_limit: int = 3,
    now: datetime | None = None,
) -> DepartmentReport:
    ranked = score_departments(_or_empty(samples))
    return DepartmentReport(
        departments=ranked,
        summary=summarize_cohort(ranked, attention_limit),
        timestamp=_now(now),
    )


def compose_kpi_report(
    *,
    hospital_metrics: Sequence[HospitalMetricSample] | None,
    department_samples: Sequence[DepartmentMetricSample] | None,
    lab_orders: Sequence[LabOrder] | None,
    timeframe: str,
    now: datetime | None = None,
) -> KpiReport:
    """
    Facility KPIs plus the scored department cohort.

    A failed or empty hospital metrics fetch yields the KPI baseline. Lab
    turnaround comes from completed orders in the window when there are any.
    """
    turnaround = turnaround_hours(lab_orders) if lab_orders else None
    kpis = calculate_clinical_kpis(
        _or_empty(hospital_metrics),
        round_half_up(turnaround, 1) if turnaround is not None else None,
    )
    return KpiReport(
        kpis=kpis,
        departments=score_departments(_or_empty(department_samples)),
        timeframe=timeframe,
        timestamp=_now(now),
    )


# Alerts


def compose_clinical_alert_feed(
    alerts: Sequence[Alert] | None, now: datetime | None = None
) -> ClinicalAlertFeed:
    groups = aggregate_alerts_by_category(_or_empty(alerts), patient_only=True)
    return ClinicalAlertFeed(
        alerts=groups,
        total_alerts=sum(group.count for group in groups),
        timestamp=_now(now),
    )


def compose_critical_alert_feed(
    alerts: Sequence[Alert] | None, limit: int = 10, now: datetime | None = None
) -> CriticalAlertFeed:
    current = _now(now)
    critical = critical_only(_or_empty(alerts))
    feed = build_critical_alert_feed(critical, limit, current)
    return CriticalAlertFeed(critical_alerts=feed, total_count=len(critical), timestamp=current)


# Patients, laboratory and resources


def compose_distribution_report(
    patients: Sequence[PatientRef] | None,
    top_n: int = DEFAULT_TOP_N,
    now: datetime | None = None,
) -> DistributionReport:
    if patients is None:
        logger.warning("distribution_fallback_applied")
        return DistributionReport(
            regions=DISTRIBUTION_FALLBACK,
            total_patients=DISTRIBUTION_FALLBACK_TOTAL,
            timestamp=_now(now),
        )

    return DistributionReport(
        regions=distribute_by_region((p.region for p in patients), UNKNOWN_PATIENT_REGION, top_n),
        total_patients=len(patients),
        timestamp=_now(now),
    )


def compose_lab_report(
    orders: Sequence[LabOrder] | None, timeframe: str, now: datetime | None = None
) -> LabReport:
    if orders is None:
        logger.warning("lab_fallback_applied", timeframe=timeframe)
        metrics = LAB_FALLBACK
    else:
        metrics = compute_lab_metrics(orders)
    return LabReport(metrics=metrics, timeframe=timeframe, timestamp=_now(now))


def compose_bed_report(
    beds: Sequence[BedRecord] | None, now: datetime | None = None
) -> BedResourceReport:
    report = summarize_bed_resources(aggregate_occupancy(_or_empty(beds)).values())
    return report.model_copy(update={"timestamp": _now(now)})


def compose_staff_report(
    ratios: Sequence[StaffRatioRecord] | None, now: datetime | None = None
) -> StaffReport:
    if ratios is None:
        logger.warning("staff_fallback_applied")
        ratios = STAFF_FALLBACK
    return summarize_staff(ratios).model_copy(update={"timestamp": _now(now)})


def compose_supply_report(
    supplies: Sequence[SupplyRecord] | None, now: datetime | None = None
) -> SupplyReport:
    if supplies is None:
        logger.warning("supply_fallback_applied")
        supplies = SUPPLY_FALLBACK
    return summarize_supplies(supplies).model_copy(update={"timestamp": _now(now)})
