"""
Tests for dashboard payload composition.

Composers are pure: every test passes a fixed ``now`` and checks the payload
built from hand-made records, including None inputs standing in for failed
fetches.
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta

from clinical_core.domain.models import (
    AdmissionRecord,
    Alert,
    BedRecord,
    BedType,
    HospitalMetricSample,
    PatientRef,
    VitalReading,
)
from clinical_core.domain.payloads import DashboardFilters
from clinical_core.services.performance import DEFAULT_LAB_TURNAROUND_HOURS, KPI_BASELINE
from clinical_core.services.summary import (
    DISTRIBUTION_FALLBACK,
    DISTRIBUTION_FALLBACK_TOTAL,
    LAB_FALLBACK,
    compose_bed_report,
    compose_clinical_alert_feed,
    compose_critical_alert_feed,
    compose_dashboard_overview,
    compose_distribution_report,
    compose_icu_command_center,
    compose_kpi_report,
    compose_lab_report,
    compose_live_vitals,
    compose_monitoring_feed,
    compose_staff_report,
    compose_supply_report,
)

FILTERS = DashboardFilters(facility_id="fac-1", county_id=None, timeframe="24h")


def _admission(index: int, now: datetime, status: str = "stable") -> AdmissionRecord:
    return AdmissionRecord(
        id=f"adm-{index}",
        admission_date=now - timedelta(hours=index + 1),
        ward="ICU-A",
        bed_number=f"ICU-0{index}",
        patient=PatientRef(
            id=f"pat-{index}",
            patient_number=f"NC360-100{index}",
            first_name="Jane",
            last_name=f"Doe{index}",
            status=status,
        ),
    )


class TestFallbacks:
    def test_failed_lab_fetch_uses_sample(self, now: datetime) -> None:
        report = compose_lab_report(None, "24h", now)

        assert report.metrics == LAB_FALLBACK
        assert report.metrics.tests_today == 150
        assert report.timeframe == "24h"
        assert report.timestamp == now

    def test_empty_lab_window_is_not_a_failure(self, now: datetime) -> None:
        metrics = compose_lab_report([], "1h", now).metrics

        assert metrics.tests_today == 0
        assert metrics.avg_turnaround_time == 3.4

    def test_failed_distribution_fetch_uses_sample(self, now: datetime) -> None:
        report = compose_distribution_report(None, now=now)

        assert report.regions == DISTRIBUTION_FALLBACK
        assert report.total_patients == DISTRIBUTION_FALLBACK_TOTAL

    def test_empty_distribution(self, now: datetime) -> None:
        report = compose_distribution_report([], now=now)
        assert (report.regions, report.total_patients) == ([], 0)

    def test_distribution_uses_unknown_region_label(self, now: datetime) -> None:
        patients = [PatientRef(id="p1", region=None), PatientRef(id="p2", region="Westlands")]

        report = compose_distribution_report(patients, now=now)

        assert [r.region_name for r in report.regions] == ["Unknown Region", "Westlands"]
        assert report.total_patients == 2

    def test_failed_staff_fetch_uses_sample(self, now: datetime) -> None:
        report = compose_staff_report(None, now)

        assert [row.department for row in report.staff_ratios] == [
            "ICU",
            "Surgery",
            "Pediatrics",
            "General",
        ]
        assert report.average_ratio == 3.8
        assert report.timestamp == now

    def test_failed_supply_fetch_uses_sample(self, now: datetime) -> None:
        report = compose_supply_report(None, now)

        assert len(report.supply_inventory) == 6
        assert report.critical_items == 1

    def test_failed_bed_fetch_is_empty(self, now: datetime) -> None:
        report = compose_bed_report(None, now)

        assert report.bed_resources == []
        assert report.overall_utilization == 0
        assert report.timestamp == now


class TestOverview:
    def test_all_fetches_failed(self, now: datetime) -> None:
        overview = compose_dashboard_overview(
            admissions=None,
            beds=None,
            lab_orders=None,
            alerts=None,
            patients=None,
            filters=FILTERS,
            now=now,
        )

        assert overview.admissions.total_admissions == 0
        assert overview.bed_occupancy == []
        assert overview.emergency.total_patients == 0
        assert overview.laboratory == LAB_FALLBACK
        assert overview.alerts == []
        assert overview.patient_distribution == []
        assert overview.filters == FILTERS
        assert overview.timestamp == now

    def test_sections_from_records(
        self,
        now: datetime,
        make_bed: Callable[..., BedRecord],
        make_alert: Callable[..., Alert],
    ) -> None:
        overview = compose_dashboard_overview(
            admissions=[_admission(0, now)],
            beds=[make_bed("occupied"), make_bed("available")],
            lab_orders=[],
            alerts=[make_alert("critical"), make_alert("high")],
            patients=[PatientRef(id="p1", region="Karen"), PatientRef(id="p2")],
            filters=FILTERS,
            critical_alert_limit=5,
            region_top_n=1,
            now=now,
        )

        assert overview.admissions.admissions_24h == 1
        assert overview.bed_occupancy[0].occupancy_rate == 50
        assert overview.laboratory.tests_today == 0
        assert [a.priority for a in overview.alerts] == [1]
        assert [(r.region_name, r.percentage) for r in overview.patient_distribution] == [
            ("Karen", 50.0)
        ]

    def test_missing_region_label_is_unknown(self, now: datetime) -> None:
        overview = compose_dashboard_overview(
            admissions=[],
            beds=[],
            lab_orders=[],
            alerts=[],
            patients=[PatientRef(id="p1")],
            filters=FILTERS,
            now=now,
        )

        assert overview.patient_distribution[0].region_name == "Unknown"

    def test_camel_case_payload(self, now: datetime) -> None:
        overview = compose_dashboard_overview(
            admissions=[],
            beds=[],
            lab_orders=[],
            alerts=[],
            patients=[],
            filters=FILTERS,
            now=now,
        )

        dumped = overview.model_dump(by_alias=True)

        assert {"bedOccupancy", "patientDistribution", "filters"} <= dumped.keys()
        assert dumped["filters"]["facilityId"] == "fac-1"


class TestIcuCommandCenter:
    def test_combines_capacity_patients_devices_and_alerts(
        self,
        now: datetime,
        make_bed: Callable[..., BedRecord],
        make_alert: Callable[..., Alert],
        make_vital: Callable[..., VitalReading],
    ) -> None:
        center = compose_icu_command_center(
            beds=[make_bed("occupied", bed_type=BedType.ICU), make_bed("occupied")],
            discharged_admissions=[],
            active_admissions=[_admission(0, now), _admission(1, now)],
            latest_vitals=[make_vital(heart_rate=130)],
            equipment=[],
            alerts=[make_alert("low"), make_alert("high"), make_alert("critical")],
            alert_limit=1,
            now=now,
        )

        assert center.capacity.total_beds == 1
        assert center.capacity.active_alerts == 2
        assert [p.name for p in center.patients] == ["Patient JD", "Patient JD"]
        assert [p.risk_level.value for p in center.patients] == ["critical", "stable"]
        assert [a.severity for a in center.alerts] == ["high"]
        assert "patientId" in center.model_dump(by_alias=True)["alerts"][0]
        assert center.devices.utilization_rate == 0.0

    def test_all_fetches_failed(self, now: datetime) -> None:
        center = compose_icu_command_center(
            beds=None,
            discharged_admissions=None,
            active_admissions=None,
            latest_vitals=None,
            equipment=None,
            alerts=None,
            now=now,
        )

        assert center.capacity.total_beds == 0
        assert center.capacity.average_stay == 4.2
        assert center.patients == []
        assert center.alerts == []


class TestMonitoringFeed:
    def test_status_filter_and_counts(self, now: datetime) -> None:
        admissions = [
            _admission(0, now, "critical"),
            _admission(1, now, "monitoring"),
            _admission(2, now, "stable"),
            _admission(3, now, "critical"),
        ]

        everyone = compose_monitoring_feed(
            active_admissions=admissions,
            latest_vitals=None,
            live_readings=[],
            alerts=[],
            now=now,
        )
        critical = compose_monitoring_feed(
            active_admissions=admissions,
            latest_vitals=None,
            live_readings=[],
            alerts=[],
            status="critical",
            now=now,
        )

        assert (
            everyone.summary.total_patients,
            everyone.summary.critical_count,
            everyone.summary.monitoring_count,
            everyone.summary.stable_count,
        ) == (4, 2, 1, 1)
        assert [p.id for p in critical.active_patients] == ["NC360-1000", "NC360-1003"]
        assert critical.summary.total_patients == 2

    def test_facility_alerts_dropped_before_limit(
        self, now: datetime, make_alert: Callable[..., Alert]
    ) -> None:
        alerts = [
            make_alert("high", "capacity", patient_id=None),
            make_alert("critical", "equipment", patient_id=None),
            make_alert("high", "cardiac"),
            make_alert("low", "respiratory"),
            make_alert("medium", "cardiac"),
        ]

        feed = compose_monitoring_feed(
            active_admissions=[],
            latest_vitals=[],
            live_readings=None,
            alerts=alerts,
            alert_limit=2,
            now=now,
        )

        assert [(g.category, g.count) for g in feed.clinical_alerts] == [
            ("cardiac", 1),
            ("respiratory", 1),
        ]
        assert feed.live_vitals == []

    def test_live_vitals_report(
        self, now: datetime, make_vital: Callable[..., VitalReading]
    ) -> None:
        report = compose_live_vitals([make_vital(), make_vital(oxygen_saturation=88)], now)

        assert report.count == 2
        assert report.vitals[1].risk_level.value == "critical"
        assert compose_live_vitals(None, now).count == 0


class TestKpisAndAlerts:
    def test_kpi_baseline_when_metrics_missing(self, now: datetime) -> None:
        report = compose_kpi_report(
            hospital_metrics=None,
            department_samples=None,
            lab_orders=None,
            timeframe="30d",
            now=now,
        )

        assert report.kpis == KPI_BASELINE
        assert report.departments == []
        assert report.timeframe == "30d"

    def test_kpis_without_lab_orders_use_default_turnaround(self, now: datetime) -> None:
        report = compose_kpi_report(
            hospital_metrics=[HospitalMetricSample(date=date(2025, 3, 9), mortality_rate=2.0)],
            department_samples=[],
            lab_orders=[],
            timeframe="7d",
            now=now,
        )

        assert report.kpis.mortality_rate == 2.0
        assert report.kpis.lab_turnaround_time == DEFAULT_LAB_TURNAROUND_HOURS

    def test_clinical_feed_total_matches_groups(
        self, now: datetime, make_alert: Callable[..., Alert]
    ) -> None:
        feed = compose_clinical_alert_feed(
            [
                make_alert("high", "cardiac"),
                make_alert("high", "capacity", patient_id=None),
                make_alert("low", None),
                make_alert("low", "cardiac"),
            ],
            now,
        )

        assert feed.total_alerts == 3
        assert [(g.category, g.count) for g in feed.alerts] == [("cardiac", 2), ("General", 1)]
        assert compose_clinical_alert_feed(None, now).total_alerts == 0

    def test_critical_feed_total_counts_before_limit(
        self, now: datetime, make_alert: Callable[..., Alert]
    ) -> None:
        alerts = [make_alert("critical") for _ in range(4)] + [make_alert("high")]

        feed = compose_critical_alert_feed(alerts, 3, now)

        assert feed.total_count == 4
        assert len(feed.critical_alerts) == 3

    def test_composition_is_repeatable(
        self, now: datetime, make_alert: Callable[..., Alert]
    ) -> None:
        alerts = [make_alert("critical", "cardiac"), make_alert("medium", "respiratory")]
        assert compose_clinical_alert_feed(alerts, now) == compose_clinical_alert_feed(alerts, now)
