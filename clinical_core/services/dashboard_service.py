"""
Dashboard service that combines concurrent record fetching with aggregation.

Each public method is one dashboard use case:
1. Resolve the timeframe into a concrete window
2. Fan out the independent store reads concurrently
3. Hand the materialized records (None for a failed read) to the composer

Architecture pattern: fetch fan-out with per-read fallbacks
"""

from collections.abc import Sequence
from datetime import datetime

import structlog

from clinical_core.config import AppConfig, get_config
from clinical_core.domain.models import (
    AdmissionRecord,
    AdmissionStatus,
    BedType,
    Severity,
    VitalReading,
)
from clinical_core.domain.payloads import (
    BedResourceReport,
    ClinicalAlertFeed,
    CriticalAlertFeed,
    DashboardFilters,
    DashboardOverview,
    DepartmentReport,
    DistributionReport,
    IcuCommandCenter,
    KpiReport,
    LabReport,
    LiveVitalsReport,
    MonitoringFeed,
    StaffReport,
    SupplyReport,
)
from clinical_core.services import summary
from clinical_core.services.record_sources import (
    ClinicalDataStore,
    FetchConfig,
    RecordFetcher,
    records_or_none,
)
from clinical_core.services.time_windows import (
    resolve_day_window,
    resolve_window,
    window_for_days,
)

logger = structlog.get_logger(__name__)

ICU_WARD = "icu"
ICU_STAY_SAMPLE = 50


class ClinicalDashboardService:
    """
    Main service that serves the hospital-operations dashboard.

    This is the entry point the transport layer calls. It combines:
    - Concurrent, failure-isolated reads from the clinical data store
    - Pure aggregation and scoring of the returned records
    - Documented fallbacks when a read fails
    """

    def __init__(self, store: ClinicalDataStore, config: AppConfig | None = None) -> None:
        self.store = store
        self.config = config or get_config()
        self.logger = logger.bind(component="dashboard_service", store=store.store_name)

        self.fetcher = RecordFetcher(
            FetchConfig(
                timeout_seconds=self.config.data_store.timeout_seconds,
                max_concurrent_fetches=self.config.data_store.max_concurrent_fetches,
            )
        )

    async def _latest_vitals(
        self, admissions: Sequence[AdmissionRecord] | None
    ) -> list[VitalReading | None] | None:
        """Newest reading per admitted patient, positionally aligned with ``admissions``."""
        if admissions is None:
            return None

        factories = []
        for admission in admissions:
            patient_id = admission.patient.id if admission.patient else None
            factories.append(
                lambda patient_id=patient_id: (
                    self.store.fetch_latest_vitals(patient_id=patient_id, limit=1)
                    if patient_id
                    else _no_records()
                )
            )

        self.logger.debug("latest_vitals_requested", patients=len(factories))
        results = await self.fetcher.fetch_each("latest_vitals", factories)
        latest: list[VitalReading | None] = []
        for result in results:
            readings = records_or_none(result)
            latest.append(readings[0] if readings else None)
        return latest

    # Overview and monitoring

    async def dashboard_overview(
        self,
        facility_id: str | None = None,
        county_id: str | None = None,
        timeframe: str | None = None,
        now: datetime | None = None,
    ) -> DashboardOverview:
        timeframe = timeframe or self.config.aggregation.default_timeframe
        window = resolve_window(timeframe, now)

        results = await self.fetcher.gather(
            {
                "admissions": lambda: self.store.fetch_admissions(facility_id, window.start),
                "beds": lambda: self.store.fetch_beds(facility_id),
                "lab_orders": lambda: self.store.fetch_lab_orders(facility_id, window.start),
                "alerts": lambda: self.store.fetch_unresolved_alerts(
                    facility_id, Severity.CRITICAL
                ),
                "patients": lambda: self.store.fetch_patients(county_id=county_id),
            }
        )

        return summary.compose_dashboard_overview(
            admissions=records_or_none(results["admissions"]),
            beds=records_or_none(results["beds"]),
            lab_orders=records_or_none(results["lab_orders"]),
            alerts=records_or_none(results["alerts"]),
            patients=records_or_none(results["patients"]),
            filters=DashboardFilters(
                facility_id=facility_id, county_id=county_id, timeframe=timeframe
            ),
            critical_alert_limit=self.config.aggregation.critical_alert_limit,
            region_top_n=self.config.aggregation.region_top_n,
            now=window.end,
        )

    async def icu_command_center(
        self, facility_id: str | None = None, now: datetime | None = None
    ) -> IcuCommandCenter:
        results = await self.fetcher.gather(
            {
                "beds": lambda: self.store.fetch_beds(facility_id, BedType.ICU),
                "discharged": lambda: self.store.fetch_admissions(
                    facility_id,
                    None,
                    status=AdmissionStatus.DISCHARGED,
                    ward=ICU_WARD,
                    limit=ICU_STAY_SAMPLE,
                ),
                "active": lambda: self.store.fetch_admissions(
                    facility_id, None, status=AdmissionStatus.ACTIVE, ward=ICU_WARD
                ),
                "equipment": lambda: self.store.fetch_equipment(facility_id),
                "alerts": lambda: self.store.fetch_unresolved_alerts(facility_id, Severity.HIGH),
            }
        )

        active = records_or_none(results["active"])
        return summary.compose_icu_command_center(
            beds=records_or_none(results["beds"]),
            discharged_admissions=records_or_none(results["discharged"]),
            active_admissions=active,
            latest_vitals=await self._latest_vitals(active),
            equipment=records_or_none(results["equipment"]),
            alerts=records_or_none(results["alerts"]),
            alert_limit=self.config.aggregation.icu_alert_limit,
            now=now,
        )

    async def patient_monitoring(
        self,
        facility_id: str | None = None,
        ward: str | None = None,
        status: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> MonitoringFeed:
        limit = limit or self.config.aggregation.live_vitals_limit

        results = await self.fetcher.gather(
            {
                "active": lambda: self.store.fetch_admissions(
                    facility_id, None, status=AdmissionStatus.ACTIVE, ward=ward, limit=limit
                ),
                "live": lambda: self.store.fetch_latest_vitals(
                    facility_id=facility_id, limit=limit
                ),
                "alerts": lambda: self.store.fetch_unresolved_alerts(facility_id),
            }
        )

        active = records_or_none(results["active"])
        return summary.compose_monitoring_feed(
            active_admissions=active,
            latest_vitals=await self._latest_vitals(active),
            live_readings=records_or_none(results["live"]),
            alerts=records_or_none(results["alerts"]),
            status=status,
            alert_limit=self.config.aggregation.monitoring_alert_limit,
            now=now,
        )

    async def live_vitals(
        self,
        facility_id: str | None = None,
        patient_id: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> LiveVitalsReport:
        results = await self.fetcher.gather(
            {
                "vitals": lambda: self.store.fetch_latest_vitals(
                    patient_id=patient_id,
                    facility_id=facility_id,
                    limit=limit or self.config.aggregation.live_vitals_limit,
                )
            }
        )
        return summary.compose_live_vitals(records_or_none(results["vitals"]), now)

    # Alerts

    async def clinical_alerts(
        self,
        facility_id: str | None = None,
        min_severity: Severity | None = None,
        now: datetime | None = None,
    ) -> ClinicalAlertFeed:
        results = await self.fetcher.gather(
            {"alerts": lambda: self.store.fetch_unresolved_alerts(facility_id, min_severity)}
        )
        return summary.compose_clinical_alert_feed(records_or_none(results["alerts"]), now)

    async def critical_alerts(
        self,
        facility_id: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> CriticalAlertFeed:
        results = await self.fetcher.gather(
            {
                "alerts": lambda: self.store.fetch_unresolved_alerts(
                    facility_id, Severity.CRITICAL
                )
            }
        )
        return summary.compose_critical_alert_feed(
            records_or_none(results["alerts"]),
            limit or self.config.aggregation.critical_alert_limit,
            now,
        )

    # Outcomes

    async def department_performance(
        self,
        facility_id: str | None = None,
        days: int | None = None,
        now: datetime | None = None,
    ) -> DepartmentReport:
        window = window_for_days(days or self.config.aggregation.default_department_days, now)
        results = await self.fetcher.gather(
            {
                "samples": lambda: self.store.fetch_department_samples(
                    facility_id, window.start_date
                )
            }
        )
        return summary.compose_department_report(
            records_or_none(results["samples"]),
            self.config.aggregation.needs_attention_limit,
            window.end,
        )

    async def clinical_kpis(
        self,
        facility_id: str | None = None,
        timeframe: str | None = None,
        now: datetime | None = None,
    ) -> KpiReport:
        timeframe = timeframe or self.config.aggregation.default_kpi_timeframe
        window = resolve_day_window(timeframe, now)

        results = await self.fetcher.gather(
            {
                "hospital_metrics": lambda: self.store.fetch_hospital_metrics(
                    facility_id, window.start_date
                ),
                "department_samples": lambda: self.store.fetch_department_samples(
                    facility_id, window.start_date
                ),
                "lab_orders": lambda: self.store.fetch_lab_orders(facility_id, window.start),
            }
        )

        return summary.compose_kpi_report(
            hospital_metrics=records_or_none(results["hospital_metrics"]),
            department_samples=records_or_none(results["department_samples"]),
            lab_orders=records_or_none(results["lab_orders"]),
            timeframe=timeframe,
            now=window.end,
        )

    # Patients, laboratory and resources

    async def patient_distribution(
        self,
        facility_id: str | None = None,
        county_id: str | None = None,
        now: datetime | None = None,
    ) -> DistributionReport:
        results = await self.fetcher.gather(
            {
                "patients": lambda: self.store.fetch_patients(
                    facility_id=facility_id, county_id=county_id
                )
            }
        )
        return summary.compose_distribution_report(
            records_or_none(results["patients"]), self.config.aggregation.region_top_n, now
        )

    async def lab_metrics(
        self,
        facility_id: str | None = None,
        timeframe: str | None = None,
        now: datetime | None = None,
    ) -> LabReport:
        timeframe = timeframe or self.config.aggregation.default_timeframe
        window = resolve_window(timeframe, now)
        results = await self.fetcher.gather(
            {"orders": lambda: self.store.fetch_lab_orders(facility_id, window.start)}
        )
        return summary.compose_lab_report(records_or_none(results["orders"]), timeframe, window.end)

    async def bed_resources(
        self, facility_id: str | None = None, now: datetime | None = None
    ) -> BedResourceReport:
        results = await self.fetcher.gather({"beds": lambda: self.store.fetch_beds(facility_id)})
        return summary.compose_bed_report(records_or_none(results["beds"]), now)

    async def staff_resources(
        self, facility_id: str | None = None, now: datetime | None = None
    ) -> StaffReport:
        results = await self.fetcher.gather(
            {"ratios": lambda: self.store.fetch_staff_ratios(facility_id)}
        )
        return summary.compose_staff_report(records_or_none(results["ratios"]), now)

    async def supply_resources(
        self, facility_id: str | None = None, now: datetime | None = None
    ) -> SupplyReport:
        results = await self.fetcher.gather(
            {"supplies": lambda: self.store.fetch_supplies(facility_id)}
        )
        return summary.compose_supply_report(records_or_none(results["supplies"]), now)


async def _no_records() -> list[VitalReading]:
    return []
