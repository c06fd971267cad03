"""
Output payloads returned to the transport layer.

Field names are snake_case in Python; ``model_dump(by_alias=True)`` produces
the camelCase keys the dashboard consumes.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clinical_core.domain.models import Alert, RiskLevel, Trend


class Payload(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# Alerts


class AlertView(Payload):
    """An unresolved alert as shown on the dashboard."""

    id: str
    severity: str
    category: str | None = None
    title: str | None = None
    message: str | None = None
    patient_id: str | None = None
    patient_name: str | None = None
    facility_id: str | None = None
    created_at: datetime
    acknowledged: bool = False

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertView":
        return cls.model_validate(alert, from_attributes=True)


class AlertGroup(Payload):
    """Unresolved alerts of one clinical category."""

    category: str
    count: int = Field(ge=0)
    worst_severity: str
    icon: str
    description: str
    alerts: list[AlertView]


class CriticalAlertView(Payload):
    id: str
    severity: str
    title: str | None
    message: str | None
    time_ago: str
    priority: int = Field(ge=1)
    patient: str | None
    category: str | None
    is_acknowledged: bool


class ClinicalAlertFeed(Payload):
    alerts: list[AlertGroup]
    total_alerts: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CriticalAlertFeed(Payload):
    critical_alerts: list[CriticalAlertView]
    total_count: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# Occupancy and resources


class FacilityOccupancy(Payload):
    facility_id: str
    facility_name: str
    total: int = 0
    occupied: int = 0
    available: int = 0
    maintenance: int = 0
    occupancy_rate: int = Field(default=0, ge=0, le=100)


class WardUtilization(Payload):
    ward: str
    total: int
    occupied: int
    available: int
    utilization: int = Field(ge=0, le=100)


class BedResourceReport(Payload):
    bed_resources: list[WardUtilization]
    total_beds: int
    occupied_beds: int
    overall_utilization: int = Field(ge=0, le=100)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class IcuCapacity(Payload):
    total_beds: int
    available_beds: int
    occupied_beds: int
    maintenance_beds: int
    occupancy_rate: int = Field(ge=0, le=100)
    average_stay: float = Field(description="Days, one decimal")
    active_alerts: int


class DeviceView(Payload):
    id: str
    type: str
    patient: str | None
    status: str
    location: str | None


class DeviceCounts(Payload):
    total: int
    active: int
    available: int
    maintenance: int


class DeviceUtilization(Payload):
    devices: list[DeviceView]
    utilization_rate: float = Field(ge=0.0, le=100.0)
    summary: DeviceCounts


class StaffRatioView(Payload):
    department: str
    nurses: int
    patients: int
    ratio: float
    target: float
    status: str


class StaffReport(Payload):
    staff_ratios: list[StaffRatioView]
    average_ratio: float
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SupplyView(Payload):
    item: str
    current: int
    minimum: int
    maximum: int
    status: str


class SupplyReport(Payload):
    supply_inventory: list[SupplyView]
    critical_items: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# Department performance and KPIs


class DepartmentPerformance(Payload):
    department: str
    code: str = ""
    hospital: str = ""
    avg_los: float = Field(0.0, alias="avgLOS")
    readmission: float = 0.0
    mortality: float = 0.0
    rating: str = "N/A"
    trend: Trend = Trend.STABLE
    patient_count: int = 0
    satisfaction_score: float = 0.0


class AttentionItem(Payload):
    department: str
    rating: str
    trend: Trend
    mortality: float


class PerformanceSummary(Payload):
    total_departments: int
    average_mortality: float
    average_readmission: float
    top_performer: str | None
    needs_attention: list[AttentionItem]


class DepartmentReport(Payload):
    departments: list[DepartmentPerformance]
    summary: PerformanceSummary
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ClinicalKpis(Payload):
    avg_length_of_stay: float
    readmission_rate: float
    mortality_rate: float
    lab_turnaround_time: float
    surgery_success_rate: float
    infection_rate: float


class KpiReport(Payload):
    kpis: ClinicalKpis
    departments: list[DepartmentPerformance]
    timeframe: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# Admissions, laboratory, distribution


class AdmissionStats(Payload):
    admissions_24h: int = Field(alias="admissions24h")
    admissions_7d: int = Field(alias="admissions7d")
    trend_24h: int = Field(alias="trend24h", description="Last 24h minus the 24h before")
    case_findings_today: int
    total_admissions: int


class EmergencyLoad(Payload):
    current_load: int
    total_patients: int
    critical_cases: int


class LabTestCount(Payload):
    test_type: str
    count: int
    icon: str


class LabMetrics(Payload):
    tests_today: int
    avg_turnaround_time: float = Field(description="Hours, one decimal")
    pending_results: int
    completed_tests: int
    top_tests: list[LabTestCount]


class LabReport(Payload):
    metrics: LabMetrics
    timeframe: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class RegionShare(Payload):
    region_name: str
    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)


class DistributionReport(Payload):
    regions: list[RegionShare]
    total_patients: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# Patients


class LiveVital(Payload):
    patient_id: str
    heart_rate: float
    blood_pressure: str
    oxygen_sat: float
    temperature: float
    respiratory_rate: float | None
    timestamp: datetime
    ward: str
    bed: str
    risk_level: RiskLevel


class LiveVitalsReport(Payload):
    vitals: list[LiveVital]
    count: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PatientStatus(Payload):
    id: str | None
    name: str
    age: int | None
    room: str | None
    condition: str | None
    heart_rate: float | None
    blood_pressure: str | None
    oxygen_sat: float | None
    temperature: float | None
    status: str | None
    risk_level: RiskLevel
    last_update: datetime
    ward: str | None
    attending_physician: str


class MonitoringCounts(Payload):
    total_patients: int
    critical_count: int
    monitoring_count: int
    stable_count: int


class MonitoringFeed(Payload):
    active_patients: list[PatientStatus]
    live_vitals: list[LiveVital]
    clinical_alerts: list[AlertGroup]
    summary: MonitoringCounts
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# Composite dashboards


class DashboardFilters(Payload):
    facility_id: str | None
    county_id: str | None
    timeframe: str


class DashboardOverview(Payload):
    admissions: AdmissionStats
    bed_occupancy: list[FacilityOccupancy]
    emergency: EmergencyLoad
    laboratory: LabMetrics
    alerts: list[CriticalAlertView]
    patient_distribution: list[RegionShare]
    filters: DashboardFilters
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class IcuCommandCenter(Payload):
    capacity: IcuCapacity
    patients: list[PatientStatus]
    devices: DeviceUtilization
    alerts: list[AlertView]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
