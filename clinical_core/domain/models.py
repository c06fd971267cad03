"""
Domain models for hospital operations records.

These models represent the raw records the engine consumes. They are
framework-agnostic and immutable: the data store produces them, the
aggregators only read them.
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Alert severity levels, least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """Patient risk tiers produced by the vital-sign classifier."""

    STABLE = "stable"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class Trend(str, Enum):
    """Direction of a department's mortality between the older and recent halves."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class BedStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class BedType(str, Enum):
    GENERAL = "general"
    ICU = "icu"
    HDU = "hdu"
    MATERNITY = "maternity"
    PEDIATRIC = "pediatric"
    ISOLATION = "isolation"
    EMERGENCY = "emergency"


class AdmissionType(str, Enum):
    EMERGENCY = "emergency"
    ELECTIVE = "elective"
    TRANSFER = "transfer"
    MATERNITY = "maternity"
    OBSERVATION = "observation"


class AdmissionStatus(str, Enum):
    ACTIVE = "active"
    DISCHARGED = "discharged"
    TRANSFERRED = "transferred"


class _Record(BaseModel):
    """Base for all store records."""

    model_config = ConfigDict(frozen=True)  # Records are read-only inside the engine


class VitalReading(_Record):
    """One set of vital signs for one patient at one point in time."""

    patient_id: str | None = None
    patient_number: str | None = None
    heart_rate: float = Field(description="Beats per minute")
    oxygen_saturation: float = Field(description="SpO2 percentage")
    bp_systolic: float
    bp_diastolic: float
    temperature_celsius: float
    respiratory_rate: float | None = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Admission context joined by the store
    facility_id: str | None = None
    ward: str | None = None
    bed_number: str | None = None


class Alert(_Record):
    """
    An alert raised by an upstream monitoring process.

    Severity is kept as a plain string: the store may hold values outside the
    known scale and those must still flow through (they weigh 0).
    """

    id: str
    severity: str
    category: str | None = None
    title: str | None = None
    message: str | None = None
    patient_id: str | None = None
    patient_name: str | None = None
    facility_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    resolved: bool = False
    acknowledged: bool = False


class BedRecord(_Record):
    """Snapshot of one bed at query time."""

    facility_id: str
    facility_name: str | None = None
    bed_type: BedType = BedType.GENERAL
    status: BedStatus
    bed_number: str | None = None


class DepartmentMetricSample(_Record):
    """
    One day of department outcome metrics.

    Any metric may be missing; averages treat a missing value as 0.
    """

    department_id: str | None = None
    department_name: str | None = None
    department_code: str | None = None
    facility_id: str | None = None
    facility_name: str | None = None
    date: date
    avg_length_of_stay: float | None = None
    readmission_rate: float | None = None
    mortality_rate: float | None = None
    patient_count: float | None = None
    satisfaction_score: float | None = None


class HospitalMetricSample(_Record):
    """One day of facility-wide clinical metrics."""

    facility_id: str | None = None
    date: date
    average_length_of_stay: float | None = None
    readmission_rate: float | None = None
    mortality_rate: float | None = None
    infection_rate: float | None = None


class PatientRef(_Record):
    """Patient demographics as joined onto admissions and distribution queries."""

    id: str
    patient_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    status: str | None = None
    region: str | None = Field(None, description="County or region name")
    county_id: str | None = None
    facility_id: str | None = Field(None, description="Facility of the current admission")


class AdmissionRecord(_Record):
    id: str
    facility_id: str | None = None
    admission_date: datetime
    admission_type: AdmissionType = AdmissionType.ELECTIVE
    status: AdmissionStatus = AdmissionStatus.ACTIVE
    ward: str | None = None
    bed_number: str | None = None
    diagnosis: str | None = None
    discharge_date: datetime | None = None
    patient: PatientRef | None = None
    attending_physician: str | None = None


class LabOrder(_Record):
    id: str
    facility_id: str | None = None
    status: str = "pending"
    ordered_at: datetime
    completed_at: datetime | None = None
    test_name: str | None = None
    test_icon: str | None = None


class EquipmentRecord(_Record):
    id: str
    name: str | None = None
    equipment_type: str = Field(description="e.g., ventilator, monitor, pump")
    facility_id: str | None = None
    location: str | None = None
    status: str = Field(description="in-use, available or maintenance")
    patient_number: str | None = None


class StaffRatioRecord(_Record):
    """Nurse-to-patient staffing as computed by the store for one department."""

    facility_id: str | None = None
    department: str
    nurses_on_duty: int = Field(ge=0)
    total_patients: int = Field(ge=0)
    ratio: float = Field(ge=0.0)
    target_ratio: float = Field(ge=0.0)
    status: str


class SupplyRecord(_Record):
    facility_id: str | None = None
    item: str
    current_stock: int = Field(ge=0)
    minimum_level: int = Field(ge=0)
    maximum_level: int = Field(ge=0)
    status: str
