"""
Vital-sign risk classification and patient-facing vitals views.

The classifier is a fixed threshold table: each tier is a disjunction of
per-vital limits and the most severe matching tier wins. It does not weight
vitals against each other and is not a clinical early-warning score.
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime

from clinical_core.domain.models import AdmissionRecord, RiskLevel, VitalReading
from clinical_core.domain.payloads import LiveVital, PatientStatus

DAYS_PER_YEAR = 365.25


def _is_critical(reading: VitalReading) -> bool:
    return (
        reading.heart_rate > 120
        or reading.heart_rate < 50
        or reading.oxygen_saturation < 90
        or reading.bp_systolic > 180
        or reading.bp_systolic < 80
        or reading.temperature_celsius > 39
    )


def _is_high(reading: VitalReading) -> bool:
    return (
        reading.heart_rate > 100
        or reading.heart_rate < 60
        or reading.oxygen_saturation < 95
        or reading.bp_systolic > 160
        or reading.bp_systolic < 90
        or reading.temperature_celsius > 38
    )


def _is_moderate(reading: VitalReading) -> bool:
    return (
        reading.heart_rate > 90
        or reading.oxygen_saturation < 97
        or reading.bp_systolic > 140
        or reading.temperature_celsius > 37.5
    )


_TIERS = (
    (RiskLevel.CRITICAL, _is_critical),
    (RiskLevel.HIGH, _is_high),
    (RiskLevel.MODERATE, _is_moderate),
)


def classify_vitals(reading: VitalReading | None) -> RiskLevel:
    """Map a reading to a risk tier. No reading means no evidence of risk."""
    if reading is None:
        return RiskLevel.STABLE
    for level, matches in _TIERS:
        if matches(reading):
            return level
    return RiskLevel.STABLE


def format_blood_pressure(reading: VitalReading | None) -> str | None:
    if reading is None:
        return None
    return f"{reading.bp_systolic:g}/{reading.bp_diastolic:g}"


def build_live_vitals(readings: Iterable[VitalReading]) -> list[LiveVital]:
    """Live feed rows, one per reading, in the order the store returned them."""
    return [
        LiveVital(
            patient_id=reading.patient_number or "Unknown",
            heart_rate=reading.heart_rate,
            blood_pressure=f"{reading.bp_systolic:g}/{reading.bp_diastolic:g}",
            oxygen_sat=reading.oxygen_saturation,
            temperature=reading.temperature_celsius,
            respiratory_rate=reading.respiratory_rate,
            timestamp=reading.recorded_at,
            ward=reading.ward or "Unknown",
            bed=reading.bed_number or "Unknown",
            risk_level=classify_vitals(reading),
        )
        for reading in readings
    ]


def age_in_years(date_of_birth: date | None, now: datetime | None = None) -> int | None:
    if date_of_birth is None:
        return None
    today = (now or datetime.now(UTC)).date()
    return int((today - date_of_birth).days // DAYS_PER_YEAR)


def _display_name(admission: AdmissionRecord, anonymize: bool) -> str:
    patient = admission.patient
    first = (patient.first_name or "") if patient else ""
    last = (patient.last_name or "") if patient else ""
    if anonymize:
        return f"Patient {first[:1]}{last[:1]}"
    return f"{first} {last}".strip() or "Unknown"


def build_patient_status(
    admission: AdmissionRecord,
    latest: VitalReading | None,
    now: datetime | None = None,
    anonymize: bool = False,
) -> PatientStatus:
    """
    Combine an active admission with its most recent reading.

    Args:
        admission: Active admission with the joined patient.
        latest: Most recent vital reading for the patient, if any.
        now: Reference time for age calculation.
        anonymize: Show initials only (ICU wall displays).
    """
    patient = admission.patient
    return PatientStatus(
        id=patient.patient_number if patient else None,
        name=_display_name(admission, anonymize),
        age=age_in_years(patient.date_of_birth if patient else None, now),
        room=admission.bed_number or admission.ward,
        condition=admission.diagnosis,
        heart_rate=latest.heart_rate if latest else None,
        blood_pressure=format_blood_pressure(latest),
        oxygen_sat=latest.oxygen_saturation if latest else None,
        temperature=latest.temperature_celsius if latest else None,
        status=patient.status if patient else None,
        risk_level=classify_vitals(latest),
        last_update=latest.recorded_at if latest else admission.admission_date,
        ward=admission.ward,
        attending_physician=admission.attending_physician or "Not assigned",
    )
