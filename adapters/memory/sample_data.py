"""
Deterministic sample data for the in-memory store.

Two facilities with a few days of admissions, vitals, alerts, department
metrics and lab orders. Every timestamp is relative to ``now`` so the data
always falls inside the default dashboard windows.
"""

from datetime import UTC, date, datetime, timedelta

from clinical_core.domain.models import (
    AdmissionRecord,
    AdmissionStatus,
    AdmissionType,
    Alert,
    BedRecord,
    BedStatus,
    BedType,
    DepartmentMetricSample,
    EquipmentRecord,
    HospitalMetricSample,
    LabOrder,
    PatientRef,
    StaffRatioRecord,
    SupplyRecord,
    VitalReading,
)

from .store import InMemoryClinicalStore

FACILITIES = {
    "fac-knh": "Kenyatta National Hospital",
    "fac-mbg": "Mbagathi County Hospital",
}

REGIONS = ("Nairobi Central", "Westlands", "Eastlands", "Kileleshwa", "Embakasi", "Karen")

# (first name, last name, date of birth, status, region index, ward, bed, diagnosis)
PATIENTS = (
    ("Amina", "Otieno", date(1958, 3, 14), "critical", 0, "ICU-A", "ICU-01", "Septic shock"),
    ("Brian", "Kamau", date(1971, 7, 2), "critical", 1, "ICU-A", "ICU-02", "ARDS"),
    ("Carol", "Wanjiru", date(1989, 11, 23), "monitoring", 0, "ICU-B", "ICU-05", "Post-op CABG"),
    ("David", "Mwangi", date(1964, 1, 9), "monitoring", 2, "Medical", "M-12", "Pneumonia"),
    ("Esther", "Njeri", date(1995, 5, 30), "stable", 3, "Maternity", "MAT-03", "Pre-eclampsia"),
    ("Felix", "Odhiambo", date(2001, 9, 17), "stable", 0, "Surgical", "S-07", "Appendicitis"),
    ("Grace", "Achieng", date(1948, 12, 4), "monitoring", 4, "Medical", "M-04", "Heart failure"),
    ("Hassan", "Abdi", date(1979, 6, 21), "stable", None, "Surgical", "S-02", "Hernia repair"),
)

# (heart rate, SpO2, systolic, diastolic, temperature, respiratory rate)
VITALS = (
    (128, 88, 85, 50, 39.4, 28),
    (104, 93, 150, 92, 38.2, 24),
    (92, 96, 138, 85, 37.2, 18),
    (88, 95, 128, 80, 37.8, 20),
    (76, 99, 145, 95, 36.9, 16),
    (72, 98, 118, 76, 36.8, 14),
    (96, 94, 165, 98, 37.1, 22),
    (70, 99, 120, 78, 36.6, 15),
)

DEPARTMENTS = (
    # (id, name, code, facility, mortality by day (newest first), readmission, satisfaction)
    ("dep-icu", "Intensive Care", "ICU", "fac-knh", (6.2, 5.8, 4.1, 4.0), 9.5, 3.9),
    ("dep-card", "Cardiology", "CARD", "fac-knh", (1.1, 1.3, 1.6, 1.8), 6.2, 4.4),
    ("dep-ped", "Pediatrics", "PED", "fac-mbg", (0.4, 0.5, 0.5, 0.4), 3.1, 4.7),
    ("dep-surg", "General Surgery", "SURG", "fac-mbg", (2.4, 2.5, 2.3, 2.6), 7.4, 4.1),
)

LAB_TESTS = (
    ("CBC", "🩸"),
    ("Blood Chemistry", "🧪"),
    ("Urinalysis", "🥛"),
    ("CBC", "🩸"),
    ("COVID-19 PCR", "🦠"),
    ("Liver Function", "🫘"),
    ("CBC", "🩸"),
    ("Blood Chemistry", "🧪"),
    ("Lipid Panel", None),
    ("Urinalysis", "🥛"),
)


def _facility_for(index: int) -> str:
    return "fac-knh" if index % 3 else "fac-mbg"


def _patients() -> list[PatientRef]:
    return [
        PatientRef(
            id=f"pat-{index:03d}",
            patient_number=f"NC360-{1000 + index}",
            first_name=first,
            last_name=last,
            date_of_birth=dob,
            status=status,
            region=REGIONS[region] if region is not None else None,
            county_id="county-047",
            facility_id=_facility_for(index) if not ward.startswith("ICU") else "fac-knh",
        )
        for index, (first, last, dob, status, region, ward, _, _) in enumerate(PATIENTS)
    ]


def _admissions(patients: list[PatientRef], now: datetime) -> list[AdmissionRecord]:
    admissions = []
    for index, (patient, row) in enumerate(zip(patients, PATIENTS)):
        ward, bed, diagnosis = row[5], row[6], row[7]
        admissions.append(
            AdmissionRecord(
                id=f"adm-{index:03d}",
                facility_id=patient.facility_id,
                admission_date=now - timedelta(hours=6 + index * 7),
                admission_type=(
                    AdmissionType.EMERGENCY if index % 2 == 0 else AdmissionType.ELECTIVE
                ),
                status=AdmissionStatus.ACTIVE,
                ward=ward,
                bed_number=bed,
                diagnosis=diagnosis,
                patient=patient,
                attending_physician="Dr. Wambui Kariuki" if index % 3 else None,
            )
        )

    # Discharged ICU stays for the average length of stay
    for index, stay_days in enumerate((3.5, 5.0, 4.5)):
        discharged_at = now - timedelta(days=2 + index)
        admissions.append(
            AdmissionRecord(
                id=f"adm-icu-d{index}",
                facility_id="fac-knh",
                admission_date=discharged_at - timedelta(days=stay_days),
                admission_type=AdmissionType.TRANSFER,
                status=AdmissionStatus.DISCHARGED,
                ward="ICU-A",
                discharge_date=discharged_at,
            )
        )
    return admissions


def _vitals(patients: list[PatientRef], admissions: list[AdmissionRecord], now: datetime):
    readings = []
    for index, (patient, values) in enumerate(zip(patients, VITALS)):
        heart_rate, spo2, systolic, diastolic, temperature, respiratory = values
        admission = admissions[index]
        for age_minutes, drift in ((5 + index, 0), (65 + index, -2)):
            readings.append(
                VitalReading(
                    patient_id=patient.id,
                    patient_number=patient.patient_number,
                    heart_rate=heart_rate + drift,
                    oxygen_saturation=spo2,
                    bp_systolic=systolic,
                    bp_diastolic=diastolic,
                    temperature_celsius=temperature,
                    respiratory_rate=respiratory,
                    recorded_at=now - timedelta(minutes=age_minutes),
                    facility_id=admission.facility_id,
                    ward=admission.ward,
                    bed_number=admission.bed_number,
                )
            )
    return readings


def _alerts(patients: list[PatientRef], now: datetime) -> list[Alert]:
    rows = (
        ("critical", "cardiac", "Ventricular tachycardia", 0, 3),
        ("high", "respiratory", "SpO2 below 90%", 0, 12),
        ("critical", "Respiratory", "Ventilator disconnect", 1, 25),
        ("medium", "temperature", "Fever above 38.5C", 1, 90),
        ("low", "medication", "Dose due in 15 minutes", 3, 140),
        ("high", "cardiac", "Hypertensive reading", 6, 200),
        ("medium", None, "Fall risk assessment overdue", 4, 300),
        ("high", "capacity", "ICU at 85% capacity", None, 45),
        ("critical", "equipment", "Oxygen supply pressure low", None, 1500),
    )
    alerts = []
    for index, (severity, category, title, patient_index, age_minutes) in enumerate(rows):
        patient = patients[patient_index] if patient_index is not None else None
        alerts.append(
            Alert(
                id=f"alt-{index:03d}",
                severity=severity,
                category=category,
                title=title,
                message=f"{title}. Review required.",
                patient_id=patient.id if patient else None,
                patient_name=f"{patient.first_name} {patient.last_name}" if patient else None,
                facility_id="fac-knh",
                created_at=now - timedelta(minutes=age_minutes),
                acknowledged=index % 4 == 0,
            )
        )
    return alerts


def _beds() -> list[BedRecord]:
    beds = []
    layout = (
        ("fac-knh", BedType.ICU, 10, 8, 1),
        ("fac-knh", BedType.GENERAL, 40, 31, 2),
        ("fac-mbg", BedType.GENERAL, 24, 15, 0),
        ("fac-mbg", BedType.MATERNITY, 8, 5, 1),
    )
    for facility_id, bed_type, total, occupied, maintenance in layout:
        for number in range(total):
            if number < occupied:
                status = BedStatus.OCCUPIED
            elif number < occupied + maintenance:
                status = BedStatus.MAINTENANCE
            else:
                status = BedStatus.AVAILABLE
            beds.append(
                BedRecord(
                    facility_id=facility_id,
                    facility_name=FACILITIES[facility_id],
                    bed_type=bed_type,
                    status=status,
                    bed_number=f"{bed_type.value.upper()}-{number + 1:02d}",
                )
            )
    return beds


def _department_samples(today: date) -> list[DepartmentMetricSample]:
    samples = []
    for dept_id, name, code, facility_id, series, readmission, satisfaction in DEPARTMENTS:
        for offset, mortality in enumerate(series):
            samples.append(
                DepartmentMetricSample(
                    department_id=dept_id,
                    department_name=name,
                    department_code=code,
                    facility_id=facility_id,
                    facility_name=FACILITIES[facility_id],
                    date=today - timedelta(days=offset * 5),
                    avg_length_of_stay=4.0 + offset * 0.2,
                    readmission_rate=readmission,
                    mortality_rate=mortality,
                    patient_count=30 + offset,
                    satisfaction_score=satisfaction,
                )
            )
    return samples


def _hospital_metrics(today: date) -> list[HospitalMetricSample]:
    return [
        HospitalMetricSample(
            facility_id=facility_id,
            date=today - timedelta(days=offset),
            average_length_of_stay=4.8 + offset * 0.1,
            readmission_rate=8.2,
            mortality_rate=1.9 + offset * 0.05,
            infection_rate=1.1,
        )
        for facility_id in FACILITIES
        for offset in range(5)
    ]


def _lab_orders(now: datetime) -> list[LabOrder]:
    orders = []
    for index, (test_name, icon) in enumerate(LAB_TESTS):
        ordered_at = now - timedelta(hours=1 + index * 2)
        completed = index % 4 != 3
        orders.append(
            LabOrder(
                id=f"lab-{index:03d}",
                facility_id=_facility_for(index),
                status="completed" if completed else "pending",
                ordered_at=ordered_at,
                completed_at=ordered_at + timedelta(hours=2 + index % 3) if completed else None,
                test_name=test_name,
                test_icon=icon,
            )
        )
    return orders


def _equipment() -> list[EquipmentRecord]:
    rows = (
        ("ventilator", "ICU-A", "in-use", "NC360-1000"),
        ("ventilator", "ICU-A", "in-use", "NC360-1001"),
        ("ventilator", "ICU-B", "available", None),
        ("monitor", "ICU-A", "in-use", "NC360-1000"),
        ("monitor", "ICU-B", "maintenance", None),
        ("pump", "ICU-A", "in-use", "NC360-1001"),
        ("pump", "Medical", "in-use", "NC360-1003"),
    )
    return [
        EquipmentRecord(
            id=f"eq-{index:03d}",
            name=f"{equipment_type.title()} {index + 1}",
            equipment_type=equipment_type,
            facility_id="fac-knh",
            location=location,
            status=status,
            patient_number=patient_number,
        )
        for index, (equipment_type, location, status, patient_number) in enumerate(rows)
    ]


def _staff_ratios() -> list[StaffRatioRecord]:
    rows = (
        ("ICU", 9, 10, 2.0, "good"),
        ("Medical", 5, 28, 4.0, "good"),
        ("Surgical", 4, 26, 4.0, "over"),
        ("Maternity", 0, 0, 4.0, "unstaffed"),
    )
    return [
        StaffRatioRecord(
            facility_id="fac-knh",
            department=department,
            nurses_on_duty=nurses,
            total_patients=patients,
            ratio=round(patients / nurses, 1) if nurses else 0.0,
            target_ratio=target,
            status=status,
        )
        for department, nurses, patients, target, status in rows
    ]


def _supplies() -> list[SupplyRecord]:
    rows = (
        ("N95 Masks", 320, 200, 800),
        ("Surgical Gloves", 900, 1000, 5000),
        ("Oxygen Tanks", 52, 30, 80),
        ("Blood Bags (O-)", 6, 10, 40),
    )
    return [
        SupplyRecord(
            facility_id="fac-knh",
            item=item,
            current_stock=current,
            minimum_level=minimum,
            maximum_level=maximum,
            status="low" if current < minimum else "good",
        )
        for item, current, minimum, maximum in rows
    ]


def build_sample_store(now: datetime | None = None, **store_options) -> InMemoryClinicalStore:
    """
    Build a populated store.

    Args:
        now: Reference time; all records are placed relative to it.
        store_options: Passed to InMemoryClinicalStore (``fail_on``, ``delay_seconds``).
    """
    now = now or datetime.now(UTC)
    patients = _patients()
    admissions = _admissions(patients, now)

    return InMemoryClinicalStore(
        "sample",
        admissions=admissions,
        vitals=_vitals(patients, admissions, now),
        alerts=_alerts(patients, now),
        beds=_beds(),
        department_samples=_department_samples(now.date()),
        hospital_metrics=_hospital_metrics(now.date()),
        lab_orders=_lab_orders(now),
        patients=patients,
        equipment=_equipment(),
        staff_ratios=_staff_ratios(),
        supplies=_supplies(),
        **store_options,
    )
