"""
Department performance scoring.

Key rules:
- Averages treat a missing metric as 0 but keep the sample in the denominator
- Trend compares mean mortality of the recent half against the older half
- Rating is an additive 0-9 point score mapped to a letter grade
- Departments rank by combined mortality + readmission burden, lowest first
"""

from collections import OrderedDict
from collections.abc import Iterable, Sequence

import structlog

from clinical_core.domain.models import DepartmentMetricSample, HospitalMetricSample, Trend
from clinical_core.domain.payloads import (
    AttentionItem,
    ClinicalKpis,
    DepartmentPerformance,
    PerformanceSummary,
)
from clinical_core.services.numeric import mean_of, round_half_up

logger = structlog.get_logger(__name__)

UNKNOWN_DEPARTMENT = "Unknown"
NOT_RATED = "N/A"
ATTENTION_RATINGS = frozenset({"C", "D"})

IMPROVING_FACTOR = 0.9
DECLINING_FACTOR = 1.1

# (upper bound exclusive, points), checked in order
MORTALITY_POINTS = ((1.0, 3), (2.0, 2), (5.0, 1))
READMISSION_POINTS = ((5.0, 3), (8.0, 2), (12.0, 1))
# (lower bound exclusive, points)
SATISFACTION_POINTS = ((4.5, 3), (4.0, 2), (3.5, 1))

GRADE_THRESHOLDS = ((8, "A+"), (7, "A"), (5, "B+"), (3, "B"), (1, "C"))
LOWEST_GRADE = "D"

SURGERY_SUCCESS_RATE = 94.8
DEFAULT_LAB_TURNAROUND_HOURS = 3.4


# Rating


def _points_below(value: float, table: Sequence[tuple[float, int]]) -> int:
    for bound, points in table:
        if value < bound:
            return points
    return 0


def _points_above(value: float, table: Sequence[tuple[float, int]]) -> int:
    for bound, points in table:
        if value > bound:
            return points
    return 0


def rating_score(mortality: float, readmission: float, satisfaction: float) -> int:
    """Additive 0-9 score: lower mortality and readmission and higher satisfaction earn points."""
    return (
        _points_below(mortality, MORTALITY_POINTS)
        + _points_below(readmission, READMISSION_POINTS)
        + _points_above(satisfaction, SATISFACTION_POINTS)
    )


def grade_for_score(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return LOWEST_GRADE


def rate_department(mortality: float, readmission: float, satisfaction: float) -> str:
    return grade_for_score(rating_score(mortality, readmission, satisfaction))


# Trend


def detect_trend(samples: Sequence[DepartmentMetricSample]) -> Trend:
    """
    Compare recent against older mean mortality.

    Samples are re-sorted newest first regardless of input order; the first
    ``n // 2`` are the recent half. With fewer than two samples one half is
    empty and the trend is stable.
    """
    ordered = sorted(samples, key=lambda s: s.date, reverse=True)
    midpoint = len(ordered) // 2
    recent, older = ordered[:midpoint], ordered[midpoint:]
    if not recent or not older:
        return Trend.STABLE

    recent_mortality = mean_of(s.mortality_rate for s in recent)
    older_mortality = mean_of(s.mortality_rate for s in older)

    if recent_mortality < older_mortality * IMPROVING_FACTOR:
        return Trend.IMPROVING
    if recent_mortality > older_mortality * DECLINING_FACTOR:
        return Trend.DECLINING
    return Trend.STABLE


# Scoring


def _department_label(sample: DepartmentMetricSample) -> str:
    return sample.department_name or sample.department_id or UNKNOWN_DEPARTMENT


def group_by_department(
    samples: Iterable[DepartmentMetricSample],
) -> OrderedDict[str, list[DepartmentMetricSample]]:
    """Samples keyed by department id (name when the id is missing), first-seen order."""
    groups: OrderedDict[str, list[DepartmentMetricSample]] = OrderedDict()
    for sample in samples:
        key = sample.department_id or sample.department_name or UNKNOWN_DEPARTMENT
        groups.setdefault(key, []).append(sample)
    return groups


def score_department(
    samples: Sequence[DepartmentMetricSample], department: str | None = None
) -> DepartmentPerformance:
    """
    Score one department from its samples in the lookback window.

    Args:
        samples: All samples of a single department, any order.
        department: Display name; taken from the first sample when omitted.

    Returns:
        Averages at one decimal, summed patient count, rating and trend.
        An empty sample set scores zeros with rating N/A.
    """
    name = department or (_department_label(samples[0]) if samples else UNKNOWN_DEPARTMENT)
    if not samples:
        return DepartmentPerformance(department=name)

    first = samples[0]
    avg_los = mean_of(s.avg_length_of_stay for s in samples)
    readmission = mean_of(s.readmission_rate for s in samples)
    mortality = mean_of(s.mortality_rate for s in samples)
    satisfaction = mean_of(s.satisfaction_score for s in samples)
    patient_count = sum(s.patient_count or 0 for s in samples)

    return DepartmentPerformance(
        department=name,
        code=first.department_code or "",
        hospital=first.facility_name or "",
        avg_los=round_half_up(avg_los, 1),
        readmission=round_half_up(readmission, 1),
        mortality=round_half_up(mortality, 1),
        rating=rate_department(mortality, readmission, satisfaction),
        trend=detect_trend(samples),
        patient_count=int(round_half_up(patient_count)),
        satisfaction_score=round_half_up(satisfaction, 1),
    )


def rank_departments(departments: Iterable[DepartmentPerformance]) -> list[DepartmentPerformance]:
    """Lowest mortality + readmission first; ties keep their input order."""
    return sorted(departments, key=lambda d: d.mortality + d.readmission)


def score_departments(samples: Iterable[DepartmentMetricSample]) -> list[DepartmentPerformance]:
    """Group raw samples by department, score each group and rank the cohort."""
    scored = [score_department(group) for group in group_by_department(samples).values()]
    return rank_departments(scored)


def summarize_cohort(
    ranked: Sequence[DepartmentPerformance], attention_limit: int = 3
) -> PerformanceSummary:
    """
    Cohort-level view over already ranked departments.

    ``needs_attention`` lists departments graded C or D or trending down, in
    rank order, capped at ``attention_limit``.
    """
    if not ranked:
        return PerformanceSummary(
            total_departments=0,
            average_mortality=0.0,
            average_readmission=0.0,
            top_performer=None,
            needs_attention=[],
        )

    flagged = [
        d for d in ranked if d.rating in ATTENTION_RATINGS or d.trend is Trend.DECLINING
    ][:attention_limit]

    return PerformanceSummary(
        total_departments=len(ranked),
        average_mortality=round_half_up(mean_of(d.mortality for d in ranked), 1),
        average_readmission=round_half_up(mean_of(d.readmission for d in ranked), 1),
        top_performer=ranked[0].department,
        needs_attention=[
            AttentionItem(
                department=d.department, rating=d.rating, trend=d.trend, mortality=d.mortality
            )
            for d in flagged
        ],
    )


# Facility-wide KPIs

KPI_BASELINE = ClinicalKpis(
    avg_length_of_stay=5.2,
    readmission_rate=8.7,
    mortality_rate=2.1,
    lab_turnaround_time=DEFAULT_LAB_TURNAROUND_HOURS,
    surgery_success_rate=SURGERY_SUCCESS_RATE,
    infection_rate=1.2,
)


def calculate_clinical_kpis(
    samples: Sequence[HospitalMetricSample], lab_turnaround: float | None = None
) -> ClinicalKpis:
    """
    Facility KPIs averaged over the window.

    With no samples the fixed baseline is returned so the dashboard always
    has values to show. Surgery success has no upstream source yet and is
    always the baseline figure.
    """
    if not samples:
        logger.info("kpi_baseline_applied", reason="no_hospital_metrics")
        return KPI_BASELINE

    return ClinicalKpis(
        avg_length_of_stay=round_half_up(mean_of(s.average_length_of_stay for s in samples), 1),
        readmission_rate=round_half_up(mean_of(s.readmission_rate for s in samples), 1),
        mortality_rate=round_half_up(mean_of(s.mortality_rate for s in samples), 1),
        lab_turnaround_time=(
            lab_turnaround if lab_turnaround is not None else DEFAULT_LAB_TURNAROUND_HOURS
        ),
        surgery_success_rate=SURGERY_SUCCESS_RATE,
        infection_rate=round_half_up(mean_of(s.infection_rate for s in samples), 1),
    )
