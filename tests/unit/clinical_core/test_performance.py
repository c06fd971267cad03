"""Tests for department rating, trend detection, ranking and facility KPIs."""

import random
from collections.abc import Callable
from datetime import date, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from clinical_core.domain.models import DepartmentMetricSample, HospitalMetricSample, Trend
from clinical_core.domain.payloads import DepartmentPerformance
from clinical_core.services.performance import (
    KPI_BASELINE,
    SURGERY_SUCCESS_RATE,
    calculate_clinical_kpis,
    detect_trend,
    grade_for_score,
    rank_departments,
    rating_score,
    score_department,
    score_departments,
    summarize_cohort,
)

MakeSample = Callable[..., DepartmentMetricSample]


def _series(make_sample: MakeSample, mortalities: list[float]) -> list[DepartmentMetricSample]:
    """One sample per day, oldest first."""
    start = date(2025, 2, 1)
    return [
        make_sample(date=start + timedelta(days=offset), mortality_rate=mortality)
        for offset, mortality in enumerate(mortalities)
    ]


class TestRating:
    @pytest.mark.parametrize(
        "score,grade",
        [
            (9, "A+"),
            (8, "A+"),
            (7, "A"),
            (6, "B+"),
            (5, "B+"),
            (4, "B"),
            (3, "B"),
            (1, "C"),
            (0, "D"),
        ],
    )
    def test_grade_thresholds(self, score: int, grade: str) -> None:
        assert grade_for_score(score) == grade

    def test_bounds_are_strict(self) -> None:
        assert rating_score(1.0, 5.0, 4.5) == 2 + 2 + 2
        assert rating_score(0.9, 4.9, 4.6) == 9
        assert rating_score(5.0, 12.0, 3.5) == 0

    @given(
        low=st.floats(min_value=0, max_value=20),
        high=st.floats(min_value=0, max_value=20),
        readmission=st.floats(min_value=0, max_value=20),
        satisfaction=st.floats(min_value=0, max_value=5),
    )
    def test_higher_mortality_never_scores_more(
        self, low: float, high: float, readmission: float, satisfaction: float
    ) -> None:
        low, high = sorted((low, high))
        assert rating_score(high, readmission, satisfaction) <= rating_score(
            low, readmission, satisfaction
        )

    @given(
        mortality=st.floats(min_value=0, max_value=20),
        readmission=st.floats(min_value=0, max_value=20),
        satisfaction=st.floats(min_value=0, max_value=5),
    )
    def test_score_stays_in_range(
        self, mortality: float, readmission: float, satisfaction: float
    ) -> None:
        assert 0 <= rating_score(mortality, readmission, satisfaction) <= 9


class TestTrend:
    def test_flat_mortality_is_stable(self, make_sample: MakeSample) -> None:
        assert detect_trend(_series(make_sample, [1.0] * 10)) is Trend.STABLE

    def test_falling_mortality_is_improving_in_any_input_order(
        self, make_sample: MakeSample
    ) -> None:
        samples = _series(make_sample, [2.0, 2.0, 2.0, 0.5, 0.5, 0.5])
        random.Random(7).shuffle(samples)

        assert detect_trend(samples) is Trend.IMPROVING

    def test_rising_mortality_is_declining(self, make_sample: MakeSample) -> None:
        samples = _series(make_sample, [1.0, 1.0, 3.0, 3.0])
        assert detect_trend(list(reversed(samples))) is Trend.DECLINING

    def test_small_change_is_stable(self, make_sample: MakeSample) -> None:
        assert detect_trend(_series(make_sample, [1.0, 1.05])) is Trend.STABLE

    def test_single_sample_is_stable(self, make_sample: MakeSample) -> None:
        assert detect_trend([make_sample()]) is Trend.STABLE


class TestScoreDepartment:
    def test_healthy_department(self, make_sample: MakeSample) -> None:
        samples = _series(make_sample, [1.0] * 10)

        result = score_department(samples)

        assert result.department == "Cardiology"
        assert result.code == "CARD"
        assert result.hospital == "General Hospital"
        assert (result.mortality, result.readmission, result.satisfaction_score) == (1.0, 4.0, 4.6)
        assert result.rating == "A+"
        assert result.trend is Trend.STABLE
        assert result.patient_count == 200

    def test_missing_metric_counts_as_zero(self, make_sample: MakeSample) -> None:
        samples = [make_sample(mortality_rate=None), make_sample(mortality_rate=2.0)]
        assert score_department(samples).mortality == 1.0

    def test_empty_samples_are_not_rated(self) -> None:
        result = score_department([], department="Oncology")

        assert result.department == "Oncology"
        assert result.rating == "N/A"
        assert result.trend is Trend.STABLE
        assert result.patient_count == 0

    def test_camel_case_keys(self, make_sample: MakeSample) -> None:
        dumped = score_department([make_sample()]).model_dump(by_alias=True)
        assert {"avgLOS", "patientCount", "satisfactionScore"} <= dumped.keys()


class TestRanking:
    def test_lowest_burden_first_and_ties_stable(self) -> None:
        departments = [
            DepartmentPerformance(department="A", mortality=2.0, readmission=6.0),
            DepartmentPerformance(department="B", mortality=1.0, readmission=3.0),
            DepartmentPerformance(department="C", mortality=3.0, readmission=5.0),
        ]

        assert [d.department for d in rank_departments(departments)] == ["B", "A", "C"]

    def test_groups_raw_samples_by_department(self, make_sample: MakeSample) -> None:
        samples = [
            make_sample(department_id="dep-2", department_name="Surgery", mortality_rate=4.0),
            make_sample(),
            make_sample(department_id="dep-2", department_name="Surgery", mortality_rate=6.0),
        ]

        ranked = score_departments(samples)

        assert [(d.department, d.mortality) for d in ranked] == [
            ("Cardiology", 1.0),
            ("Surgery", 5.0),
        ]


class TestCohortSummary:
    def test_empty_cohort(self) -> None:
        summary = summarize_cohort([])

        assert summary.total_departments == 0
        assert summary.top_performer is None
        assert summary.needs_attention == []

    def test_flags_low_grades_and_declines_in_rank_order(self) -> None:
        ranked = [
            DepartmentPerformance(department="A", mortality=0.5, readmission=3.0, rating="A+"),
            DepartmentPerformance(
                department="B", mortality=1.5, readmission=4.0, rating="A", trend=Trend.DECLINING
            ),
            DepartmentPerformance(department="C", mortality=4.0, readmission=9.0, rating="C"),
            DepartmentPerformance(department="D", mortality=6.0, readmission=13.0, rating="D"),
        ]

        summary = summarize_cohort(ranked, attention_limit=2)

        assert summary.total_departments == 4
        assert summary.top_performer == "A"
        assert summary.average_mortality == 3.0
        assert [item.department for item in summary.needs_attention] == ["B", "C"]


class TestClinicalKpis:
    def test_no_samples_returns_baseline(self) -> None:
        assert calculate_clinical_kpis([]) == KPI_BASELINE

    def test_averages_samples(self) -> None:
        samples = [
            HospitalMetricSample(
                date=date(2025, 3, day),
                average_length_of_stay=4.0 + day,
                readmission_rate=8.0,
                mortality_rate=None,
                infection_rate=1.0,
            )
            for day in (1, 2)
        ]

        kpis = calculate_clinical_kpis(samples, lab_turnaround=2.3)

        assert kpis.avg_length_of_stay == 5.5
        assert kpis.readmission_rate == 8.0
        assert kpis.mortality_rate == 0.0
        assert kpis.lab_turnaround_time == 2.3
        assert kpis.surgery_success_rate == SURGERY_SUCCESS_RATE
        assert kpis.infection_rate == 1.0
