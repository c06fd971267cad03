"""Admission counts and emergency department load over a lookback window."""

import math
from collections.abc import Sequence
from datetime import datetime

from clinical_core.domain.models import AdmissionRecord, AdmissionStatus, AdmissionType
from clinical_core.domain.payloads import AdmissionStats, EmergencyLoad
from clinical_core.services.time_windows import trend_boundaries

# Share of emergency admissions assumed critical until triage data is available
CRITICAL_CASE_SHARE = 0.15


def compute_admission_stats(
    admissions: Sequence[AdmissionRecord], now: datetime | None = None
) -> AdmissionStats:
    """
    Admissions in the last 24h and 7d, and the day-over-day change.

    ``trend_24h`` is the last 24 hours minus the 24 hours before that.
    Counts only cover what the caller fetched: a 1h window yields at most
    one hour of admissions in every bucket.
    """
    bounds = trend_boundaries(now)
    last_day = [a for a in admissions if a.admission_date >= bounds.day_ago]
    previous_day = sum(
        1 for a in admissions if bounds.two_days_ago <= a.admission_date < bounds.day_ago
    )

    return AdmissionStats(
        admissions_24h=len(last_day),
        admissions_7d=sum(1 for a in admissions if a.admission_date >= bounds.week_ago),
        trend_24h=len(last_day) - previous_day,
        case_findings_today=sum(1 for a in last_day if a.admission_type is AdmissionType.EMERGENCY),
        total_admissions=len(admissions),
    )


def compute_emergency_load(admissions: Sequence[AdmissionRecord]) -> EmergencyLoad:
    emergencies = [a for a in admissions if a.admission_type is AdmissionType.EMERGENCY]
    return EmergencyLoad(
        current_load=sum(1 for a in emergencies if a.status is AdmissionStatus.ACTIVE),
        total_patients=len(emergencies),
        critical_cases=math.floor(len(emergencies) * CRITICAL_CASE_SHARE),
    )
