"""
Severity ordering and category grouping for clinical alerts.

Alerts arrive from the store already restricted to unresolved ones. This
module only orders, filters and groups them; it never changes an alert.
"""

from collections import OrderedDict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from clinical_core.domain.models import Alert, Severity
from clinical_core.domain.payloads import AlertGroup, AlertView, CriticalAlertView

logger = structlog.get_logger(__name__)

SEVERITY_WEIGHTS: dict[str, int] = {
    Severity.LOW.value: 1,
    Severity.MEDIUM.value: 2,
    Severity.HIGH.value: 3,
    Severity.CRITICAL.value: 4,
}

GENERAL_CATEGORY = "General"
DEFAULT_CATEGORY_ICON = "⚠️"
DEFAULT_CATEGORY_DESCRIPTION = "General clinical alerts"

CATEGORY_ICONS: dict[str, str] = {
    "cardiac": "❤️",
    "respiratory": "🫁",
    "neurological": "🧠",
    "metabolic": "⚡",
    "temperature": "🌡️",
    "medication": "💊",
    "equipment": "🔧",
    "capacity": "🏥",
}

CATEGORY_DESCRIPTIONS: dict[str, str] = {
    "cardiac": "Irregular heart rhythms detected",
    "respiratory": "Low oxygen saturation alerts",
    "neurological": "Consciousness level changes",
    "metabolic": "Blood sugar fluctuations",
    "temperature": "Fever and temperature alerts",
    "medication": "Medication and dosage alerts",
    "equipment": "Medical equipment issues",
    "capacity": "Hospital capacity warnings",
}


# Severity weighting


def severity_weight(severity: str | Severity | None) -> int:
    """Position of a severity on the low..critical scale; unknown or missing is 0."""
    if severity is None:
        return 0
    key = severity.value if isinstance(severity, Severity) else str(severity).strip().lower()
    return SEVERITY_WEIGHTS.get(key, 0)


def max_severity(current: str, candidate: str) -> str:
    """The more severe of two severities; ``current`` wins ties."""
    return candidate if severity_weight(candidate) > severity_weight(current) else current


def meets_min_severity(severity: str | None, minimum: str | Severity | None) -> bool:
    if minimum is None:
        return True
    return severity_weight(severity) >= severity_weight(minimum)


def filter_by_min_severity(
    alerts: Iterable[Alert], minimum: str | Severity | None
) -> list[Alert]:
    return [alert for alert in alerts if meets_min_severity(alert.severity, minimum)]


# Category lookup


def normalize_category(category: str | None) -> str:
    """Grouping key for a category: trimmed and lower-cased, General when blank."""
    if category is None or not category.strip():
        return GENERAL_CATEGORY.lower()
    return category.strip().lower()


def category_icon(category: str | None) -> str:
    return CATEGORY_ICONS.get(normalize_category(category), DEFAULT_CATEGORY_ICON)


def category_description(category: str | None) -> str:
    return CATEGORY_DESCRIPTIONS.get(normalize_category(category), DEFAULT_CATEGORY_DESCRIPTION)


# Grouping


@dataclass
class _GroupAccumulator:
    category: str
    worst_severity: str = Severity.LOW.value
    alerts: list[Alert] = field(default_factory=list)

    def add(self, alert: Alert) -> None:
        self.alerts.append(alert)
        self.worst_severity = max_severity(self.worst_severity, alert.severity)

    def freeze(self) -> AlertGroup:
        return AlertGroup(
            category=self.category,
            count=len(self.alerts),
            worst_severity=self.worst_severity,
            icon=category_icon(self.category),
            description=category_description(self.category),
            alerts=[AlertView.from_alert(alert) for alert in self.alerts],
        )


def aggregate_alerts_by_category(
    alerts: Iterable[Alert], patient_only: bool = False
) -> list[AlertGroup]:
    """
    Group alerts by clinical category in first-seen order.

    Each group starts at ``low`` and its worst severity only moves up on a
    strictly heavier alert, so the first-seen severity wins ties. Category
    matching ignores case; the group keeps the spelling it was first seen with.

    Args:
        alerts: Unresolved alerts in store order.
        patient_only: Drop alerts that are not attached to a patient.

    Returns:
        One group per category, in order of first occurrence.
    """
    groups: OrderedDict[str, _GroupAccumulator] = OrderedDict()

    for alert in alerts:
        if patient_only and alert.patient_id is None:
            continue
        key = normalize_category(alert.category)
        group = groups.get(key)
        if group is None:
            label = alert.category.strip() if alert.category and alert.category.strip() else None
            group = groups[key] = _GroupAccumulator(category=label or GENERAL_CATEGORY)
        group.add(alert)

    return [group.freeze() for group in groups.values()]


# Critical alert feed


def format_time_ago(moment: datetime, now: datetime | None = None) -> str:
    elapsed = (now or datetime.now(UTC)) - moment
    minutes = int(elapsed.total_seconds() // 60)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"

    hours = minutes // 60
    if hours < 24:
        return f"{hours} hr ago"

    days = hours // 24
    return f"{days} day{'s' if days > 1 else ''} ago"


def critical_only(alerts: Iterable[Alert]) -> list[Alert]:
    return [a for a in alerts if severity_weight(a.severity) == SEVERITY_WEIGHTS["critical"]]


def build_critical_alert_feed(
    alerts: Sequence[Alert], limit: int = 10, now: datetime | None = None
) -> list[CriticalAlertView]:
    """Critical alerts only, truncated to ``limit`` and numbered by priority."""
    critical = critical_only(alerts)
    if len(critical) > limit:
        logger.debug("critical_alert_feed_truncated", available=len(critical), limit=limit)

    return [
        CriticalAlertView(
            id=alert.id,
            severity=alert.severity,
            title=alert.title,
            message=alert.message,
            time_ago=format_time_ago(alert.created_at, now),
            priority=index + 1,
            patient=alert.patient_name,
            category=alert.category,
            is_acknowledged=alert.acknowledged,
        )
        for index, alert in enumerate(critical[:limit])
    ]
