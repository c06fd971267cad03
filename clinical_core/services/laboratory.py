"""Laboratory throughput and turnaround metrics."""

from collections.abc import Sequence

from clinical_core.domain.models import LabOrder
from clinical_core.domain.payloads import LabMetrics, LabTestCount
from clinical_core.services.distribution import count_by_label, top_counts
from clinical_core.services.numeric import mean_of, round_half_up

COMPLETED_STATUS = "completed"
UNKNOWN_TEST = "Unknown"
DEFAULT_TEST_ICON = "🧪"
DEFAULT_TURNAROUND_HOURS = 3.4
TOP_TESTS = 5
SECONDS_PER_HOUR = 60 * 60


def turnaround_hours(orders: Sequence[LabOrder]) -> float | None:
    """Mean hours from order to completion over completed orders; None when there are none."""
    durations = [
        (order.completed_at - order.ordered_at).total_seconds() / SECONDS_PER_HOUR
        for order in orders
        if order.status == COMPLETED_STATUS and order.completed_at is not None
    ]
    return mean_of(durations) if durations else None


def rank_tests(orders: Sequence[LabOrder], top_n: int = TOP_TESTS) -> list[LabTestCount]:
    """Most ordered test types; each keeps the icon of its first order that has one."""
    icons: dict[str, str] = {}
    for order in orders:
        if order.test_icon:
            icons.setdefault(order.test_name or UNKNOWN_TEST, order.test_icon)

    counts = count_by_label((order.test_name for order in orders), UNKNOWN_TEST)
    return [
        LabTestCount(test_type=name, count=count, icon=icons.get(name, DEFAULT_TEST_ICON))
        for name, count in top_counts(counts, top_n)
    ]


def compute_lab_metrics(orders: Sequence[LabOrder]) -> LabMetrics:
    """
    Orders placed in the window, split by completion, with mean turnaround.

    Turnaround falls back to the 3.4 hour baseline when no order in the
    window has completed.
    """
    completed = sum(1 for order in orders if order.status == COMPLETED_STATUS)
    turnaround = turnaround_hours(orders)
    if turnaround is None:
        turnaround = DEFAULT_TURNAROUND_HOURS

    return LabMetrics(
        tests_today=len(orders),
        avg_turnaround_time=round_half_up(turnaround, 1),
        pending_results=len(orders) - completed,
        completed_tests=completed,
        top_tests=rank_tests(orders),
    )
