"""
Geographic distribution of entities with top-N truncation.

Shares are computed against the full total before truncation, so the
returned percentages may sum to less than 100. They are not renormalized.
"""

from collections import OrderedDict
from collections.abc import Iterable

from clinical_core.domain.payloads import RegionShare
from clinical_core.services.numeric import round_half_up, safe_ratio

UNKNOWN_REGION = "Unknown"
UNKNOWN_PATIENT_REGION = "Unknown Region"
DEFAULT_TOP_N = 5


def count_by_label(labels: Iterable[str | None], unknown_label: str) -> OrderedDict[str, int]:
    """Count occurrences per label in first-seen order; blank labels count as ``unknown_label``."""
    counts: OrderedDict[str, int] = OrderedDict()
    for label in labels:
        key = label if label and label.strip() else unknown_label
        counts[key] = counts.get(key, 0) + 1
    return counts


def top_counts(counts: OrderedDict[str, int], top_n: int) -> list[tuple[str, int]]:
    """Largest counts first, equal counts in first-seen order."""
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:top_n]


def distribute_by_region(
    regions: Iterable[str | None],
    unknown_label: str = UNKNOWN_REGION,
    top_n: int = DEFAULT_TOP_N,
) -> list[RegionShare]:
    """
    Share of entities per region, largest first, at most ``top_n`` regions.

    Args:
        regions: One region label per entity; None for entities without one.
        unknown_label: Bucket name for missing labels. The patient distribution
            view uses "Unknown Region", the dashboard overview "Unknown".
        top_n: Maximum number of regions returned.
    """
    counts = count_by_label(regions, unknown_label)
    total = sum(counts.values())

    return [
        RegionShare(
            region_name=name,
            count=count,
            percentage=round_half_up(safe_ratio(count, total) * 100, 1),
        )
        for name, count in top_counts(counts, top_n)
    ]
