"""Rounding and division helpers shared by the aggregators."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round to ``ndigits`` decimals with ties going away from zero.

    The built-in ``round`` rounds ties to even, which would report a 12.5%
    occupancy as 12 rather than 13.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_percent(part: float, whole: float) -> int:
    """Whole-number percentage of ``part`` in ``whole``; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))


def safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def mean_of(values: Iterable[float | None]) -> float:
    """Arithmetic mean where a missing value counts as 0 but stays in the denominator."""
    items = [value or 0.0 for value in values]
    return safe_ratio(sum(items), len(items))
