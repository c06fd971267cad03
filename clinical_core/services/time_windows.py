"""
Timeframe tokens to concrete lookback windows.

Dashboard endpoints take a symbolic timeframe ("1h", "24h", "7d", ...). Two
token families exist: hour-based for operational views and day-based for
outcome KPIs. Unknown tokens fall back to the widest window of their family.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

HOURLY_LOOKBACKS: dict[str, timedelta] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
}
DEFAULT_HOURLY_LOOKBACK = timedelta(hours=168)

DAILY_LOOKBACKS: dict[str, timedelta] = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_DAILY_LOOKBACK = timedelta(days=90)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end) resolved from a timeframe token."""

    timeframe: str
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class TrendBoundaries:
    """Instants used to compare the last 24h with the 24h before it."""

    now: datetime
    day_ago: datetime
    two_days_ago: datetime
    week_ago: datetime


def resolve_lookback(timeframe: str | None) -> timedelta:
    """Map "1h" and "24h" to their own span; anything else is 7 days."""
    return HOURLY_LOOKBACKS.get(timeframe or "", DEFAULT_HOURLY_LOOKBACK)


def resolve_lookback_days(timeframe: str | None) -> timedelta:
    """Map "7d" and "30d" to their own span; anything else is 90 days."""
    return DAILY_LOOKBACKS.get(timeframe or "", DEFAULT_DAILY_LOOKBACK)


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(UTC)


def resolve_window(timeframe: str | None, now: datetime | None = None) -> TimeWindow:
    end = _now(now)
    return TimeWindow(timeframe=timeframe or "", start=end - resolve_lookback(timeframe), end=end)


def resolve_day_window(timeframe: str | None, now: datetime | None = None) -> TimeWindow:
    end = _now(now)
    return TimeWindow(
        timeframe=timeframe or "", start=end - resolve_lookback_days(timeframe), end=end
    )


def window_for_days(days: int, now: datetime | None = None) -> TimeWindow:
    """Window covering the last ``days`` days, for callers that pass a day count directly."""
    end = _now(now)
    return TimeWindow(timeframe=f"{days}d", start=end - timedelta(days=days), end=end)


def trend_boundaries(now: datetime | None = None) -> TrendBoundaries:
    current = _now(now)
    return TrendBoundaries(
        now=current,
        day_ago=current - timedelta(hours=24),
        two_days_ago=current - timedelta(hours=48),
        week_ago=current - timedelta(days=7),
    )
