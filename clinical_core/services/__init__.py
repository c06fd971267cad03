"""
Core services for the dashboard.

This package contains the aggregators, the payload composer and the
service that fetches records and composes dashboard payloads.
"""

from .dashboard_service import ClinicalDashboardService
from .record_sources import (
    ClinicalDataStore,
    FetchConfig,
    RecordFetcher,
    Result,
    records_or_none,
)

__all__ = [
    "ClinicalDashboardService",
    "ClinicalDataStore",
    "FetchConfig",
    "RecordFetcher",
    "Result",
    "records_or_none",
]
