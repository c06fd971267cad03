"""Staffing and supply summaries over store-computed rows."""

from collections.abc import Iterable

from clinical_core.domain.models import StaffRatioRecord, SupplyRecord
from clinical_core.domain.payloads import StaffRatioView, StaffReport, SupplyReport, SupplyView
from clinical_core.services.numeric import mean_of, round_half_up

LOW_STOCK_STATUS = "low"


def summarize_staff(ratios: Iterable[StaffRatioRecord]) -> StaffReport:
    """
    Per-department nurse ratios and their mean.

    Departments with no ratio (0) are left out of the mean so an unstaffed
    ward does not pull the average down.
    """
    rows = [
        StaffRatioView(
            department=record.department,
            nurses=record.nurses_on_duty,
            patients=record.total_patients,
            ratio=record.ratio,
            target=record.target_ratio,
            status=record.status,
        )
        for record in ratios
    ]
    staffed = [row.ratio for row in rows if row.ratio > 0]
    return StaffReport(staff_ratios=rows, average_ratio=round_half_up(mean_of(staffed), 1))


def summarize_supplies(supplies: Iterable[SupplyRecord]) -> SupplyReport:
    rows = [
        SupplyView(
            item=record.item,
            current=record.current_stock,
            minimum=record.minimum_level,
            maximum=record.maximum_level,
            status=record.status,
        )
        for record in supplies
    ]
    return SupplyReport(
        supply_inventory=rows,
        critical_items=sum(1 for row in rows if row.status == LOW_STOCK_STATUS),
    )
