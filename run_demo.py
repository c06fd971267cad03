"""
Console demo of the dashboard payloads against the in-memory sample store.

This script shows:
1. Configuration loading (falls back to a local demo config)
2. The executive overview and ICU command center
3. Department performance and clinical KPIs
4. Fallback behavior when store reads fail

Run with: uv run python run_demo.py
"""

import asyncio
import logging
from datetime import UTC, datetime

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.memory import build_sample_store
from clinical_core.config import (
    AggregationConfig,
    AppConfig,
    DataStoreConfig,
    LoggingConfig,
    get_config,
)
from clinical_core.services.dashboard_service import ClinicalDashboardService

console = Console()

RISK_STYLES = {"critical": "bold red", "high": "red", "moderate": "yellow", "stable": "green"}


def load_demo_config() -> AppConfig:
    """Environment config when DATA_STORE_URL is set, a local one otherwise."""
    try:
        return get_config()
    except ValueError:
        console.print("DATA_STORE_URL not set, using the local demo config", style="yellow")
        return AppConfig(
            data_store=DataStoreConfig(url="http://localhost:54321"),
            aggregation=AggregationConfig(),
            logging=LoggingConfig(format="console"),
        )


async def show_overview(service: ClinicalDashboardService) -> None:
    console.print(Panel("🏥 Executive Overview (24h)", style="blue"))
    overview = await service.dashboard_overview()

    stats = overview.admissions
    console.print(
        f"Admissions 24h: {stats.admissions_24h}  7d: {stats.admissions_7d}  "
        f"trend: {stats.trend_24h:+d}  emergency today: {stats.case_findings_today}"
    )

    beds = Table(title="Bed Occupancy")
    beds.add_column("Facility", style="cyan")
    beds.add_column("Total", justify="right")
    beds.add_column("Occupied", justify="right")
    beds.add_column("Rate", justify="right")
    for facility in overview.bed_occupancy:
        beds.add_row(
            facility.facility_name,
            str(facility.total),
            str(facility.occupied),
            f"{facility.occupancy_rate}%",
        )
    console.print(beds)

    alerts = Table(title="Critical Alerts")
    alerts.add_column("#", justify="right")
    alerts.add_column("Title", style="red")
    alerts.add_column("Patient")
    alerts.add_column("Age")
    for alert in overview.alerts:
        alerts.add_row(str(alert.priority), alert.title or "", alert.patient or "-", alert.time_ago)
    console.print(alerts)


async def show_icu(service: ClinicalDashboardService) -> None:
    console.print(Panel("🫀 ICU Command Center", style="blue"))
    icu = await service.icu_command_center("fac-knh")

    capacity = icu.capacity
    console.print(
        f"ICU beds: {capacity.occupied_beds}/{capacity.total_beds} occupied "
        f"({capacity.occupancy_rate}%), average stay {capacity.average_stay} days, "
        f"{capacity.active_alerts} urgent alerts"
    )

    patients = Table(title="ICU Patients")
    patients.add_column("Patient", style="cyan")
    patients.add_column("Room")
    patients.add_column("HR", justify="right")
    patients.add_column("BP")
    patients.add_column("SpO2", justify="right")
    patients.add_column("Risk")
    for patient in icu.patients:
        patients.add_row(
            patient.name,
            patient.room or "-",
            f"{patient.heart_rate:g}" if patient.heart_rate is not None else "-",
            patient.blood_pressure or "-",
            f"{patient.oxygen_sat:g}" if patient.oxygen_sat is not None else "-",
            f"[{RISK_STYLES[patient.risk_level.value]}]{patient.risk_level.value}[/]",
        )
    console.print(patients)
    console.print(f"Device utilization: {icu.devices.utilization_rate}%")


async def show_outcomes(service: ClinicalDashboardService) -> None:
    console.print(Panel("📈 Department Performance (30 days)", style="blue"))
    report = await service.department_performance()

    table = Table()
    table.add_column("Department", style="cyan")
    table.add_column("Mortality", justify="right")
    table.add_column("Readmission", justify="right")
    table.add_column("Rating")
    table.add_column("Trend")
    for department in report.departments:
        table.add_row(
            department.department,
            f"{department.mortality}",
            f"{department.readmission}",
            department.rating,
            department.trend.value,
        )
    console.print(table)
    console.print(f"Top performer: {report.summary.top_performer}", style="green")
    for item in report.summary.needs_attention:
        console.print(f"Needs attention: {item.department} ({item.rating}, {item.trend.value})")

    kpis = (await service.clinical_kpis()).kpis
    console.print(
        f"KPIs: LOS {kpis.avg_length_of_stay}d, readmission {kpis.readmission_rate}%, "
        f"mortality {kpis.mortality_rate}%, lab turnaround {kpis.lab_turnaround_time}h"
    )


async def show_fallbacks(config: AppConfig) -> None:
    console.print(Panel("🛡️ Fallbacks With Failing Store Reads", style="blue"))
    store = build_sample_store(
        fail_on={"fetch_lab_orders", "fetch_patients", "fetch_hospital_metrics"}
    )
    service = ClinicalDashboardService(store, config)

    lab = await service.lab_metrics()
    distribution = await service.patient_distribution()
    kpis = await service.clinical_kpis()

    console.print(f"Lab tests (sample): {lab.metrics.tests_today}", style="yellow")
    console.print(
        f"Regions (sample): {', '.join(r.region_name for r in distribution.regions)}",
        style="yellow",
    )
    console.print(f"KPI mortality (baseline): {kpis.kpis.mortality_rate}%", style="yellow")


async def run_demo() -> None:
    console.print(Panel("🩺 Clinical Metrics Engine - Demo", style="bold blue"))

    config = load_demo_config()
    logging.basicConfig(level=config.logging.level, format="%(message)s")
    service = ClinicalDashboardService(build_sample_store(datetime.now(UTC)), config)

    await show_overview(service)
    await show_icu(service)
    await show_outcomes(service)
    await show_fallbacks(config)


if __name__ == "__main__":
    try:
        asyncio.run(run_demo())
    except KeyboardInterrupt:
        console.print("\n👋 Demo stopped by user", style="yellow")
