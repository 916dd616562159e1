"""Human-readable maintenance report for a vehicle."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .alerts import MaintenanceAlert
from .calculations import days_between, parse_date
from .classify import sort_newest_first
from .risk import RiskAssessment
from .service_record import ServiceRecord
from .status import Priority
from .vehicle import Vehicle


@dataclass
class UpcomingMaintenance:
    title: str
    due_date: str
    priority: Priority

    def to_dict(self) -> dict:
        return {"title": self.title, "due_date": self.due_date, "priority": self.priority.value}


@dataclass
class MaintenanceReport:
    """Composite report, rebuilt on every request."""

    vehicle: Vehicle
    summary: str
    history: List[ServiceRecord]
    alerts: List[MaintenanceAlert]
    assessment: Optional[RiskAssessment]
    upcoming: List[UpcomingMaintenance] = field(default_factory=list)
    frequent_services: List[str] = field(default_factory=list)
    attention_needed: bool = False


def frequent_services(history: List[ServiceRecord], limit: int = 5) -> List[str]:
    """Most common words (longer than 3 letters) across service descriptions."""
    counts = Counter(
        word
        for record in history
        for word in (record.description or "").lower().split()
        if len(word) > 3
    )
    return [word for word, _ in counts.most_common(limit)]


def build_summary(
    history: List[ServiceRecord],
    alerts: List[MaintenanceAlert],
    assessment: Optional[RiskAssessment],
    today: date,
) -> str:
    total_cost = sum(r.cost or 0 for r in history)
    critical = sum(1 for a in alerts if a.priority is Priority.CRITICAL)

    summary = f"Motorcycle with {len(history)} services performed, "
    summary += f"total invested ${total_cost:,.2f}. "
    if history:
        last = sort_newest_first(history)[0]
        summary += f"Last service {days_between(last.date, today)} days ago. "
    if assessment is not None:
        summary += f"Risk level: {assessment.level.value} (score {assessment.score}). "
    if critical > 0:
        summary += f"Attention needed: {critical} critical alert(s) pending."
    else:
        summary += "Overall status: up to date with maintenance."
    return summary


def build_report(
    vehicle: Vehicle,
    history: List[ServiceRecord],
    alerts: List[MaintenanceAlert],
    assessment: Optional[RiskAssessment],
    today: Optional[date] = None,
) -> MaintenanceReport:
    """Compose history, alerts and assessment into a report. No external calls."""
    today = parse_date(today) or date.today()
    vehicle_history = [r for r in history if r.vehicle_id == vehicle.id]
    vehicle_alerts = [a for a in alerts if a.vehicle_id == vehicle.id]
    critical = any(a.priority is Priority.CRITICAL for a in vehicle_alerts)

    return MaintenanceReport(
        vehicle=vehicle,
        summary=build_summary(vehicle_history, vehicle_alerts, assessment, today),
        history=sort_newest_first(vehicle_history),
        alerts=vehicle_alerts,
        assessment=assessment,
        upcoming=[
            UpcomingMaintenance(a.title, a.due_date, a.priority) for a in vehicle_alerts
        ],
        frequent_services=frequent_services(vehicle_history),
        attention_needed=critical,
    )
