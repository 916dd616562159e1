"""Maintenance alert generation."""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

from jsonschema import ValidationError, validate

from .calculations import (
    alert_priority,
    calc_due_date,
    calc_due_odometer,
    days_between,
    parse_date,
)
from .classify import last_matching_record, record_matches
from .prompts import alerts_prompt
from .reasoning import ReasoningAdapter, extract_json
from .schedule import ScheduleCatalog, default_catalog, item_label
from .service_record import ServiceRecord
from .status import AlertKind, AlertStatus, Priority
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

# Provider offsets beyond a century are treated as malformed.
MAX_OFFSET_DAYS = 36500

ALERTS_RESPONSE_SCHEMA = {
    "type": "object",
    "required": ["alerts"],
    "properties": {
        "alerts": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["priority", "title", "description", "days_until_due"],
                "properties": {
                    "kind": {"enum": [kind.value for kind in AlertKind]},
                    "priority": {"enum": [p.value for p in Priority]},
                    "title": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                    "days_until_due": {
                        "type": "integer",
                        "minimum": -MAX_OFFSET_DAYS,
                        "maximum": MAX_OFFSET_DAYS,
                    },
                    "km_until_due": {"type": ["integer", "null"]},
                },
            },
        },
    },
}


@dataclass
class MaintenanceAlert:
    """An actionable due/overdue notice. Status changes belong to the caller."""

    vehicle_id: str
    kind: AlertKind
    priority: Priority
    title: str
    description: str
    due_date: str
    due_odometer: Optional[float] = None
    status: AlertStatus = AlertStatus.ACTIVE
    client_id: Optional[str] = None
    id: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "client_id": self.client_id,
            "kind": self.kind.value,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date,
            "due_odometer": self.due_odometer,
            "status": self.status.value,
            "created_at": self.created_at,
        }


def new_alert(**kwargs) -> MaintenanceAlert:
    """Build an alert with a fresh id and creation timestamp."""
    alert = MaintenanceAlert(**kwargs)
    alert.id = alert.id or uuid.uuid4().hex[:12]
    alert.created_at = alert.created_at or datetime.now().isoformat(timespec="seconds")
    return alert


@dataclass
class AlertGeneratorConfig:
    """
    Settings for AlertGenerator.

    The reasoning provider is only used when predictive_alerts is True and an
    adapter is supplied; both default to off.
    """

    reasoning: Optional[ReasoningAdapter] = None
    predictive_alerts: bool = False
    catalog: Optional[ScheduleCatalog] = None
    history_limit: int = 10


def _trigger_kind(item: str, days_remaining: int, km_remaining: float) -> AlertKind:
    if item == "general_inspection":
        return AlertKind.MANDATORY_INSPECTION
    by_km = alert_priority(math.inf, km_remaining)
    by_days = alert_priority(days_remaining, math.inf)
    if by_km is not None and (by_days is None or by_km.rank <= by_days.rank):
        return AlertKind.DISTANCE
    return AlertKind.TIME


def _describe(title: str, days_remaining: int, km_remaining: float) -> str:
    if days_remaining <= 0 and km_remaining <= 0:
        return f"{title} - OVERDUE by {-days_remaining} days and {-km_remaining:,.0f} km. Schedule immediately."
    if days_remaining <= 0:
        return f"{title} - OVERDUE by {-days_remaining} days. Schedule immediately."
    if km_remaining <= 0:
        return f"{title} - OVERDUE by {-km_remaining:,.0f} km. Schedule immediately."
    if days_remaining <= 30 or km_remaining <= 500:
        return f"{title} - due in {days_remaining} days or {km_remaining:,.0f} km. Schedule soon."
    return f"{title} - next due in {days_remaining} days or {km_remaining:,.0f} km."


class AlertGenerator:
    """Projects next-due points per maintenance item and flags the close ones."""

    def __init__(self, config: Optional[AlertGeneratorConfig] = None):
        self.config = config or AlertGeneratorConfig()
        self.catalog = self.config.catalog or default_catalog()

    def generate_alerts(
        self,
        vehicle: Vehicle,
        history: List[ServiceRecord],
        current_odometer: float,
        today: Optional[date] = None,
    ) -> List[MaintenanceAlert]:
        """Unsaved alerts for a vehicle; only MEDIUM, HIGH and CRITICAL are emitted."""
        today = parse_date(today) or date.today()
        if self.config.predictive_alerts and self.config.reasoning is not None:
            alerts = self._generate_with_reasoning(vehicle, history, current_odometer, today)
            if alerts is not None:
                return alerts
        return self.generate_deterministic(vehicle, history, current_odometer, today)

    def _generate_with_reasoning(self, vehicle, history, current_odometer, today):
        prompt = alerts_prompt(
            vehicle, history, current_odometer, today, self.config.history_limit
        )
        text = self.config.reasoning.query(prompt)
        if text is None:
            return None
        try:
            data = extract_json(text)
            validate(instance=data, schema=ALERTS_RESPONSE_SCHEMA)
        except (ValueError, ValidationError) as e:
            logger.warning(
                "Malformed alert response for vehicle %s, using deterministic path: %s",
                vehicle.id,
                getattr(e, "message", e),
            )
            return None

        alerts = []
        for entry in data["alerts"]:
            priority = Priority(entry["priority"])
            if priority is Priority.LOW:
                continue
            km = entry.get("km_until_due")
            try:
                due_date = today + timedelta(days=entry["days_until_due"])
            except OverflowError as e:
                logger.warning(
                    "Alert due date out of range for vehicle %s, using deterministic path: %s",
                    vehicle.id,
                    e,
                )
                return None
            alerts.append(
                new_alert(
                    vehicle_id=vehicle.id,
                    kind=AlertKind(entry.get("kind") or AlertKind.DISTANCE.value),
                    priority=priority,
                    title=entry["title"],
                    description=entry["description"],
                    due_date=due_date.isoformat(),
                    due_odometer=current_odometer + km if km is not None else None,
                )
            )
        return alerts

    def generate_deterministic(
        self,
        vehicle: Vehicle,
        history: List[ServiceRecord],
        current_odometer: float,
        today: date,
    ) -> List[MaintenanceAlert]:
        schedule = self.catalog.schedule_for(vehicle.manufacturer, vehicle.model)
        if schedule is None:
            return []

        alerts = []
        for item, interval in schedule.items():
            last = last_matching_record(history, item)
            if last is not None:
                base_date, base_odometer = parse_date(last.date), last.odometer
            else:
                # Never serviced: count the interval from today
                base_date, base_odometer = today, current_odometer
            due_date = calc_due_date(base_date, interval.months)
            due_odometer = calc_due_odometer(base_odometer, interval.km)
            days_remaining = days_between(today, due_date)
            km_remaining = due_odometer - current_odometer

            priority = alert_priority(days_remaining, km_remaining)
            if priority is None:
                continue
            title = item_label(item)
            alerts.append(
                new_alert(
                    vehicle_id=vehicle.id,
                    kind=_trigger_kind(item, days_remaining, km_remaining),
                    priority=priority,
                    title=title,
                    description=_describe(title, days_remaining, km_remaining),
                    due_date=due_date.isoformat(),
                    due_odometer=due_odometer,
                )
            )

        for rule in schedule.special_rules:
            crossing = rule.last_crossing(current_odometer)
            if crossing is None:
                continue
            serviced = any(
                record_matches(r, rule.key) and (r.odometer or 0) >= crossing
                for r in history
            )
            if serviced:
                continue
            alerts.append(
                new_alert(
                    vehicle_id=vehicle.id,
                    kind=AlertKind.DISTANCE,
                    priority=Priority.HIGH,
                    title=rule.item,
                    description=rule.recommendation,
                    due_date=today.isoformat(),
                    due_odometer=crossing,
                )
            )
        return alerts


def generate_alerts(
    vehicle: Vehicle,
    history: List[ServiceRecord],
    current_odometer: float,
    config: Optional[AlertGeneratorConfig] = None,
    today: Optional[date] = None,
) -> List[MaintenanceAlert]:
    return AlertGenerator(config).generate_alerts(vehicle, history, current_odometer, today)


def alerts_for_completed_service(
    record: ServiceRecord, client_id: Optional[str] = None
) -> List[MaintenanceAlert]:
    """
    Alerts raised when a work order completes.

    - A MEDIUM reminder for the technician's next-due projection, if any.
    - A LOW warranty notice per replaced part with a warranty period,
      counted from the service date.
    """
    alerts = []
    if record.next_due is not None:
        nd = record.next_due
        due = parse_date(nd.date)
        title = f"Scheduled service: {nd.label}" if nd.label else "Scheduled service"
        alerts.append(
            new_alert(
                vehicle_id=record.vehicle_id,
                client_id=client_id,
                kind=AlertKind.DISTANCE,
                priority=Priority.MEDIUM,
                title=title,
                description=f"Next service at {nd.odometer:,.0f} km or on {due.isoformat()}",
                due_date=due.isoformat(),
                due_odometer=nd.odometer,
            )
        )

    service_date = parse_date(record.date)
    for part in record.replaced_parts:
        if not part.warranty_months:
            continue
        expires = calc_due_date(service_date, part.warranty_months)
        due_odometer = None
        if part.warranty_km:
            due_odometer = calc_due_odometer(record.odometer, part.warranty_km)
        alerts.append(
            new_alert(
                vehicle_id=record.vehicle_id,
                client_id=client_id,
                kind=AlertKind.PART_WARRANTY,
                priority=Priority.LOW,
                title="Part warranty",
                description=f"Warranty for {part.name} expires on {expires.isoformat()}",
                due_date=expires.isoformat(),
                due_odometer=due_odometer,
            )
        )
    return alerts


def active_alerts(
    alerts: List[MaintenanceAlert], client_id: Optional[str] = None
) -> List[MaintenanceAlert]:
    """Active alerts, optionally for one client, most urgent first."""
    result = [a for a in alerts if a.status is AlertStatus.ACTIVE]
    if client_id:
        result = [a for a in result if a.client_id == client_id]
    return sorted(result, key=lambda a: a.priority.rank)
