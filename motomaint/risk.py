"""Maintenance risk scoring for a single vehicle."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from jsonschema import ValidationError, validate

from .calculations import (
    calc_due_date,
    calc_due_odometer,
    clamp_score,
    days_between,
    level_for_score,
    overdue_penalty,
    parse_date,
)
from .classify import last_matching_record, sort_newest_first
from .prompts import risk_prompt
from .reasoning import ReasoningAdapter, extract_json
from .schedule import ScheduleCatalog, base_penalty, default_catalog, item_label
from .service_record import ServiceRecord
from .status import Priority, RiskLevel, ServiceKind
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

RISK_RESPONSE_SCHEMA = {
    "type": "object",
    "required": ["risk_level", "score", "risk_factors", "recommendations"],
    "properties": {
        "risk_level": {"enum": [level.value for level in RiskLevel]},
        "score": {"type": "number"},
        "risk_factors": {"type": "array", "items": {"type": "string"}},
        "recommendations": {"type": "array", "items": {"type": "string"}},
        "upcoming_services": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["item", "urgency", "due"],
                "properties": {
                    "item": {"type": "string"},
                    "urgency": {"enum": ["low", "medium", "high"]},
                    "due": {"type": "string"},
                },
            },
        },
    },
}


@dataclass
class UpcomingService:
    """A maintenance item flagged by the risk analysis."""

    item: str
    urgency: Priority
    due: str

    def to_dict(self) -> dict:
        return {"item": self.item, "urgency": self.urgency.value, "due": self.due}


@dataclass
class RiskAssessment:
    """Computed maintenance health of one vehicle. Never persisted."""

    level: RiskLevel
    score: int
    risk_factors: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    upcoming_services: List[UpcomingService] = field(default_factory=list)
    source: str = "deterministic"

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "score": self.score,
            "risk_factors": list(self.risk_factors),
            "recommendations": list(self.recommendations),
            "upcoming_services": [s.to_dict() for s in self.upcoming_services],
            "source": self.source,
        }


@dataclass
class RiskAnalyzerConfig:
    """
    Settings for RiskAnalyzer.

    reasoning: adapter to try before the deterministic scoring; None (the
        default) means the deterministic path only.
    history_limit: how many recent records are sent to the provider.
    """

    reasoning: Optional[ReasoningAdapter] = None
    catalog: Optional[ScheduleCatalog] = None
    history_limit: int = 10


def _overdue_urgency(days_overdue: int) -> Priority:
    if days_overdue > 90:
        return Priority.HIGH
    if days_overdue > 30:
        return Priority.MEDIUM
    return Priority.LOW


def _overdue_text(days_overdue: int, km_overdue: float) -> str:
    parts = []
    if days_overdue > 0:
        parts.append(f"{days_overdue} days")
    if km_overdue > 0:
        parts.append(f"{km_overdue:,.0f} km")
    return "overdue by " + " / ".join(parts)


def _average_cost(records: List[ServiceRecord]) -> float:
    return sum(r.cost or 0 for r in records) / len(records)


class RiskAnalyzer:
    """Scores a vehicle 0-100 (100 = healthy) from its service history."""

    def __init__(self, config: Optional[RiskAnalyzerConfig] = None):
        self.config = config or RiskAnalyzerConfig()
        self.catalog = self.config.catalog or default_catalog()

    def assess_risk(
        self,
        vehicle: Vehicle,
        history: List[ServiceRecord],
        current_odometer: float,
        today: Optional[date] = None,
    ) -> RiskAssessment:
        """
        Assess maintenance risk.

        Tries the reasoning provider first when one is configured; any
        failure there falls back to the deterministic scoring.
        """
        today = parse_date(today) or date.today()
        if self.config.reasoning is not None:
            assessment = self._assess_with_reasoning(vehicle, history, current_odometer, today)
            if assessment is not None:
                return assessment
        return self.assess_deterministic(vehicle, history, current_odometer, today)

    def _assess_with_reasoning(self, vehicle, history, current_odometer, today):
        prompt = risk_prompt(
            vehicle, history, current_odometer, today, self.config.history_limit
        )
        text = self.config.reasoning.query(prompt)
        if text is None:
            return None
        try:
            data = extract_json(text)
            validate(instance=data, schema=RISK_RESPONSE_SCHEMA)
        except (ValueError, ValidationError) as e:
            logger.warning(
                "Malformed risk assessment for vehicle %s, using deterministic path: %s",
                vehicle.id,
                getattr(e, "message", e),
            )
            return None
        return RiskAssessment(
            level=RiskLevel(data["risk_level"]),
            score=int(round(clamp_score(data["score"]))),
            risk_factors=list(data["risk_factors"]),
            recommendations=list(data["recommendations"]),
            upcoming_services=[
                UpcomingService(s["item"], Priority(s["urgency"]), s["due"])
                for s in data.get("upcoming_services") or []
            ],
            source="reasoning",
        )

    def assess_deterministic(
        self,
        vehicle: Vehicle,
        history: List[ServiceRecord],
        current_odometer: float,
        today: date,
    ) -> RiskAssessment:
        score = 100.0
        factors: List[str] = []
        recommendations: List[str] = []
        upcoming: List[UpcomingService] = []
        ordered = sort_newest_first(history)

        # Recency
        if not ordered:
            score -= 50
            factors.append("No maintenance history")
            recommendations.append("First full inspection needed")
        else:
            days_since_last = days_between(ordered[0].date, today)
            if days_since_last > 365:
                score -= 40
                factors.append("Over a year without maintenance")
                recommendations.append("Urgent general inspection recommended")
            elif days_since_last > 180:
                score -= 25
                factors.append("Over 6 months without maintenance")
                recommendations.append("Schedule a preventive inspection")

        # Manufacturer schedule conformance
        schedule = self.catalog.schedule_for(vehicle.manufacturer, vehicle.model)
        if schedule is not None:
            for item, interval in schedule.items():
                last = last_matching_record(ordered, item)
                if last is None:
                    continue
                due_date = calc_due_date(parse_date(last.date), interval.months)
                due_odometer = calc_due_odometer(last.odometer, interval.km)
                days_overdue = days_between(due_date, today)
                km_overdue = current_odometer - due_odometer
                if days_overdue <= 0 and km_overdue <= 0:
                    continue
                days_overdue = max(0, days_overdue)
                km_overdue = max(0, km_overdue)
                score -= overdue_penalty(base_penalty(item), days_overdue)
                due_text = _overdue_text(days_overdue, km_overdue)
                factors.append(f"{item_label(item)} {due_text}")
                upcoming.append(
                    UpcomingService(item_label(item), _overdue_urgency(days_overdue), due_text)
                )

        # History patterns
        if len(ordered) >= 3:
            corrective = sum(1 for r in ordered if r.kind is ServiceKind.CORRECTIVE)
            if corrective / len(ordered) > 0.3:
                score -= 20
                factors.append("High incidence of corrective repairs")
                recommendations.append("Investigate the root cause of recurring problems")
            if _average_cost(ordered[:3]) > 1.2 * _average_cost(ordered[-3:]):
                score -= 15
                factors.append("Rising maintenance costs")
                recommendations.append("Review the cost-benefit of preventive maintenance")

        # Age
        if today.year - vehicle.year > 10:
            score -= 10
            factors.append("Vehicle over 10 years old")
            recommendations.append("Pay special attention to wear components")

        score = int(round(clamp_score(score)))
        return RiskAssessment(
            level=level_for_score(score),
            score=score,
            risk_factors=factors,
            recommendations=recommendations,
            upcoming_services=upcoming,
        )


def assess_risk(
    vehicle: Vehicle,
    history: List[ServiceRecord],
    current_odometer: float,
    config: Optional[RiskAnalyzerConfig] = None,
    today: Optional[date] = None,
) -> RiskAssessment:
    return RiskAnalyzer(config).assess_risk(vehicle, history, current_odometer, today)
