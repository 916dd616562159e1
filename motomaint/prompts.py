"""Prompt text sent to the reasoning provider."""

from datetime import date
from typing import List

from .classify import sort_newest_first
from .service_record import ServiceRecord
from .vehicle import Vehicle


def describe_history(history: List[ServiceRecord], limit: int) -> str:
    lines = []
    for record in sort_newest_first(history)[:limit]:
        parts = ", ".join(record.part_names) or "none"
        lines.append(
            f"- {record.date}: {record.odometer:,.0f} km, {record.kind.value}, "
            f"\"{record.description}\", cost {record.cost:.2f}, parts: {parts}"
        )
    return "\n".join(lines) if lines else "- no service records"


def vehicle_context(
    vehicle: Vehicle,
    history: List[ServiceRecord],
    current_odometer: float,
    today: date,
    limit: int,
) -> str:
    return (
        f"Motorcycle: {vehicle.manufacturer} {vehicle.model}, year {vehicle.year}\n"
        f"Current odometer: {current_odometer:,.0f} km\n"
        f"Today: {today.isoformat()}\n"
        f"Most recent service records (newest first, up to {limit}):\n"
        f"{describe_history(history, limit)}\n"
    )


def risk_prompt(vehicle, history, current_odometer, today, limit=10) -> str:
    return (
        "You are an experienced motorcycle mechanic assessing maintenance risk.\n\n"
        + vehicle_context(vehicle, history, current_odometer, today, limit)
        + "\nRespond with a single JSON object and nothing else, shaped as:\n"
        '{"risk_level": "low|medium|high|critical", "score": <0-100, 100 = no risk>, '
        '"risk_factors": [<string>], "recommendations": [<string>], '
        '"upcoming_services": [{"item": <string>, "urgency": "low|medium|high", '
        '"due": <string>}]}'
    )


def alerts_prompt(vehicle, history, current_odometer, today, limit=10) -> str:
    return (
        "You are an experienced motorcycle mechanic planning upcoming maintenance.\n\n"
        + vehicle_context(vehicle, history, current_odometer, today, limit)
        + "\nList the maintenance items that are overdue or due within 60 days or "
        "1000 km. Respond with a single JSON object and nothing else, shaped as:\n"
        '{"alerts": [{"kind": "distance|time|part-warranty|mandatory-inspection", '
        '"priority": "medium|high|critical", "title": <string>, '
        '"description": <string>, "days_until_due": <integer, negative if overdue>, '
        '"km_until_due": <integer or null>}]}'
    )
