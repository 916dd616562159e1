"""Helper functions for due-point, penalty and priority calculations."""

from datetime import date, datetime
from dateutil.relativedelta import relativedelta
from typing import Optional, Union

from .status import Priority, RiskLevel

DateLike = Union[str, date, datetime]


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Coerce an ISO string, date or datetime to a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole days from start to end (negative when end is earlier)."""
    return (parse_date(end) - parse_date(start)).days


def calc_due_odometer(
    last_odometer: Optional[float], interval_km: Optional[float], start_odometer: float = 0
) -> Optional[float]:
    """
    Calculate next due odometer reading.

    - With history: last_odometer + interval
    - Without history: start_odometer + interval (the current reading when
      the item was never serviced)
    """
    if interval_km is None:
        return None
    if last_odometer is not None:
        return last_odometer + interval_km
    return start_odometer + interval_km


def calc_due_date(
    last_date: Optional[date], interval_months: Optional[float]
) -> Optional[date]:
    """Calculate next due date: last + interval months."""
    if interval_months is None or last_date is None:
        return None
    months = int(interval_months)
    days = int((interval_months - months) * 30)
    return last_date + relativedelta(months=months, days=days)


def overdue_penalty(base_penalty: float, days_overdue: int) -> float:
    """Scale a base penalty by months overdue, between 1x and 3x."""
    multiplier = min(3.0, max(1.0, days_overdue / 30))
    return base_penalty * multiplier


def clamp_score(score: float) -> float:
    return max(0, min(100, score))


def level_for_score(score: float) -> RiskLevel:
    if score >= 80:
        return RiskLevel.LOW
    if score >= 60:
        return RiskLevel.MEDIUM
    if score >= 40:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def alert_priority(days_remaining: int, km_remaining: float) -> Optional[Priority]:
    """
    Priority for a projected due point, or None when it is not yet due.

    Items outside the 60 day / 1000 km window get no alert at all.
    """
    if days_remaining <= 0 or km_remaining <= 0:
        return Priority.CRITICAL
    if days_remaining <= 30 or km_remaining <= 500:
        return Priority.HIGH
    if days_remaining <= 60 or km_remaining <= 1000:
        return Priority.MEDIUM
    return None
