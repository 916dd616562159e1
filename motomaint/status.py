"""Enums for service kinds, alert priorities and risk levels."""

from enum import Enum


class ServiceKind(Enum):
    """Kind of work recorded in a service history entry."""

    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"
    INSPECTION = "inspection"
    EMERGENCY = "emergency"


class Priority(Enum):
    """Alert priority. Lower rank = more urgent."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.CRITICAL: 1,
    Priority.HIGH: 2,
    Priority.MEDIUM: 3,
    Priority.LOW: 4,
}


class RiskLevel(Enum):
    """Categorical risk derived from the 0-100 score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AlertKind(Enum):
    DISTANCE = "distance"
    TIME = "time"
    PART_WARRANTY = "part-warranty"
    MANDATORY_INSPECTION = "mandatory-inspection"


class AlertStatus(Enum):
    ACTIVE = "active"
    SCHEDULED = "scheduled"
    DONE = "done"
    DISMISSED = "dismissed"
