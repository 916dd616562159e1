"""ServiceRecord class for completed maintenance events."""

from datetime import date as date_type
from typing import List, Optional, Union

from .status import ServiceKind


class ReplacedPart:
    """A part swapped during a service, with optional warranty terms."""

    def __init__(
            self,
            name: str,
            warranty_months: Optional[int] = None,
            warranty_km: Optional[float] = None,
    ):
        self.name = name
        self.warranty_months = warranty_months
        self.warranty_km = warranty_km


class NextDue:
    """Next service projection set by the technician."""

    def __init__(self, date: Union[str, date_type], odometer: float, label: str):
        self.date = date
        self.odometer = odometer
        self.label = label


class ServiceRecord:
    """A maintenance event logged against a vehicle when a work order completes."""

    def __init__(
            self,
            id: str,
            vehicle_id: str,
            date: Union[str, date_type],
            odometer: float,
            kind: ServiceKind,
            description: str,
            cost: float = 0.0,
            replaced_parts: Optional[List[ReplacedPart]] = None,
            next_due: Optional[NextDue] = None,
            notes: Optional[str] = None,
            work_order_id: Optional[str] = None,
            mechanic: Optional[str] = None,
    ):
        if odometer is not None and odometer < 0:
            raise ValueError(f"Odometer reading must be non-negative, got {odometer}")
        self.id = id
        self.vehicle_id = vehicle_id
        self.date = date
        self.odometer = odometer
        self.kind = ServiceKind(kind)
        self.description = description
        self.cost = cost
        self.replaced_parts = replaced_parts or []
        self.next_due = next_due
        self.notes = notes
        self.work_order_id = work_order_id
        self.mechanic = mechanic

    @property
    def part_names(self) -> List[str]:
        return [p.name for p in self.replaced_parts]
