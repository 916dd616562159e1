"""VehicleFile class - one vehicle's identity, state, history and stored alerts."""

from datetime import date
from typing import List, Optional

from .alerts import MaintenanceAlert
from .calculations import parse_date
from .service_record import ServiceRecord
from .vehicle import Vehicle


class VehicleFile:
    """Everything the shop keeps on disk about one motorcycle."""

    def __init__(
        self,
        vehicle: Vehicle,
        history: Optional[List[ServiceRecord]] = None,
        alerts: Optional[List[MaintenanceAlert]] = None,
        client_id: Optional[str] = None,
        state_as_of_date: Optional[str] = None,
        state_current_odometer: Optional[float] = None,
    ):
        self.vehicle = vehicle
        self.history = history or []
        self.alerts = alerts or []
        self.client_id = client_id
        self._state_as_of_date = state_as_of_date
        self._state_current_odometer = state_current_odometer
        for record in self.history:
            if not record.vehicle_id:
                record.vehicle_id = vehicle.id
        for alert in self.alerts:
            if not alert.vehicle_id:
                alert.vehicle_id = vehicle.id

    @property
    def current_odometer(self) -> float:
        """Current odometer, auto-computed from history if not explicitly set."""
        if self._state_current_odometer is not None:
            return self._state_current_odometer
        readings = [r.odometer for r in self.history if r.odometer is not None]
        if readings:
            return max(readings)
        return 0

    @property
    def as_of_date(self) -> str:
        """Date of current state, defaults to today."""
        if self._state_as_of_date:
            return str(self._state_as_of_date)
        return date.today().isoformat()

    @property
    def last_service(self) -> Optional[ServiceRecord]:
        """Get the most recent service entry overall."""
        if not self.history:
            return None
        return max(self.history, key=lambda r: (parse_date(r.date), r.odometer or 0))

    def get_alert(self, alert_id: str) -> Optional[MaintenanceAlert]:
        for alert in self.alerts:
            if alert.id == alert_id:
                return alert
        return None

    def get_history_sorted(
        self, sort_by: str = "date", reverse: bool = True
    ) -> List[ServiceRecord]:
        """
        Get history entries sorted by specified field.

        Args:
            sort_by: "date", "odometer", or "cost"
            reverse: If True, newest/highest first (default)
        """
        if sort_by == "date":
            return sorted(self.history, key=lambda r: parse_date(r.date), reverse=reverse)
        elif sort_by == "odometer":
            return sorted(self.history, key=lambda r: r.odometer or 0, reverse=reverse)
        elif sort_by == "cost":
            return sorted(self.history, key=lambda r: r.cost or 0, reverse=reverse)
        return self.history
