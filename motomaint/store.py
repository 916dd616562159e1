"""Directory of vehicle YAML files acting as the service history store."""

from pathlib import Path
from typing import List, Union

from .alerts import MaintenanceAlert
from .loader import (
    load_vehicle_file,
    save_alerts,
    save_service_record,
    update_alert_status,
)
from .service_record import ServiceRecord
from .status import AlertStatus
from .vehicle_file import VehicleFile


class YamlHistoryStore:
    """One `<vehicle id>.yaml` file per vehicle under a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, vehicle_id: str) -> Path:
        return self.directory / f"{vehicle_id}.yaml"

    def vehicle_ids(self) -> List[str]:
        return sorted(p.stem for p in self.directory.glob("*.yaml"))

    def load(self, vehicle_id: str) -> VehicleFile:
        """Raises KeyError for an unknown vehicle."""
        path = self.path_for(vehicle_id)
        if not path.exists():
            raise KeyError(f"Vehicle '{vehicle_id}' not found")
        return load_vehicle_file(path)

    def get_history(self, vehicle_id: str) -> List[ServiceRecord]:
        """Unordered history for a vehicle."""
        return self.load(vehicle_id).history

    def append(self, record: ServiceRecord) -> None:
        self.load(record.vehicle_id)
        save_service_record(self.path_for(record.vehicle_id), record)

    def get_alerts(self, vehicle_id: str) -> List[MaintenanceAlert]:
        return self.load(vehicle_id).alerts

    def add_alerts(self, vehicle_id: str, alerts: List[MaintenanceAlert]) -> None:
        self.load(vehicle_id)
        save_alerts(self.path_for(vehicle_id), alerts)

    def set_alert_status(self, vehicle_id: str, alert_id: str, status: AlertStatus) -> None:
        self.load(vehicle_id)
        update_alert_status(self.path_for(vehicle_id), alert_id, status)
