"""YAML loading and saving utilities for vehicle files."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .alerts import MaintenanceAlert
from .service_record import NextDue, ReplacedPart, ServiceRecord
from .status import AlertKind, AlertStatus, Priority
from .vehicle import Vehicle
from .vehicle_file import VehicleFile

Parsed = Union[VehicleFile, Vehicle, ServiceRecord, MaintenanceAlert, NextDue, ReplacedPart, dict]


def _parse_object(dct: Dict[str, Any]) -> Parsed:
    """Parse dictionary into appropriate object type."""
    # Service record
    if "kind" in dct and "description" in dct and "odometer" in dct:
        return ServiceRecord(
            dct.get("id", ""),
            dct.get("vehicleId", ""),
            dct["date"],
            dct["odometer"],
            dct["kind"],
            dct["description"],
            dct.get("cost") or 0.0,
            dct.get("replacedParts"),
            dct.get("nextDue"),
            dct.get("notes"),
            dct.get("workOrderId"),
            dct.get("mechanic"),
        )
    # Stored alert
    elif "priority" in dct and "title" in dct:
        return MaintenanceAlert(
            vehicle_id=dct.get("vehicleId", ""),
            kind=AlertKind(dct["kind"]),
            priority=Priority(dct["priority"]),
            title=dct["title"],
            description=dct.get("description", ""),
            due_date=dct["dueDate"],
            due_odometer=dct.get("dueOdometer"),
            status=AlertStatus(dct.get("status", "active")),
            client_id=dct.get("clientId"),
            id=dct.get("id", ""),
            created_at=dct.get("createdAt", ""),
        )
    # Vehicle identity (inside 'vehicle' key)
    elif "manufacturer" in dct and "plate" in dct:
        return Vehicle(
            dct["id"],
            dct["manufacturer"],
            dct["model"],
            dct["year"],
            dct["plate"],
            dct.get("color"),
        )
    # Technician's next-due projection
    elif "label" in dct and "odometer" in dct:
        return NextDue(dct["date"], dct["odometer"], dct["label"])
    # Replaced part
    elif "name" in dct:
        return ReplacedPart(dct["name"], dct.get("warrantyMonths"), dct.get("warrantyKm"))
    # Top-level vehicle file
    elif "vehicle" in dct:
        state = dct.get("state") or {}
        return VehicleFile(
            dct["vehicle"],
            dct.get("history"),
            dct.get("alerts"),
            state.get("clientId"),
            state.get("asOfDate"),
            state.get("currentOdometer"),
        )
    else:
        # Return dict as-is for unknown structures (like 'state')
        return dct


def load_vehicle_file(filename: Union[str, Path]) -> VehicleFile:
    """Load a vehicle file from YAML."""
    with open(filename, "rb") as fp:
        # Round-trip through JSON so object_hook builds objects bottom-up;
        # default=str turns unquoted YAML dates into ISO strings.
        json_data = json.dumps(yaml.load(fp, Loader=yaml.SafeLoader), default=str)
        return json.loads(json_data, object_hook=_parse_object)


def _read_yaml(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _write_yaml(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )


def _record_to_dict(record: ServiceRecord) -> Dict[str, Any]:
    """Serialize a ServiceRecord to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": record.id,
        "date": str(record.date),
        "odometer": record.odometer,
        "kind": record.kind.value,
        "description": record.description,
        "cost": record.cost,
    }
    if record.replaced_parts:
        parts = []
        for part in record.replaced_parts:
            p: Dict[str, Any] = {"name": part.name}
            if part.warranty_months is not None:
                p["warrantyMonths"] = part.warranty_months
            if part.warranty_km is not None:
                p["warrantyKm"] = part.warranty_km
            parts.append(p)
        d["replacedParts"] = parts
    if record.next_due is not None:
        d["nextDue"] = {
            "date": str(record.next_due.date),
            "odometer": record.next_due.odometer,
            "label": record.next_due.label,
        }
    if record.notes is not None:
        d["notes"] = record.notes
    if record.work_order_id is not None:
        d["workOrderId"] = record.work_order_id
    if record.mechanic is not None:
        d["mechanic"] = record.mechanic
    return d


def _alert_to_dict(alert: MaintenanceAlert) -> Dict[str, Any]:
    """Serialize a MaintenanceAlert to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": alert.id,
        "kind": alert.kind.value,
        "priority": alert.priority.value,
        "title": alert.title,
        "description": alert.description,
        "dueDate": alert.due_date,
        "status": alert.status.value,
        "createdAt": alert.created_at,
    }
    if alert.due_odometer is not None:
        d["dueOdometer"] = alert.due_odometer
    if alert.client_id is not None:
        d["clientId"] = alert.client_id
    return d


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    d: Dict[str, Any] = {
        "id": vehicle.id,
        "manufacturer": vehicle.manufacturer,
        "model": vehicle.model,
        "year": vehicle.year,
        "plate": vehicle.plate,
    }
    if vehicle.color is not None:
        d["color"] = vehicle.color
    return d


def save_service_record(filename: Union[str, Path], record: ServiceRecord) -> None:
    """
    Append a service record to a vehicle file.

    Records are never edited once written.
    """
    data = _read_yaml(filename)
    if data.get("history") is None:
        data["history"] = []
    data["history"].append(_record_to_dict(record))
    _write_yaml(filename, data)


def save_alerts(filename: Union[str, Path], alerts: List[MaintenanceAlert]) -> None:
    """Append alerts to a vehicle file."""
    if not alerts:
        return
    data = _read_yaml(filename)
    if data.get("alerts") is None:
        data["alerts"] = []
    data["alerts"].extend(_alert_to_dict(a) for a in alerts)
    _write_yaml(filename, data)


def update_alert_status(
    filename: Union[str, Path], alert_id: str, status: AlertStatus
) -> None:
    """Set the status of a stored alert. Raises KeyError for an unknown id."""
    data = _read_yaml(filename)
    for alert in data.get("alerts") or []:
        if alert.get("id") == alert_id:
            alert["status"] = AlertStatus(status).value
            _write_yaml(filename, data)
            return
    raise KeyError(f"Alert '{alert_id}' not found")


def save_current_odometer(
    filename: Union[str, Path], odometer: float, as_of_date: Optional[str] = None
) -> None:
    """Update state.currentOdometer (and optionally state.asOfDate)."""
    if odometer < 0:
        raise ValueError(f"Odometer reading must be non-negative, got {odometer}")
    data = _read_yaml(filename)
    if data.get("state") is None:
        data["state"] = {}
    data["state"]["currentOdometer"] = odometer
    if as_of_date is not None:
        data["state"]["asOfDate"] = as_of_date
    _write_yaml(filename, data)


def create_vehicle_file(
    filename: Union[str, Path],
    vehicle: Vehicle,
    client_id: Optional[str] = None,
    current_odometer: float = 0,
) -> None:
    """Create a new vehicle file with empty history and alerts."""
    state: Dict[str, Any] = {"currentOdometer": current_odometer}
    if client_id is not None:
        state["clientId"] = client_id
    data: Dict[str, Any] = {
        "vehicle": _vehicle_to_dict(vehicle),
        "state": state,
        "history": [],
        "alerts": [],
    }
    _write_yaml(filename, data)
