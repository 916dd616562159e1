"""Flask JSON API for vehicle maintenance analysis."""

import os
import uuid
from datetime import date
from pathlib import Path

from flask import Flask, jsonify, request

from motomaint.calculations import parse_date
from motomaint.log import setup_logging
from motomaint.service import MaintenanceService
from motomaint.service_record import NextDue, ReplacedPart, ServiceRecord
from motomaint.settings import load_settings
from motomaint.status import ServiceKind
from motomaint.store import YamlHistoryStore

app = Flask(__name__)
app.config["VEHICLES_DIR"] = Path(
    os.environ.get("MOTOMAINT_VEHICLES_DIR", Path(__file__).parent.parent / "vehicles")
)
app.config["SETTINGS_FILE"] = os.environ.get("MOTOMAINT_SETTINGS", "settings.yaml")


def get_service() -> MaintenanceService:
    store = YamlHistoryStore(app.config["VEHICLES_DIR"])
    return MaintenanceService(store, load_settings(app.config["SETTINGS_FILE"]))


def get_as_of():
    """Optional ?as_of=YYYY-MM-DD query parameter."""
    value = request.args.get("as_of")
    return parse_date(value) if value else None


def record_to_dict(record: ServiceRecord) -> dict:
    return {
        "id": record.id,
        "date": str(record.date),
        "odometer": record.odometer,
        "kind": record.kind.value,
        "description": record.description,
        "cost": record.cost,
        "replaced_parts": record.part_names,
        "notes": record.notes,
    }


def record_from_json(vehicle_id: str, data: dict) -> ServiceRecord:
    """Build a ServiceRecord from a request body. Raises KeyError/ValueError."""
    next_due = None
    if data.get("next_due"):
        nd = data["next_due"]
        due = parse_date(nd["date"]).isoformat()
        next_due = NextDue(due, float(nd["odometer"]), nd.get("label", ""))
    parts = [
        ReplacedPart(p["name"], p.get("warranty_months"), p.get("warranty_km"))
        for p in data.get("replaced_parts") or []
    ]
    return ServiceRecord(
        id=data.get("id") or uuid.uuid4().hex[:12],
        vehicle_id=vehicle_id,
        date=parse_date(data.get("date") or date.today()).isoformat(),
        odometer=float(data["odometer"]),
        kind=ServiceKind(data.get("kind", ServiceKind.PREVENTIVE.value)),
        description=data["description"],
        cost=float(data.get("cost") or 0),
        replaced_parts=parts,
        next_due=next_due,
        notes=data.get("notes"),
        work_order_id=data.get("work_order_id"),
        mechanic=data.get("mechanic"),
    )


@app.errorhandler(KeyError)
def not_found(error):
    return jsonify({"error": str(error).strip("'\"")}), 404


@app.errorhandler(ValueError)
def bad_request(error):
    return jsonify({"error": str(error)}), 400


@app.route("/vehicles")
def list_vehicles():
    """All vehicles with their current odometer."""
    service = get_service()
    vehicles = []
    for vehicle_id in service.store.vehicle_ids():
        vf = service.store.load(vehicle_id)
        vehicles.append({
            "id": vehicle_id,
            "name": vf.vehicle.name,
            "manufacturer": vf.vehicle.manufacturer,
            "current_odometer": vf.current_odometer,
            "services": len(vf.history),
        })
    return jsonify(vehicles)


@app.route("/vehicles/<vehicle_id>/risk")
def vehicle_risk(vehicle_id: str):
    assessment = get_service().assess(vehicle_id, get_as_of())
    return jsonify(assessment.to_dict())


@app.route("/vehicles/<vehicle_id>/alerts")
def vehicle_alerts(vehicle_id: str):
    alerts = get_service().alerts(vehicle_id, get_as_of())
    return jsonify([a.to_dict() for a in alerts])


@app.route("/vehicles/<vehicle_id>/report")
def vehicle_report(vehicle_id: str):
    report = get_service().report(vehicle_id, get_as_of())
    return jsonify({
        "vehicle": report.vehicle.name,
        "summary": report.summary,
        "attention_needed": report.attention_needed,
        "assessment": report.assessment.to_dict() if report.assessment else None,
        "alerts": [a.to_dict() for a in report.alerts],
        "upcoming": [u.to_dict() for u in report.upcoming],
        "frequent_services": report.frequent_services,
        "history": [record_to_dict(r) for r in report.history],
    })


@app.route("/vehicles/<vehicle_id>/history", methods=["POST"])
def add_history(vehicle_id: str):
    """Record a completed work order; returns the follow-up alerts created."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body required"}), 400
    try:
        record = record_from_json(vehicle_id, data)
    except KeyError as e:
        return jsonify({"error": f"Missing field: {e.args[0]}"}), 400
    alerts = get_service().complete_service(record)
    return jsonify({
        "record": record_to_dict(record),
        "alerts": [a.to_dict() for a in alerts],
    }), 201


if __name__ == "__main__":
    setup_logging(json_output=os.environ.get("MOTOMAINT_LOG_JSON") == "1")
    app.run(debug=True, port=5000)
