#!/usr/bin/env python3
"""
Unified CLI for motorcycle maintenance analysis.

Commands:
  report          - Full maintenance report (summary, risk, alerts, history)
  risk            - Risk score, factors and recommendations
  alerts          - Overdue and upcoming maintenance alerts
  history         - View service history
  log             - Record a completed service
  update-odometer - Update current odometer reading
  schedules       - List manufacturer maintenance schedules
  dismiss         - Dismiss a stored alert
"""

import argparse
import os
import sys
import uuid
from datetime import date
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from motomaint import (
    MaintenanceAlert,
    NextDue,
    ReplacedPart,
    RiskAssessment,
    ServiceKind,
    ServiceRecord,
    load_vehicle_file,
)
from motomaint.calculations import parse_date
from motomaint.loader import save_current_odometer, update_alert_status
from motomaint.log import setup_logging
from motomaint.schedule import default_catalog, item_label
from motomaint.service import MaintenanceService
from motomaint.settings import load_settings
from motomaint.status import AlertStatus
from motomaint.store import YamlHistoryStore

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format an odometer reading for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format cost for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def truncate(text: Optional[str], max_len: int = 40) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def parse_part(value: str) -> ReplacedPart:
    """
    Parse a --part argument: 'name', 'name:months' or 'name:months:km'.
    """
    name, _, rest = value.partition(":")
    months, _, km = rest.partition(":")
    return ReplacedPart(
        name.strip(),
        int(months) if months else None,
        float(km) if km else None,
    )


def make_alert_table(alerts: List[MaintenanceAlert]) -> List[List[str]]:
    rows = []
    for alert in alerts:
        rows.append(
            [
                alert.priority.value.upper(),
                alert.title,
                alert.kind.value,
                alert.due_date,
                format_km(alert.due_odometer),
                truncate(alert.description, 60),
                alert.id,
            ]
        )
    return rows


def make_history_table(records: List[ServiceRecord]) -> List[List[str]]:
    """Convert service records to table rows."""
    rows = []
    for record in records:
        rows.append(
            [
                str(record.date),
                format_km(record.odometer),
                record.kind.value,
                truncate(record.description),
                format_cost(record.cost),
                truncate(", ".join(record.part_names) or None, 30),
            ]
        )
    return rows


ALERT_HEADERS = ["Priority", "Item", "Kind", "Due (date)", "Due (km)", "Description", "Id"]
HISTORY_HEADERS = ["Date", "Odometer", "Kind", "Description", "Cost", "Parts"]


def print_assessment(assessment: RiskAssessment) -> None:
    print(f"Risk: {assessment.level.value.upper()} (score {assessment.score}/100)")
    if assessment.source != "deterministic":
        print(f"Source: {assessment.source}")
    if assessment.risk_factors:
        print("\nRisk factors:")
        for factor in assessment.risk_factors:
            print(f"  - {factor}")
    if assessment.recommendations:
        print("\nRecommendations:")
        for rec in assessment.recommendations:
            print(f"  - {rec}")
    if assessment.upcoming_services:
        print()
        rows = [[s.item, s.urgency.value, s.due] for s in assessment.upcoming_services]
        print(tabulate(rows, headers=["Item", "Urgency", "Due"], tablefmt="simple"))


# =============================================================================
# Command handlers
# =============================================================================


def build_service(args) -> MaintenanceService:
    store = YamlHistoryStore(args.vehicle_file.parent)
    return MaintenanceService(store, load_settings(args.settings))


def vehicle_key(args) -> str:
    """Vehicle files are keyed by file name."""
    return args.vehicle_file.stem


def print_header(vf) -> None:
    print(f"Vehicle: {vf.vehicle.name}")
    print(f"Current odometer: {vf.current_odometer:,.0f} km (as of {vf.as_of_date})")


def cmd_report(args):
    """Full maintenance report."""
    vf = load_vehicle_file(args.vehicle_file)
    report = build_service(args).report(vehicle_key(args), args.as_of)

    print_header(vf)
    print()
    print(report.summary)
    print()
    print_assessment(report.assessment)
    print()

    if report.alerts:
        print("ALERTS:")
        print(tabulate(make_alert_table(report.alerts), headers=ALERT_HEADERS, tablefmt="simple"))
        print()
    if report.frequent_services:
        print(f"Frequent services: {', '.join(report.frequent_services)}")
        print()
    if report.history:
        print("HISTORY:")
        print(tabulate(make_history_table(report.history), headers=HISTORY_HEADERS, tablefmt="simple"))
    return 0


def cmd_risk(args):
    """Risk score, factors and recommendations."""
    vf = load_vehicle_file(args.vehicle_file)
    assessment = build_service(args).assess(vehicle_key(args), args.as_of)
    print_header(vf)
    print()
    print_assessment(assessment)
    return 0


def cmd_alerts(args):
    """Overdue and upcoming maintenance alerts."""
    vf = load_vehicle_file(args.vehicle_file)
    alerts = build_service(args).alerts(vehicle_key(args), args.as_of)
    print_header(vf)
    print()
    if not alerts:
        print("No maintenance alerts. Up to date.")
        return 0
    print(tabulate(make_alert_table(alerts), headers=ALERT_HEADERS, tablefmt="simple"))
    return 0


def cmd_history(args):
    """View service history."""
    vf = load_vehicle_file(args.vehicle_file)

    records = vf.get_history_sorted(sort_by=args.sort, reverse=not args.asc)

    if args.kind:
        records = [r for r in records if r.kind.value == args.kind]

    if args.since:
        since = parse_date(args.since)
        records = [r for r in records if parse_date(r.date) >= since]

    total_cost = sum(r.cost or 0 for r in records)
    last = vf.last_service

    print_header(vf)
    if last:
        print(f"Last service: {last.date} @ {last.odometer:,.0f} km")
    print(f"Total services: {len(vf.history)}")
    if args.kind or args.since:
        print(f"Showing: {len(records)} (filtered)")
    if total_cost > 0:
        print(f"Total cost: ${total_cost:,.2f}")
    print()

    if not records:
        print("No history entries found.")
        return 0

    print(tabulate(make_history_table(records), headers=HISTORY_HEADERS, tablefmt="simple"))
    return 0


def cmd_log(args):
    """Record a completed service."""
    vf = load_vehicle_file(args.vehicle_file)

    if args.odometer < 0:
        print("Error: odometer must be non-negative")
        return 1

    for value in (args.date, args.next_due_date):
        if value:
            try:
                parse_date(value)
            except ValueError:
                print(f"Error: Invalid date '{value}' (expected YYYY-MM-DD)")
                return 1

    next_due = None
    if args.next_due_date or args.next_due_odometer is not None:
        if not (args.next_due_date and args.next_due_odometer is not None):
            print("Error: --next-due-date and --next-due-odometer must be given together")
            return 1
        next_due = NextDue(args.next_due_date, args.next_due_odometer, args.next_due_label or "")

    record = ServiceRecord(
        id=uuid.uuid4().hex[:12],
        vehicle_id=vehicle_key(args),
        date=args.date or date.today().isoformat(),
        odometer=args.odometer,
        kind=ServiceKind(args.kind),
        description=args.description,
        cost=args.cost or 0.0,
        replaced_parts=[parse_part(p) for p in args.part or []],
        next_due=next_due,
        notes=args.notes,
        work_order_id=args.work_order,
        mechanic=args.mechanic,
    )

    print(f"Adding service record to {args.vehicle_file}:")
    print(f"  Vehicle:  {vf.vehicle.name}")
    print(f"  Date:     {record.date}")
    print(f"  Odometer: {record.odometer:,.0f} km")
    print(f"  Kind:     {record.kind.value}")
    print(f"  Service:  {record.description}")
    if record.cost:
        print(f"  Cost:     ${record.cost:.2f}")
    if record.replaced_parts:
        print(f"  Parts:    {', '.join(record.part_names)}")
    if record.next_due:
        print(f"  Next due: {record.next_due.date} / {record.next_due.odometer:,.0f} km")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    alerts = build_service(args).complete_service(record)
    print(f"Record saved. {len(alerts)} follow-up alert(s) created.")
    return 0


def cmd_update_odometer(args):
    """Update current odometer reading."""
    vf = load_vehicle_file(args.vehicle_file)

    print(f"Vehicle: {vf.vehicle.name}")
    print(f"Current odometer: {vf.current_odometer:,.0f} km")
    print(f"New odometer:     {args.odometer:,.0f} km")
    print()

    if args.odometer < 0:
        print("Error: odometer must be non-negative")
        return 1

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_current_odometer(args.vehicle_file, args.odometer, args.as_of)
    print("Odometer updated.")
    return 0


def cmd_schedules(args):
    """List manufacturer maintenance schedules."""
    for schedule in default_catalog().schedules:
        title = schedule.manufacturer
        if schedule.model:
            title += f" {schedule.model}"
        print(f"{title}:")
        rows = [
            [item_label(item), f"{interval.km:,.0f} km", f"{interval.months} mo"]
            for item, interval in schedule.items()
        ]
        print(tabulate(rows, headers=["Item", "Distance", "Time"], tablefmt="simple"))
        for rule in schedule.special_rules:
            print(f"  * {rule.item}: every {rule.every_km:,.0f} km - {rule.recommendation}")
        print()
    return 0


def cmd_dismiss(args):
    """Dismiss a stored alert."""
    try:
        update_alert_status(args.vehicle_file, args.alert_id, AlertStatus.DISMISSED)
    except KeyError:
        print(f"Error: Unknown alert id '{args.alert_id}'")
        return 1
    print(f"Alert {args.alert_id} dismissed.")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Motorcycle maintenance analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s vehicles/cb600.yaml report
  %(prog)s vehicles/cb600.yaml risk --as-of 2025-06-01
  %(prog)s vehicles/cb600.yaml alerts
  %(prog)s vehicles/cb600.yaml history --kind corrective
  %(prog)s vehicles/cb600.yaml log "Oil change" --odometer 13500 \\
      --cost 120 --part "Oil filter:6:3000"
  %(prog)s vehicles/cb600.yaml update-odometer 14000
""",
    )
    parser.add_argument(
        "vehicle_file",
        type=Path,
        help="Path to vehicle YAML file",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=Path(os.environ.get("MOTOMAINT_SETTINGS", "settings.yaml")),
        help="Settings YAML file (default: $MOTOMAINT_SETTINGS or settings.yaml)",
    )
    parser.add_argument(
        "--as-of",
        type=str,
        help="Evaluate as of this date (YYYY-MM-DD, default: file state or today)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log lines as JSON",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("report", help="Full maintenance report")
    subparsers.add_parser("risk", help="Risk score, factors and recommendations")
    subparsers.add_parser("alerts", help="Overdue and upcoming maintenance alerts")

    history_parser = subparsers.add_parser("history", help="View service history")
    history_parser.add_argument(
        "--kind",
        choices=[k.value for k in ServiceKind],
        help="Filter to one kind of service",
    )
    history_parser.add_argument(
        "--since",
        type=str,
        help="Show only entries since date (YYYY-MM-DD)",
    )
    history_parser.add_argument(
        "--sort",
        choices=["date", "odometer", "cost"],
        default="date",
        help="Sort order (default: date)",
    )
    history_parser.add_argument(
        "--asc",
        action="store_true",
        help="Sort ascending instead of descending",
    )

    log_parser = subparsers.add_parser("log", help="Record a completed service")
    log_parser.add_argument("description", type=str, help="What was done")
    log_parser.add_argument("--odometer", type=float, required=True, help="Odometer at service time")
    log_parser.add_argument(
        "--kind",
        choices=[k.value for k in ServiceKind],
        default=ServiceKind.PREVENTIVE.value,
        help="Kind of service (default: preventive)",
    )
    log_parser.add_argument("--date", type=str, help="Service date in YYYY-MM-DD format (default: today)")
    log_parser.add_argument("--cost", type=float, help="Cost of service")
    log_parser.add_argument(
        "--part",
        action="append",
        help="Replaced part as 'name[:warranty months[:warranty km]]' (repeatable)",
    )
    log_parser.add_argument("--next-due-date", type=str, help="Technician's next service date")
    log_parser.add_argument("--next-due-odometer", type=float, help="Technician's next service odometer")
    log_parser.add_argument("--next-due-label", type=str, help="Label for the next service")
    log_parser.add_argument("--notes", type=str, help="Notes about the service")
    log_parser.add_argument("--mechanic", type=str, help="Who performed the service")
    log_parser.add_argument("--work-order", type=str, help="Work order id")
    log_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )

    odometer_parser = subparsers.add_parser("update-odometer", help="Update current odometer reading")
    odometer_parser.add_argument("odometer", type=float, help="Current odometer (km)")
    odometer_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be updated without saving",
    )

    subparsers.add_parser("schedules", help="List manufacturer maintenance schedules")

    dismiss_parser = subparsers.add_parser("dismiss", help="Dismiss a stored alert")
    dismiss_parser.add_argument("alert_id", type=str, help="Alert id (see 'alerts')")

    return parser


COMMANDS = {
    "report": cmd_report,
    "risk": cmd_risk,
    "alerts": cmd_alerts,
    "history": cmd_history,
    "log": cmd_log,
    "update-odometer": cmd_update_odometer,
    "schedules": cmd_schedules,
    "dismiss": cmd_dismiss,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(json_output=args.log_json)

    if args.command != "schedules" and not args.vehicle_file.exists():
        print(f"Error: File not found: {args.vehicle_file}")
        return 1

    if args.as_of:
        try:
            parse_date(args.as_of)
        except ValueError:
            print(f"Error: Invalid date '{args.as_of}' (expected YYYY-MM-DD)")
            return 1

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
