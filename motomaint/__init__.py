"""
Motorcycle maintenance risk and alert engine.

This package analyzes a motorcycle's service history against manufacturer
schedules:
- Vehicle / ServiceRecord: shop data the analysis reads
- ScheduleCatalog: manufacturer intervals and special rules
- RiskAnalyzer: 0-100 risk score with factors and recommendations
- AlertGenerator: overdue and upcoming maintenance alerts
- ReasoningAdapter: optional LLM provider, always with a deterministic fallback
- build_report: narrative summary combining the above
"""

from .status import AlertKind, AlertStatus, Priority, RiskLevel, ServiceKind
from .vehicle import Vehicle
from .service_record import NextDue, ReplacedPart, ServiceRecord
from .schedule import ManufacturerSchedule, ScheduleCatalog, schedule_for
from .classify import classify_record, last_matching_record
from .reasoning import Provider, ReasoningAdapter, ReasoningConfig, build_adapter
from .risk import RiskAnalyzer, RiskAnalyzerConfig, RiskAssessment, assess_risk
from .alerts import (
    AlertGenerator,
    AlertGeneratorConfig,
    MaintenanceAlert,
    active_alerts,
    alerts_for_completed_service,
    generate_alerts,
)
from .report import MaintenanceReport, build_report
from .vehicle_file import VehicleFile
from .loader import load_vehicle_file, save_service_record

__all__ = [
    "AlertKind",
    "AlertStatus",
    "Priority",
    "RiskLevel",
    "ServiceKind",
    "Vehicle",
    "NextDue",
    "ReplacedPart",
    "ServiceRecord",
    "ManufacturerSchedule",
    "ScheduleCatalog",
    "schedule_for",
    "classify_record",
    "last_matching_record",
    "Provider",
    "ReasoningAdapter",
    "ReasoningConfig",
    "build_adapter",
    "RiskAnalyzer",
    "RiskAnalyzerConfig",
    "RiskAssessment",
    "assess_risk",
    "AlertGenerator",
    "AlertGeneratorConfig",
    "MaintenanceAlert",
    "active_alerts",
    "alerts_for_completed_service",
    "generate_alerts",
    "MaintenanceReport",
    "build_report",
    "VehicleFile",
    "load_vehicle_file",
    "save_service_record",
]
