"""Wires the store, settings and analyzers into the shop's maintenance workflow."""

import logging
from datetime import date
from typing import List, Optional

import httpx

from .alerts import (
    AlertGenerator,
    AlertGeneratorConfig,
    MaintenanceAlert,
    active_alerts,
    alerts_for_completed_service,
)
from .calculations import parse_date
from .reasoning import build_adapter
from .report import MaintenanceReport, build_report
from .risk import RiskAnalyzer, RiskAnalyzerConfig, RiskAssessment
from .schedule import ScheduleCatalog
from .service_record import ServiceRecord
from .settings import Settings
from .store import YamlHistoryStore

logger = logging.getLogger(__name__)


class MaintenanceService:
    """
    Entry point used by the CLI and web app.

    The reasoning adapter is built once from settings and handed to each
    analyzer only when its feature flag is on.
    """

    def __init__(
        self,
        store: YamlHistoryStore,
        settings: Optional[Settings] = None,
        catalog: Optional[ScheduleCatalog] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.store = store
        self.settings = settings or Settings()
        adapter = build_adapter(self.settings.reasoning, client=http_client)
        self.risk_analyzer = RiskAnalyzer(
            RiskAnalyzerConfig(
                reasoning=adapter if self.settings.analysis_enabled else None,
                catalog=catalog,
            )
        )
        self.alert_generator = AlertGenerator(
            AlertGeneratorConfig(
                reasoning=adapter,
                predictive_alerts=self.settings.predictive_alerts,
                catalog=catalog,
            )
        )

    def _today(self, vehicle_file, today: Optional[date]) -> date:
        return parse_date(today) or parse_date(vehicle_file.as_of_date)

    def assess(self, vehicle_id: str, today: Optional[date] = None) -> RiskAssessment:
        vf = self.store.load(vehicle_id)
        return self.risk_analyzer.assess_risk(
            vf.vehicle, vf.history, vf.current_odometer, self._today(vf, today)
        )

    def alerts(self, vehicle_id: str, today: Optional[date] = None) -> List[MaintenanceAlert]:
        """Generated alerts plus stored active ones, most urgent first."""
        vf = self.store.load(vehicle_id)
        generated = self.alert_generator.generate_alerts(
            vf.vehicle, vf.history, vf.current_odometer, self._today(vf, today)
        )
        for alert in generated:
            alert.client_id = vf.client_id
        return active_alerts(generated + active_alerts(vf.alerts))

    def report(self, vehicle_id: str, today: Optional[date] = None) -> MaintenanceReport:
        vf = self.store.load(vehicle_id)
        today = self._today(vf, today)
        assessment = self.assess(vehicle_id, today)
        alerts = self.alerts(vehicle_id, today)
        return build_report(vf.vehicle, vf.history, alerts, assessment, today)

    def complete_service(self, record: ServiceRecord) -> List[MaintenanceAlert]:
        """Store a completed work order's record and persist its follow-up alerts."""
        vf = self.store.load(record.vehicle_id)
        # Built first so a record with unparseable dates is never written.
        alerts = alerts_for_completed_service(record, vf.client_id)
        self.store.append(record)
        self.store.add_alerts(record.vehicle_id, alerts)
        logger.info(
            "Recorded service %s for vehicle %s (%d follow-up alerts)",
            record.id,
            record.vehicle_id,
            len(alerts),
        )
        return alerts
