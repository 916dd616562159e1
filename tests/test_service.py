#!/usr/bin/env python3
"""Tests for the YAML history store and the MaintenanceService workflow."""

from datetime import date

import httpx
import pytest

from motomaint import (
    AlertKind,
    AlertStatus,
    NextDue,
    Priority,
    Provider,
    ReasoningConfig,
    ReplacedPart,
    RiskLevel,
    ServiceRecord,
)
from motomaint.service import MaintenanceService
from motomaint.settings import Settings
from motomaint.store import YamlHistoryStore

CB600 = """
vehicle:
  id: cb600
  manufacturer: Honda
  model: CB 600F
  year: 2018
  plate: ABC1234

state:
  clientId: client-42
  asOfDate: '2025-06-01'
  currentOdometer: 13500

history:
  - id: r1
    date: '2024-04-27'
    odometer: 10000
    kind: preventive
    description: Oil change
    cost: 120

alerts:
  - id: stored-low
    kind: part-warranty
    priority: low
    title: Part warranty
    description: Warranty for Chain kit expires on 2025-09-01
    dueDate: '2025-09-01'
    status: active
    clientId: client-42
  - id: stored-dismissed
    kind: time
    priority: critical
    title: Brake service
    dueDate: '2025-01-01'
    status: dismissed
"""


@pytest.fixture
def store(tmp_path):
    (tmp_path / "cb600.yaml").write_text(CB600)
    return YamlHistoryStore(tmp_path)


@pytest.fixture
def reasoning_settings():
    return Settings(
        ReasoningConfig(Provider.OPENAI, "sk-test"),
        analysis_enabled=True,
        predictive_alerts=True,
    )


def _record(**kwargs):
    values = dict(
        id="r2",
        vehicle_id="cb600",
        date="2025-06-01",
        odometer=13600,
        kind="preventive",
        description="Oil change and brake pads",
        cost=310.0,
    )
    values.update(kwargs)
    return ServiceRecord(**values)


class TestYamlHistoryStore:
    def test_vehicle_ids(self, store, tmp_path):
        (tmp_path / "r1.yaml").write_text(CB600.replace("id: cb600", "id: r1"))
        assert store.vehicle_ids() == ["cb600", "r1"]

    def test_get_history(self, store):
        history = store.get_history("cb600")
        assert [r.id for r in history] == ["r1"]

    def test_unknown_vehicle(self, store):
        with pytest.raises(KeyError):
            store.load("nope")
        with pytest.raises(KeyError):
            store.append(_record(vehicle_id="nope"))

    def test_append(self, store):
        store.append(_record())
        assert [r.id for r in store.get_history("cb600")] == ["r1", "r2"]

    def test_alert_status(self, store):
        store.set_alert_status("cb600", "stored-low", AlertStatus.SCHEDULED)
        statuses = {a.id: a.status for a in store.get_alerts("cb600")}
        assert statuses["stored-low"] is AlertStatus.SCHEDULED


class TestDeterministicService:
    def test_assess_uses_file_state(self, store):
        assessment = MaintenanceService(store).assess("cb600")
        assert assessment.level is RiskLevel.CRITICAL
        assert assessment.source == "deterministic"

    def test_explicit_date_wins(self, store):
        # Two weeks after the oil change nothing is overdue by date
        assessment = MaintenanceService(store).assess("cb600", date(2024, 5, 11))
        assert not any("without maintenance" in f for f in assessment.risk_factors)

    def test_alerts_merge_generated_and_stored(self, store):
        alerts = MaintenanceService(store).alerts("cb600")

        assert [a.priority for a in alerts] == [Priority.CRITICAL, Priority.LOW]
        generated, stored = alerts
        assert generated.title == "Oil change"
        assert generated.client_id == "client-42"
        assert stored.id == "stored-low"

    def test_report(self, store):
        report = MaintenanceService(store).report("cb600")
        assert report.attention_needed is True
        assert "Risk level: critical (score 0)" in report.summary
        assert "1 critical alert(s) pending" in report.summary

    def test_complete_service(self, store, caplog):
        record = _record(
            replaced_parts=[ReplacedPart("Brake pads", 12, 10000)],
            next_due=NextDue("2025-12-01", 16600, "Oil change"),
        )

        with caplog.at_level("INFO", logger="motomaint.service"):
            alerts = MaintenanceService(store).complete_service(record)

        assert [a.kind for a in alerts] == [AlertKind.DISTANCE, AlertKind.PART_WARRANTY]
        assert all(a.client_id == "client-42" for a in alerts)
        stored_ids = [a.id for a in store.get_alerts("cb600")]
        assert [a.id for a in alerts] == stored_ids[-2:]
        assert len(store.get_history("cb600")) == 2
        assert "Recorded service r2 for vehicle cb600" in caplog.text

    def test_completion_changes_next_assessment(self, store):
        service = MaintenanceService(store)
        service.complete_service(_record())
        assessment = service.assess("cb600")
        assert not any(f.startswith("Oil change overdue") for f in assessment.risk_factors)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"next_due": NextDue("not-a-date", 16600, "Oil change")},
            {"date": "last week"},
        ],
    )
    def test_bad_date_leaves_history_untouched(self, store, tmp_path, kwargs):
        before = (tmp_path / "cb600.yaml").read_text()

        with pytest.raises(ValueError):
            MaintenanceService(store).complete_service(_record(**kwargs))

        assert [r.id for r in store.get_history("cb600")] == ["r1"]
        assert (tmp_path / "cb600.yaml").read_text() == before
        assert MaintenanceService(store).assess("cb600").source == "deterministic"


class TestReasoningFallback:
    def test_provider_failure_falls_back(self, store, reasoning_settings, mock_client):
        client = mock_client(lambda r: httpx.Response(500))
        service = MaintenanceService(store, reasoning_settings, http_client=client)

        assessment = service.assess("cb600")
        alerts = service.alerts("cb600")

        assert len(client.requests) == 2
        assert assessment.source == "deterministic"
        assert alerts[0].title == "Oil change"

    def test_flags_gate_provider_use(self, store, mock_client):
        client = mock_client(lambda r: httpx.Response(500))
        settings = Settings(ReasoningConfig(Provider.OPENAI, "sk-test"))
        service = MaintenanceService(store, settings, http_client=client)

        service.assess("cb600")
        service.alerts("cb600")

        assert client.requests == []

    def test_analysis_only(self, store, mock_client):
        client = mock_client(lambda r: httpx.Response(500))
        settings = Settings(ReasoningConfig(Provider.OPENAI, "sk-test"), analysis_enabled=True)
        service = MaintenanceService(store, settings, http_client=client)

        service.alerts("cb600")
        assert client.requests == []
        service.assess("cb600")
        assert len(client.requests) == 1
