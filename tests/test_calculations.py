#!/usr/bin/env python3
"""Tests for calculation helper functions."""
import pytest
from datetime import date, datetime
from motomaint import Priority, RiskLevel
from motomaint.calculations import (
    alert_priority,
    calc_due_date,
    calc_due_odometer,
    clamp_score,
    days_between,
    level_for_score,
    overdue_penalty,
    parse_date,
)


class TestParseDate:
    def test_iso_string(self):
        assert parse_date("2025-01-15") == date(2025, 1, 15)

    def test_datetime_string_truncated(self):
        assert parse_date("2025-01-15T10:30:00") == date(2025, 1, 15)

    def test_date_and_datetime(self):
        assert parse_date(date(2025, 1, 15)) == date(2025, 1, 15)
        assert parse_date(datetime(2025, 1, 15, 8, 0)) == date(2025, 1, 15)

    def test_none(self):
        assert parse_date(None) is None

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("not a date")


class TestDaysBetween:
    def test_forward(self):
        assert days_between("2025-01-01", "2025-01-31") == 30

    def test_backward_is_negative(self):
        assert days_between(date(2025, 1, 31), date(2025, 1, 1)) == -30


class TestCalcDueOdometer:
    """Tests for calc_due_odometer helper function."""

    def test_with_history(self):
        """last_odometer + interval when history exists."""
        assert calc_due_odometer(10000, 3000) == 13000

    def test_without_history_uses_start(self):
        """start_odometer + interval when never serviced."""
        assert calc_due_odometer(None, 3000, start_odometer=13500) == 16500

    def test_no_interval(self):
        assert calc_due_odometer(10000, None) is None


class TestCalcDueDate:
    """Tests for calc_due_date helper function."""

    def test_with_history(self):
        """last_date + interval_months when history exists."""
        assert calc_due_date(date(2025, 1, 15), 6) == date(2025, 7, 15)

    def test_month_end_clamps(self):
        assert calc_due_date(date(2024, 8, 31), 6) == date(2025, 2, 28)

    def test_fractional_months(self):
        """Handles fractional months (converted to days)."""
        assert calc_due_date(date(2025, 1, 15), 7.5) == date(2025, 8, 30)

    def test_without_history(self):
        assert calc_due_date(None, 6) is None


class TestOverduePenalty:
    def test_minimum_is_base(self):
        assert overdue_penalty(30, 0) == 30
        assert overdue_penalty(30, 15) == 30

    def test_scales_with_months(self):
        assert overdue_penalty(20, 60) == 40

    def test_capped_at_three_times(self):
        assert overdue_penalty(30, 90) == 90
        assert overdue_penalty(30, 1000) == 90


class TestScoreHelpers:
    def test_clamp(self):
        assert clamp_score(-30) == 0
        assert clamp_score(130) == 100
        assert clamp_score(55) == 55

    @pytest.mark.parametrize(
        "score,level",
        [
            (100, RiskLevel.LOW),
            (80, RiskLevel.LOW),
            (79, RiskLevel.MEDIUM),
            (60, RiskLevel.MEDIUM),
            (59, RiskLevel.HIGH),
            (40, RiskLevel.HIGH),
            (39, RiskLevel.CRITICAL),
            (0, RiskLevel.CRITICAL),
        ],
    )
    def test_level_for_score(self, score, level):
        assert level_for_score(score) is level


class TestAlertPriority:
    def test_critical_when_either_is_due(self):
        assert alert_priority(0, 5000) is Priority.CRITICAL
        assert alert_priority(200, 0) is Priority.CRITICAL
        assert alert_priority(-10, -500) is Priority.CRITICAL

    def test_high(self):
        assert alert_priority(30, 5000) is Priority.HIGH
        assert alert_priority(200, 500) is Priority.HIGH

    def test_medium(self):
        assert alert_priority(60, 5000) is Priority.MEDIUM
        assert alert_priority(200, 1000) is Priority.MEDIUM

    def test_not_due_is_suppressed(self):
        assert alert_priority(61, 1001) is None
