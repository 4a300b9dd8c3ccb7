# tests/unit/analysis/test_unit_aggregation.py — v1
"""Tests for analysis/aggregation.py — per-vehicle rates and comparison window."""

from __future__ import annotations

from datetime import date

import pytest

from adpulse.analysis.aggregation import aggregate_by_vehicle, previous_period
from tests.conftest import make_record


class TestAggregateByVehicle:
    def test_rates(self, current_week):
        metrics = aggregate_by_vehicle(current_week)
        assert [m.group_key for m in metrics] == [
            ("Facebook", "Reserva"),
            ("TikTok", "Programática"),
        ]
        facebook = metrics[0]
        assert facebook.impressions == 14_000
        assert facebook.ctr == pytest.approx(1.0)
        assert facebook.vtr == pytest.approx(30.0)
        assert facebook.engagement_rate == pytest.approx(2.0)

    def test_zero_impressions(self):
        metrics = aggregate_by_vehicle([make_record(date(2025, 12, 1), impressions=0)])
        assert metrics[0].ctr == 0.0
        assert metrics[0].vtr == 0.0

    def test_empty(self):
        assert aggregate_by_vehicle([]) == []

    def test_same_vehicle_different_purchase_types(self):
        rows = [
            make_record(date(2025, 12, 1), purchase_type="Reserva"),
            make_record(date(2025, 12, 1), purchase_type="Leilão"),
        ]
        assert len(aggregate_by_vehicle(rows)) == 2


class TestPreviousPeriod:
    def test_shifted_window(self, all_rows, current_week):
        previous = previous_period(current_week, all_rows)
        assert {r.date for r in previous} == {
            date(2025, 11, 24 + i) for i in range(7)
        }

    def test_bounds_inclusive(self):
        current = [make_record(date(2025, 12, 1)), make_record(date(2025, 12, 7))]
        historical = [
            make_record(date(2025, 11, 23)),
            make_record(date(2025, 11, 24)),
            make_record(date(2025, 11, 30)),
            make_record(date(2025, 12, 1)),
        ]
        assert [r.date for r in previous_period(current, historical)] == [
            date(2025, 11, 24),
            date(2025, 11, 30),
        ]

    def test_custom_length(self):
        current = [make_record(date(2025, 12, 15))]
        historical = [make_record(date(2025, 12, 1))]
        assert len(previous_period(current, historical, days=14)) == 1

    def test_empty_current(self, all_rows):
        assert previous_period([], all_rows) == []

    def test_no_history(self, current_week):
        assert previous_period(current_week, current_week) == []
