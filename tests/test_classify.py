#!/usr/bin/env python3
"""Tests for keyword classification of service records."""

from motomaint import classify_record, last_matching_record


class TestClassifyRecord:
    def test_oil_change(self):
        assert classify_record("Oil change", []) == {"oil"}

    def test_oil_filter_also_counts_as_oil(self):
        assert classify_record("Replaced oil filter", []) == {"oil", "oil_filter"}

    def test_part_names_are_checked(self):
        assert "brakes" in classify_record("Front service", ["Brake pads"])

    def test_case_insensitive(self):
        assert classify_record("SPARK PLUGS", []) == {"spark_plugs"}

    def test_portuguese_description(self):
        assert classify_record("Troca de óleo e filtro de ar", []) >= {"oil", "air_filter"}

    def test_valves(self):
        assert "valves" in classify_record("Valve clearance adjustment", [])

    def test_no_match(self):
        assert classify_record("Mirror swap", ["Left mirror"]) == set()

    def test_none_description(self):
        assert classify_record(None, ["Chain kit"]) == {"chain"}

    def test_restricted_items(self):
        assert classify_record("Oil change and brake pads", [], items=["brakes"]) == {"brakes"}

    def test_unknown_item_is_classified_by_name(self):
        assert classify_record("Mirror swap", [], items=["mirror"]) == {"mirror"}

    def test_agrees_with_last_matching_record(self, make_record):
        record = make_record("2024-06-01", 9000, "Front service", parts=["Brake pads"])
        for item in classify_record(record.description, record.part_names):
            assert last_matching_record([record], item) is record


class TestLastMatchingRecord:
    def test_picks_most_recent_regardless_of_order(self, make_record):
        old = make_record("2023-01-10", 5000, "Oil change")
        new = make_record("2024-06-01", 9000, "Oil change")
        other = make_record("2025-01-01", 12000, "Chain adjustment")
        assert last_matching_record([new, other, old], "oil") is new
        assert last_matching_record([old, other, new], "oil") is new

    def test_no_match(self, make_record):
        history = [make_record("2024-06-01", 9000, "Oil change")]
        assert last_matching_record(history, "brakes") is None

    def test_unknown_item_matches_its_name(self, make_record):
        history = [make_record("2024-06-01", 9000, "Mirror swap")]
        assert last_matching_record(history, "mirror") is history[0]
