"""Tests for compare-view deltas."""

from brew_brain.discovery.delta_calculator import DeltaInfo, calculate_delta, calculate_trend


class TestCalculateTrend:
    def test_empty_and_single(self):
        assert calculate_trend([]) == "stable"
        assert calculate_trend([3]) == "stable"

    def test_all_same(self):
        assert calculate_trend([93, 93, 93]) == "stable"

    def test_increasing_allows_plateaus(self):
        assert calculate_trend([1, 2, 2, 3]) == "increasing"

    def test_decreasing(self):
        assert calculate_trend([30, 28, 24]) == "decreasing"

    def test_variable(self):
        assert calculate_trend([1, 3, 2]) == "variable"


class TestCalculateDelta:
    def test_empty(self):
        assert calculate_delta([]) is None

    def test_min_max_trend(self):
        assert calculate_delta([92, 94, 96]) == DeltaInfo(min=92, max=96, trend="increasing")
        assert calculate_delta([92, 94, 96]).to_dict() == {"min": 92, "max": 96, "trend": "increasing"}
