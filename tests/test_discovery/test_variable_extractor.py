"""Tests for variable extraction from brew records."""

import math
from datetime import date, datetime

import pytest

from brew_brain.discovery.errors import UnknownVariable
from brew_brain.discovery.variable_extractor import (
    INPUT_VARIABLES,
    OUTCOME_VARIABLES,
    VariableSample,
    as_number,
    extract,
    format_metric_value,
    is_scale_metric,
    parse_date,
    parse_timestamp,
    read_value,
    validate_variable,
    variable_label,
)


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


class TestCatalogs:
    def test_nine_inputs(self):
        assert len(INPUT_VARIABLES) == 9
        assert INPUT_VARIABLES[0] == "coffee_weight"
        assert "water_temperature" in INPUT_VARIABLES

    def test_outcomes_have_nine_sensory_intensities(self):
        sensory = [v for v in OUTCOME_VARIABLES if v.endswith("_intensity")]
        assert len(sensory) == 9
        assert OUTCOME_VARIABLES[0] == "tds"
        assert OUTCOME_VARIABLES[-1] == "overall_score"

    def test_catalogs_disjoint(self):
        assert not set(INPUT_VARIABLES) & set(OUTCOME_VARIABLES)

    def test_scale_metrics(self):
        assert is_scale_metric("overall_score")
        assert is_scale_metric("aroma_intensity")
        assert not is_scale_metric("tds")
        assert not is_scale_metric("extraction_yield")


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------


class TestExtract:
    def test_numeric_values_become_samples(self):
        records = [
            {"id": "a", "water_temperature": 93, "overall_score": 7},
            {"id": "b", "water_temperature": 95.5, "overall_score": 8},
        ]
        samples = extract(records, ["water_temperature", "overall_score"])
        assert samples["water_temperature"] == [
            VariableSample("a", 93.0),
            VariableSample("b", 95.5),
        ]
        assert [s.value for s in samples["overall_score"]] == [7.0, 8.0]

    def test_missing_values_skipped_not_zeroed(self):
        records = [
            {"id": "a", "tds": 1.35},
            {"id": "b"},
            {"id": "c", "tds": None},
        ]
        samples = extract(records, ["tds"])
        assert samples["tds"] == [VariableSample("a", 1.35)]

    def test_non_numeric_values_skipped(self):
        records = [
            {"id": "a", "grind_size": "medium"},
            {"id": "b", "grind_size": True},
            {"id": "c", "grind_size": float("nan")},
            {"id": "d", "grind_size": float("inf")},
            {"id": "e", "grind_size": 24},
        ]
        samples = extract(records, ["grind_size"])
        assert samples["grind_size"] == [VariableSample("e", 24.0)]

    def test_skip_is_per_variable(self):
        records = [{"id": "a", "tds": 1.3}, {"id": "b", "overall_score": 6}]
        samples = extract(records, ["tds", "overall_score"])
        assert [s.record_id for s in samples["tds"]] == ["a"]
        assert [s.record_id for s in samples["overall_score"]] == ["b"]

    def test_records_not_mutated(self):
        record = {"id": "a", "coffee_weight": 15, "water_weight": 250}
        snapshot = dict(record)
        extract([record], ["ratio"])
        assert record == snapshot

    def test_unknown_variable_raises(self):
        with pytest.raises(UnknownVariable) as exc:
            extract([{"id": "a"}], ["espresso_pressure"])
        assert exc.value.name == "espresso_pressure"

    def test_missing_id_falls_back_to_position(self):
        samples = extract([{"tds": 1.2}, {"tds": 1.3}], ["tds"])
        assert [s.record_id for s in samples["tds"]] == [0, 1]

    def test_empty_records(self):
        assert extract([], ["tds"]) == {"tds": []}


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


class TestDerivedFields:
    def test_ratio_derived_from_weights(self):
        value = read_value({"coffee_weight": 15, "water_weight": 240}, "ratio")
        assert value == pytest.approx(16.0)

    def test_explicit_ratio_wins(self):
        record = {"ratio": 15.5, "coffee_weight": 15, "water_weight": 240}
        assert read_value(record, "ratio") == 15.5

    def test_ratio_zero_dose_is_missing(self):
        assert read_value({"coffee_weight": 0, "water_weight": 240}, "ratio") is None

    def test_days_off_roast_from_dates(self):
        record = {"roast_date": "2026-01-01", "brew_date": "2026-01-15T08:30:00Z"}
        assert read_value(record, "days_off_roast") == 14.0

    def test_days_off_roast_missing_roast_date(self):
        assert read_value({"brew_date": "2026-01-15"}, "days_off_roast") is None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_as_number(self):
        assert as_number(3) == 3.0
        assert as_number("3") is None
        assert as_number(False) is None
        assert as_number(math.nan) is None

    def test_validate_variable_by_kind(self):
        assert validate_variable("tds", "outcome") == "tds"
        with pytest.raises(UnknownVariable):
            validate_variable("tds", "input")

    def test_labels(self):
        assert variable_label("water_temperature") == "Temperature"
        assert variable_label("tds") == "TDS"
        assert variable_label("some_new_field") == "Some new field"

    def test_format_metric_value(self):
        assert format_metric_value("tds", 1.3) == "1.30"
        assert format_metric_value("extraction_yield", 20.25) == "20.2"
        assert format_metric_value("overall_score", 8.0) == "8"

    def test_parse_date(self):
        assert parse_date("2026-01-10").isoformat() == "2026-01-10"
        assert parse_date("2026-01-10T07:00:00+09:00").isoformat() == "2026-01-10"
        assert parse_date("not a date") is None
        assert parse_date(None) is None

    def test_parse_timestamp(self):
        assert parse_timestamp("2026-01-10T18:00:00") == datetime(2026, 1, 10, 18, 0)
        assert parse_timestamp("2026-01-10T07:00:00+09:00") == datetime(2026, 1, 9, 22, 0)
        assert parse_timestamp("2026-01-10T07:00:00Z") == datetime(2026, 1, 10, 7, 0)
        assert parse_timestamp("2026-01-10") == datetime(2026, 1, 10)
        assert parse_timestamp(date(2026, 1, 10)) == datetime(2026, 1, 10)
        assert parse_timestamp("not a date") is None
        assert parse_timestamp(None) is None
