"""Tests for the FastAPI API endpoints."""

import pytest
from fastapi.testclient import TestClient

from brew_brain.action.api import app


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c


def _brews(count=6):
    temps = [90, 92, 94, 96, 98, 93, 95, 91]
    scores = [5, 6, 7, 8, 9, 6, 8, 5]
    return [
        {
            "id": f"brew-{i}",
            "brew_date": f"2026-02-{i + 1:02d}",
            "coffee_name": "Ethiopia Guji",
            "coffee_weight": 15,
            "water_weight": 250,
            "water_temperature": temps[i],
            "overall_score": scores[i],
        }
        for i in range(count)
    ]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "1.0.0"}


# ---------------------------------------------------------------------------
# /analyze
# ---------------------------------------------------------------------------


class TestAnalyzeEndpoint:
    def test_analyze(self, client):
        resp = client.post("/analyze", json={"records": _brews()})
        assert resp.status_code == 200
        data = resp.json()
        assert data["record_count"] == 6
        cell = data["correlations"]["water_temperature"]["overall_score"]
        assert cell["n"] == 6
        assert data["insights"][0]["input"] == "water_temperature"

    def test_too_few_records(self, client):
        resp = client.post("/analyze", json={"records": _brews(4)})
        assert resp.status_code == 400
        assert "minimum 5" in resp.json()["detail"]

    def test_record_ids_filter(self, client):
        ids = [f"brew-{i}" for i in (0, 2, 4, 6, 7)]
        resp = client.post("/analyze", json={"records": _brews(8), "record_ids": ids})
        assert resp.status_code == 200
        assert resp.json()["record_ids"] == ids

    def test_record_ids_must_be_scalars(self, client):
        resp = client.post("/analyze", json={
            "records": _brews(),
            "record_ids": [{"id": "brew-0"}, ["brew-1"]],
        })
        assert resp.status_code == 422

    def test_unhashable_record_id_is_skipped(self, client):
        brews = _brews(8)
        brews[7]["id"] = {"nested": 7}
        ids = [f"brew-{i}" for i in range(6)]
        resp = client.post("/analyze", json={"records": brews, "record_ids": ids})
        assert resp.status_code == 200
        assert resp.json()["record_ids"] == ids

    def test_min_samples_clamped(self, client):
        # A request for 2 is raised to the floor of 5, so 6 brews still correlate
        resp = client.post("/analyze", json={"records": _brews(), "min_samples": 2})
        cell = resp.json()["correlations"]["water_temperature"]["overall_score"]
        assert cell is not None

    def test_missing_records_rejected(self, client):
        assert client.post("/analyze", json={}).status_code == 422


# ---------------------------------------------------------------------------
# /analyze/detail
# ---------------------------------------------------------------------------


class TestDetailEndpoint:
    def test_detail(self, client):
        resp = client.post("/analyze/detail", json={
            "records": _brews(),
            "input_variable": "water_temperature",
            "outcome_variable": "overall_score",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["scatter_data"]) == 6
        assert data["records"][0]["label"] == "Ethiopia Guji"
        assert data["records"][0]["date"] == "2026-02-01"

    def test_unknown_input(self, client):
        resp = client.post("/analyze/detail", json={
            "records": _brews(),
            "input_variable": "pressure",
            "outcome_variable": "overall_score",
        })
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid input_variable: pressure"

    def test_unknown_outcome(self, client):
        resp = client.post("/analyze/detail", json={
            "records": _brews(),
            "input_variable": "grind_size",
            "outcome_variable": "crema",
        })
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid outcome_variable: crema"

    def test_insufficient_data(self, client):
        resp = client.post("/analyze/detail", json={
            "records": _brews(3),
            "input_variable": "water_temperature",
            "outcome_variable": "overall_score",
        })
        assert resp.status_code == 422
        assert "at least 5" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# /goals/insights and /compare
# ---------------------------------------------------------------------------


class TestGoalsEndpoint:
    def test_goal_insights(self, client):
        resp = client.post("/goals/insights", json={
            "records": _brews(),
            "goals": {"overall_score": 9, "tds": None},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert list(data["metrics"]) == ["overall_score"]
        assert data["insights"][0]["type"] == "change"
        assert "temperature" in data["insights"][0]["message"]

    def test_reuses_previous_analysis(self, client):
        analysis = client.post("/analyze", json={"records": _brews()}).json()
        resp = client.post("/goals/insights", json={
            "records": _brews(),
            "goals": {"overall_score": 9},
            "correlations": analysis,
        })
        assert resp.status_code == 200
        assert "try increasing it" in resp.json()["insights"][0]["message"]

    def test_unknown_goal_metric(self, client):
        resp = client.post("/goals/insights", json={"records": _brews(), "goals": {"crema": 5}})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "invalid goal metric: crema"


class TestCompareEndpoint:
    def test_compare(self, client):
        resp = client.post("/compare", json={
            "records": _brews(),
            "fields": ["water_temperature", "coffee_weight"],
        })
        assert resp.status_code == 200
        deltas = resp.json()["deltas"]
        assert deltas["coffee_weight"]["trend"] == "stable"
        assert deltas["water_temperature"] == {"min": 90.0, "max": 98.0, "trend": "variable"}

    def test_unknown_field(self, client):
        resp = client.post("/compare", json={"records": _brews(), "fields": ["crema"]})
        assert resp.status_code == 400
