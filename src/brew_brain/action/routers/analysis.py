"""API router for brew correlation analysis.

4 endpoints:
- POST /analyze — correlation matrix, ranked insights, data warnings
- POST /analyze/detail — scatter data for one input/outcome pair
- POST /goals/insights — goal trends with "what to change" advice
- POST /compare — min/max/trend per variable across brews

Records arrive in the request body already resolved by the caller; the
router stores nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from brew_brain.discovery.engine import (
    analyze_detail,
    analyze_records,
    compare_records,
    goal_insights,
)
from brew_brain.discovery.errors import InsufficientData, UnknownVariable
from config.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    records: list[dict[str, Any]]
    record_ids: Optional[list[Union[str, int]]] = None  # restrict to these ids
    min_samples: Optional[int] = None


class DetailRequest(BaseModel):
    records: list[dict[str, Any]]
    record_ids: Optional[list[Union[str, int]]] = None
    input_variable: str
    outcome_variable: str
    min_samples: Optional[int] = None


class GoalInsightsRequest(BaseModel):
    records: list[dict[str, Any]]
    goals: dict[str, Optional[float]] = {}
    correlations: Optional[dict[str, Any]] = None  # previous /analyze output
    min_samples: Optional[int] = None


class CompareRequest(BaseModel):
    records: list[dict[str, Any]]
    record_ids: Optional[list[Union[str, int]]] = None
    fields: Optional[list[str]] = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/analyze")
def analyze(body: AnalyzeRequest) -> dict[str, Any]:
    """Correlate every input with every outcome across the given brews."""
    records = _select_records(body.records, body.record_ids)
    if len(records) < settings.min_samples_floor:
        raise HTTPException(
            status_code=400,
            detail=f"not enough records found (minimum {settings.min_samples_floor} required)",
        )

    min_samples = settings.clamp_min_samples(body.min_samples)
    logger.info("Analyze request: %d records, min_samples=%d", len(records), min_samples)
    return analyze_records(
        records,
        min_samples=min_samples,
        threshold=settings.insight_threshold,
        limit=settings.insight_limit or None,
    )


@router.post("/analyze/detail")
def analyze_pair(body: DetailRequest) -> dict[str, Any]:
    """Scatter points and interpretation for one variable pair."""
    records = _select_records(body.records, body.record_ids)
    min_samples = settings.clamp_min_samples(body.min_samples)
    try:
        return analyze_detail(
            records,
            body.input_variable,
            body.outcome_variable,
            min_samples=min_samples,
        )
    except UnknownVariable as exc:
        raise HTTPException(status_code=400, detail=f"invalid {exc.kind}_variable: {exc.name}")
    except InsufficientData as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post("/goals/insights")
def goals_insights(body: GoalInsightsRequest) -> dict[str, Any]:
    """Goal trends for each targeted metric plus suggested changes."""
    try:
        return goal_insights(
            body.records,
            body.goals,
            correlations=body.correlations,
            min_samples=settings.clamp_min_samples(body.min_samples),
            tolerances=settings.goal_tolerances(),
            threshold=settings.insight_threshold,
        )
    except UnknownVariable as exc:
        raise HTTPException(status_code=400, detail=f"invalid goal metric: {exc.name}")


@router.post("/compare")
def compare(body: CompareRequest) -> dict[str, Any]:
    """Spread and direction of each variable across the selected brews."""
    records = _select_records(body.records, body.record_ids)
    try:
        return compare_records(records, body.fields)
    except UnknownVariable as exc:
        raise HTTPException(status_code=400, detail=f"invalid field: {exc.name}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _select_records(
    records: list[dict[str, Any]],
    record_ids: Optional[list[Union[str, int]]],
) -> list[dict[str, Any]]:
    """Keep records whose id is listed, preserving record order."""
    if not record_ids:
        return records
    wanted = set(record_ids)
    return [
        r for r in records
        if isinstance(r.get("id"), (str, int)) and r.get("id") in wanted
    ]
