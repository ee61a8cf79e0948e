"""Analysis orchestrator — wires extraction, correlation, ranking and goals.

Each call is independent: records in, plain dict out. Nothing is cached
or persisted between calls.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from brew_brain.discovery.correlation_engine import (
    MIN_SAMPLES,
    CorrelationMatrix,
    correlation_matrix,
)
from brew_brain.discovery.delta_calculator import calculate_delta
from brew_brain.discovery.detail_projector import project
from brew_brain.discovery.goal_tracker import build_trends
from brew_brain.discovery.insight_generator import generate
from brew_brain.discovery.insight_ranker import INSIGHT_THRESHOLD, rank
from brew_brain.discovery.variable_extractor import (
    ALL_VARIABLES,
    INPUT_VARIABLES,
    OUTCOME_VARIABLES,
    extract,
    parse_date,
    read_value,
    validate_variable,
)

logger = logging.getLogger(__name__)


def build_matrix(
    records: Sequence[Mapping[str, Any]],
    min_samples: int = MIN_SAMPLES,
) -> CorrelationMatrix:
    """Extract every catalog variable and correlate all input/outcome pairs."""
    samples = extract(records, ALL_VARIABLES)
    return correlation_matrix(samples, INPUT_VARIABLES, OUTCOME_VARIABLES, min_samples)


def analyze_records(
    records: Iterable[Mapping[str, Any]],
    min_samples: int = MIN_SAMPLES,
    threshold: float = INSIGHT_THRESHOLD,
    limit: int | None = None,
) -> dict[str, Any]:
    """Full correlation analysis over a record set (matrix mode)."""
    records = list(records)
    matrix = build_matrix(records, min_samples)
    insights, warnings = rank(matrix, min_samples, threshold=threshold, limit=limit)

    logger.info(
        "Analyzed %d records: %d insights, %d warnings",
        len(records), len(insights), len(warnings),
    )
    return {
        "correlations": matrix.to_dict(),
        "inputs": list(INPUT_VARIABLES),
        "outcomes": list(OUTCOME_VARIABLES),
        "record_count": len(records),
        "record_ids": [record.get("id", i) for i, record in enumerate(records)],
        "insights": [i.to_dict() for i in insights],
        "warnings": [w.to_dict() for w in warnings],
    }


def analyze_detail(
    records: Iterable[Mapping[str, Any]],
    input_variable: str,
    outcome_variable: str,
    min_samples: int = MIN_SAMPLES,
) -> dict[str, Any]:
    """Scatter detail for one pair (detail mode).

    Raises:
        UnknownVariable: for names outside the catalogs.
        InsufficientData: when too few brews carry both values.
    """
    validate_variable(input_variable, "input")
    validate_variable(outcome_variable, "outcome")

    records = list(records)
    samples = extract(records, [input_variable, outcome_variable])
    detail = project(
        samples[input_variable],
        samples[outcome_variable],
        input_variable,
        outcome_variable,
        min_samples,
    )

    # Scatter x comes from the first record per id that carries the input
    by_id: dict[Any, Mapping[str, Any]] = {}
    for i, record in enumerate(records):
        if read_value(record, input_variable) is not None:
            by_id.setdefault(record.get("id", i), record)
    rows = []
    for point in detail.scatter:
        record = by_id.get(point.record_id, {})
        brewed = parse_date(record.get("brew_date"))
        rows.append({
            "id": point.record_id,
            "date": brewed.isoformat() if brewed else None,
            "label": record.get("coffee_name") or "",
            "input_value": point.x,
            "outcome_value": point.y,
        })

    return {
        "input_variable": input_variable,
        "outcome_variable": outcome_variable,
        "correlation": detail.correlation.to_dict(),
        "scatter_data": [p.to_dict() for p in detail.scatter],
        "insight": detail.note,
        "records": rows,
    }


def goal_insights(
    records: Iterable[Mapping[str, Any]],
    goals: Mapping[str, Any] | None,
    correlations: CorrelationMatrix | Mapping[str, Any] | None = None,
    min_samples: int = MIN_SAMPLES,
    tolerances: Mapping[str, float] | None = None,
    threshold: float = INSIGHT_THRESHOLD,
) -> dict[str, Any]:
    """Goal trends plus "what to change" / "what worked" items.

    When no correlations are supplied they are computed from the records.
    """
    records = list(records)
    trends = build_trends(records, goals, tolerances)
    if correlations is None and trends:
        correlations = build_matrix(records, min_samples)
    items = generate(trends, correlations, threshold=threshold)

    return {
        "metrics": {metric: trend.to_dict() for metric, trend in trends.items()},
        "insights": [item.to_dict() for item in items],
    }


def compare_records(
    records: Iterable[Mapping[str, Any]],
    fields: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Min/max/trend for each variable across brews, in record order."""
    fields = list(fields) if fields else list(ALL_VARIABLES)
    records = list(records)
    samples = extract(records, fields)

    deltas: dict[str, Any] = {}
    for name in fields:
        delta = calculate_delta([s.value for s in samples[name]])
        if delta is not None:
            deltas[name] = delta.to_dict()
    return {"record_count": len(records), "deltas": deltas}
