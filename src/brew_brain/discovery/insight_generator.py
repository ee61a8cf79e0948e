"""Goal-aware insight generator — "what to change" and "what worked".

Combines goal trends with the correlation matrix: for each metric that
misses its target, point at the input most strongly tied to it and say
which way to move it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from brew_brain.discovery.correlation_engine import CorrelationMatrix
from brew_brain.discovery.goal_tracker import MetricTrend, is_improving
from brew_brain.discovery.insight_ranker import INSIGHT_THRESHOLD
from brew_brain.discovery.variable_extractor import (
    INPUT_VARIABLES,
    OUTCOME_VARIABLES,
    format_metric_value,
    input_phrase,
    validate_variable,
    variable_label,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightItem:
    type: str  # "change" | "worked"
    metric: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "metric": self.metric, "message": self.message}


def generate(
    trends: Mapping[str, MetricTrend],
    correlations: CorrelationMatrix | Mapping[str, Any] | None = None,
    threshold: float = INSIGHT_THRESHOLD,
) -> list[InsightItem]:
    """Generate goal insights for every tracked metric with a target.

    Args:
        trends: Metric name to MetricTrend (see goal_tracker.track).
        correlations: A CorrelationMatrix, its serialized nested mapping
            (input -> outcome -> {"r": ...} or None), or None.
        threshold: Minimum |r| for an input to be suggested.

    Returns:
        Items in catalog metric order. A metric whose goal is met yields a
        single "worked" item and never a "change" item.
    """
    for metric in trends:
        validate_variable(metric, "outcome")

    r_lookup = _r_lookup(correlations)
    items: list[InsightItem] = []

    for metric in OUTCOME_VARIABLES:
        trend = trends.get(metric)
        if trend is None or trend.target is None:
            continue

        label = variable_label(metric)
        latest = trend.latest
        target = trend.target

        if trend.target_met:
            shown = format_metric_value(metric, latest) if latest is not None else "?"
            items.append(InsightItem(
                "worked", metric,
                f"{label} goal reached ({shown} / {format_metric_value(metric, target)} target)",
            ))
            continue

        if latest is None:
            logger.debug("No values for %s; skipping goal advice", metric)
            continue

        gap = target - latest
        side = "below" if gap > 0 else "above"
        message = f"{label} is {format_metric_value(metric, abs(gap))} {side} target"

        best = _strongest_input(metric, r_lookup, threshold)
        if best is not None:
            input_name, r = best
            direction = "increasing" if (gap > 0 and r > 0) or (gap < 0 and r < 0) else "decreasing"
            sign = "positively" if r > 0 else "negatively"
            message += (
                f"; {input_phrase(input_name)} correlates {sign} ({r:+.2f}), "
                f"try {direction} it"
            )

        items.append(InsightItem("change", metric, message))

        if is_improving(trend):
            items.append(InsightItem(
                "worked", metric,
                f"{label} trending in the right direction "
                f"({format_metric_value(metric, trend.previous)} → "
                f"{format_metric_value(metric, latest)})",
            ))

    return items


def _strongest_input(
    metric: str,
    r_lookup: Mapping[str, Mapping[str, float]],
    threshold: float,
) -> tuple[str, float] | None:
    """Input with the largest |r| >= threshold; first in catalog order wins ties."""
    best: tuple[str, float] | None = None
    for input_name in INPUT_VARIABLES:
        r = r_lookup.get(input_name, {}).get(metric)
        if r is None or abs(r) < threshold:
            continue
        if best is None or abs(r) > abs(best[1]):
            best = (input_name, r)
    return best


def _r_lookup(
    correlations: CorrelationMatrix | Mapping[str, Any] | None,
) -> dict[str, dict[str, float]]:
    """Flatten either correlation shape into input -> outcome -> r."""
    lookup: dict[str, dict[str, float]] = {}
    if correlations is None:
        return lookup

    if isinstance(correlations, CorrelationMatrix):
        for input_name, outcome_name, _pair in correlations.iter_pairs():
            result = correlations.result(input_name, outcome_name)
            if result is not None:
                lookup.setdefault(input_name, {})[outcome_name] = result.r
        return lookup

    # Accept a full analysis response as well as the bare matrix
    nested = correlations.get("correlations", correlations)
    for input_name, row in nested.items():
        if not isinstance(row, Mapping):
            continue
        for outcome_name, result in row.items():
            r = result.get("r") if isinstance(result, Mapping) else getattr(result, "r", None)
            if isinstance(r, (int, float)) and not isinstance(r, bool):
                lookup.setdefault(input_name, {})[outcome_name] = float(r)
    return lookup
