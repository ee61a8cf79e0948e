"""Goal trend tracker — follows an outcome metric toward a user target.

Pure functions for ordering a metric's history, deciding whether the
latest value meets its goal, and judging recent movement. No DB
dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping

from brew_brain.discovery.variable_extractor import (
    OUTCOME_VARIABLES,
    as_number,
    parse_date,
    parse_timestamp,
    read_value,
    validate_variable,
)

logger = logging.getLogger(__name__)

# Measured quantities must land near the target, not merely exceed it.
DEFAULT_TOLERANCES: dict[str, float] = {
    "tds": 0.02,
    "extraction_yield": 0.5,
}

# Distances are rounded before comparison so 1.38 - 1.36 reads as 0.02.
_NOISE_DIGITS = 9


@dataclass(frozen=True)
class TrendPoint:
    date: date
    value: float
    at: datetime | None = field(default=None, compare=False)  # full brew time, when known

    @property
    def sort_key(self) -> datetime:
        return self.at if self.at is not None else datetime.combine(self.date, time.min)


@dataclass(frozen=True)
class MetricTrend:
    """A metric's dated history and its standing against a target."""

    metric: str
    target: float | None
    values: tuple[TrendPoint, ...]  # ascending by brew time
    target_met: bool

    @property
    def latest(self) -> float | None:
        return self.values[-1].value if self.values else None

    @property
    def previous(self) -> float | None:
        return self.values[-2].value if len(self.values) >= 2 else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "values": [
                {"date": p.date.isoformat(), "value": p.value} for p in self.values
            ],
            "target_met": self.target_met,
            "improving": is_improving(self),
        }


def track(
    metric_name: str,
    historical_values: Iterable[Any],
    target: float | None,
    tolerances: Mapping[str, float] | None = None,
) -> MetricTrend:
    """Build a MetricTrend from unordered (date, value) history.

    Args:
        metric_name: An outcome variable name.
        historical_values: (date, value) tuples, TrendPoints, or mappings
            with "date" and "value" keys, in any order. Points without a
            parseable date or a numeric value are dropped.
        target: Goal value, or None when no goal is set.
        tolerances: Per-metric epsilon overrides for continuous metrics.

    Returns:
        MetricTrend with values sorted ascending by brew time. Same-day
        points are ordered by time of day when the history carries one.
    """
    validate_variable(metric_name, "outcome")
    points = sorted(_normalize_points(historical_values), key=lambda p: p.sort_key)

    target_value = as_number(target)
    latest = points[-1].value if points else None
    met = False
    if target_value is not None and latest is not None:
        met = is_target_met(metric_name, latest, target_value, tolerances)

    return MetricTrend(
        metric=metric_name,
        target=target_value,
        values=tuple(points),
        target_met=met,
    )


def is_target_met(
    metric_name: str,
    latest: float,
    target: float,
    tolerances: Mapping[str, float] | None = None,
) -> bool:
    """Scale metrics meet a goal at or above it; measured ones within epsilon.

    The tolerance band excludes its edge: a tds of 1.36 against 1.38 is
    off by the full 0.02 and does not count as reaching the goal.
    """
    eps = _tolerances(tolerances).get(metric_name)
    if eps is not None:
        return round(abs(latest - target), _NOISE_DIGITS) < eps
    return latest >= target


def is_improving(trend: MetricTrend) -> bool | None:
    """Whether the last move went toward the target.

    Returns None when there is no target or fewer than two values.
    """
    if trend.target is None or len(trend.values) < 2:
        return None
    latest = trend.latest
    previous = trend.previous
    gap = trend.target - latest
    if gap > 0:
        return latest > previous
    if gap < 0:
        return latest < previous
    return False


def build_trends(
    records: Iterable[Mapping[str, Any]],
    goals: Mapping[str, Any] | None,
    tolerances: Mapping[str, float] | None = None,
) -> dict[str, MetricTrend]:
    """Build one trend per goal metric from brew records.

    Metrics are returned in catalog order. Goals set to None are skipped.

    Raises:
        UnknownVariable: for a goal metric outside OUTCOME_VARIABLES.
    """
    if not goals:
        return {}
    for metric in goals:
        validate_variable(metric, "outcome")

    records = list(records)
    trends: dict[str, MetricTrend] = {}
    for metric in OUTCOME_VARIABLES:
        if metric not in goals or as_number(goals[metric]) is None:
            continue
        history = [
            (record.get("brew_date"), read_value(record, metric))
            for record in records
        ]
        trends[metric] = track(metric, history, goals[metric], tolerances)

    logger.debug("Built %d goal trends from %d records", len(trends), len(records))
    return trends


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _tolerances(overrides: Mapping[str, float] | None) -> dict[str, float]:
    merged = dict(DEFAULT_TOLERANCES)
    if overrides:
        merged.update(overrides)
    return merged


def _normalize_points(raw: Iterable[Any]) -> list[TrendPoint]:
    points: list[TrendPoint] = []
    for item in raw:
        if isinstance(item, TrendPoint):
            points.append(item)
            continue
        if isinstance(item, Mapping):
            when, value = item.get("date"), item.get("value")
        else:
            when, value = item
        parsed = parse_date(when)
        number = as_number(value)
        if parsed is None or number is None:
            continue
        points.append(TrendPoint(parsed, number, parse_timestamp(when)))
    return points
