"""Insight ranker — turns a correlation matrix into ranked findings.

Insights are correlations strong enough to act on; warnings are pairs
that could not be computed because too few brews carry both values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from brew_brain.discovery.correlation_engine import (
    MIN_SAMPLES,
    Correlated,
    CorrelationMatrix,
    TooFewSamples,
)

INSIGHT_THRESHOLD = 0.3


@dataclass(frozen=True)
class Insight:
    type: str  # interpretation band, e.g. "moderate_positive"
    input: str
    outcome: str
    r: float
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "input": self.input,
            "outcome": self.outcome,
            "r": self.r,
            "message": self.message,
        }


@dataclass(frozen=True)
class DataWarning:
    type: str  # "insufficient_data"
    input: str
    outcome: str
    n: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "input": self.input,
            "outcome": self.outcome,
            "n": self.n,
            "message": self.message,
        }


def rank(
    matrix: CorrelationMatrix,
    min_samples: int = MIN_SAMPLES,
    threshold: float = INSIGHT_THRESHOLD,
    limit: int | None = None,
) -> tuple[list[Insight], list[DataWarning]]:
    """Rank correlations into insights and collect data warnings.

    Args:
        matrix: Output of correlation_matrix().
        min_samples: Pairs with fewer paired brews become warnings.
        threshold: Minimum |r| for an insight.
        limit: Keep only the top N insights (None keeps all).

    Returns:
        (insights sorted by |r| desc then outcome, input; warnings in
        catalog order).
    """
    insights: list[Insight] = []
    warnings: list[DataWarning] = []

    for input_name, outcome_name, pair in matrix.iter_pairs():
        if isinstance(pair, TooFewSamples) or (
            isinstance(pair, Correlated) and pair.n < min_samples
        ):
            if _both_sides_present(pair):
                warnings.append(_insufficient_warning(input_name, outcome_name, pair.n))
            continue
        if not isinstance(pair, Correlated):
            continue

        result = pair.result
        if abs(result.r) < threshold:
            continue
        insights.append(Insight(
            type=result.interpretation,
            input=input_name,
            outcome=outcome_name,
            r=result.r,
            message=format_insight_message(input_name, outcome_name, result.r),
        ))

    insights.sort(key=lambda i: (-abs(i.r), i.outcome, i.input))
    if limit:
        insights = insights[:limit]
    return insights, warnings


def format_insight_message(input_name: str, outcome_name: str, r: float) -> str:
    """E.g. "water_temperature correlates positively (r=+0.42) with overall_score"."""
    direction = "positively" if r > 0 else "negatively"
    return f"{input_name} correlates {direction} (r={r:+.2f}) with {outcome_name}"


def _both_sides_present(pair: Correlated | TooFewSamples) -> bool:
    if isinstance(pair, TooFewSamples):
        return pair.input_count >= 1 and pair.outcome_count >= 1
    return True


def _insufficient_warning(input_name: str, outcome_name: str, n: int) -> DataWarning:
    brews = "brew has" if n == 1 else "brews have"
    return DataWarning(
        type="insufficient_data",
        input=input_name,
        outcome=outcome_name,
        n=n,
        message=f"Only {n} {brews} both {input_name} and {outcome_name} data",
    )
