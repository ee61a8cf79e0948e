"""Detail projector — scatter data and a one-line reading for one pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from brew_brain.discovery.correlation_engine import (
    MIN_SAMPLES,
    CorrelationResult,
    compute_p_value,
    compute_pearson,
    interpret_correlation,
    pair_samples,
)
from brew_brain.discovery.errors import InsufficientData
from brew_brain.discovery.variable_extractor import (
    VariableSample,
    validate_variable,
    variable_label,
)


@dataclass(frozen=True)
class ScatterPoint:
    x: float
    y: float
    record_id: Any

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "record_id": self.record_id}


@dataclass(frozen=True)
class DetailProjection:
    input_variable: str
    outcome_variable: str
    scatter: tuple[ScatterPoint, ...]
    correlation: CorrelationResult
    note: str


def project(
    input_samples: Sequence[VariableSample],
    outcome_samples: Sequence[VariableSample],
    input_name: str,
    outcome_name: str,
    min_samples: int = MIN_SAMPLES,
) -> DetailProjection:
    """Project one (input, outcome) pair into scatter points.

    Raises:
        UnknownVariable: if either name is outside its catalog.
        InsufficientData: if fewer than min_samples brews carry both
            values, or one of them never varies.
    """
    validate_variable(input_name, "input")
    validate_variable(outcome_name, "outcome")

    paired = pair_samples(input_samples, outcome_samples)
    n = len(paired)
    if n < min_samples:
        raise InsufficientData(n, min_samples, input_name, outcome_name)

    scatter = tuple(ScatterPoint(x, y, record_id) for record_id, x, y in paired)
    r = compute_pearson([p.x for p in scatter], [p.y for p in scatter])
    if r is None:
        raise InsufficientData(n, min_samples, input_name, outcome_name, reason="variance")

    correlation = CorrelationResult(
        r=r,
        n=n,
        p=compute_p_value(r, n),
        interpretation=interpret_correlation(r),
    )
    return DetailProjection(
        input_variable=input_name,
        outcome_variable=outcome_name,
        scatter=scatter,
        correlation=correlation,
        note=describe_relationship(correlation.interpretation, input_name, outcome_name),
    )


def describe_relationship(interpretation: str, input_name: str, outcome_name: str) -> str:
    """One-sentence paraphrase of an interpretation band."""
    x_label = variable_label(input_name)
    y_label = variable_label(outcome_name)
    if interpretation == "negligible":
        return f"No clear relationship between {x_label} and {y_label} in these brews."

    strength, _, direction = interpretation.rpartition("_")
    strength = strength.replace("_", " ").capitalize()
    follow = "higher" if direction == "positive" else "lower"
    return (
        f"{strength} {direction} relationship: higher {x_label} tends to "
        f"come with {follow} {y_label}."
    )
