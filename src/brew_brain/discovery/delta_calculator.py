"""Delta calculator — spread and direction of a field across compared brews."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class DeltaInfo:
    min: float
    max: float
    trend: str  # "increasing", "decreasing", "stable", "variable"

    def to_dict(self) -> dict:
        return {"min": self.min, "max": self.max, "trend": self.trend}


def calculate_trend(values: Sequence[float]) -> str:
    """Classify a sequence as stable, monotonic, or variable."""
    if len(values) < 2 or all(v == values[0] for v in values):
        return "stable"

    diffs = [values[i + 1] - values[i] for i in range(len(values) - 1)]
    if all(d >= 0 for d in diffs):
        return "increasing"
    if all(d <= 0 for d in diffs):
        return "decreasing"
    return "variable"


def calculate_delta(values: Sequence[float]) -> DeltaInfo | None:
    if not values:
        return None
    return DeltaInfo(min=min(values), max=max(values), trend=calculate_trend(values))
