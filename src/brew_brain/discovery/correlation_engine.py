"""Correlation engine — pairwise Pearson correlations between brew variables.

Pure functions over extracted samples. Every (input, outcome) pair ends
in exactly one of three outcomes: a correlation, too few paired samples,
or zero variance. The last two serialize to null so callers can treat
them uniformly as "no signal".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence, Union

from scipy import stats as sp_stats

from brew_brain.discovery.variable_extractor import (
    INPUT_VARIABLES,
    OUTCOME_VARIABLES,
    VariableSample,
)

logger = logging.getLogger(__name__)

MIN_SAMPLES = 5


@dataclass(frozen=True)
class CorrelationResult:
    """Pearson correlation for one variable pair."""

    r: float  # -1.0 to 1.0
    n: int
    p: float  # two-tailed
    interpretation: str  # e.g. "moderate_positive", "negligible"

    def to_dict(self) -> dict[str, Any]:
        return {
            "r": self.r,
            "n": self.n,
            "p": self.p,
            "interpretation": self.interpretation,
        }


@dataclass(frozen=True)
class Correlated:
    result: CorrelationResult

    @property
    def n(self) -> int:
        return self.result.n


@dataclass(frozen=True)
class TooFewSamples:
    """Fewer paired samples than required."""

    n: int
    input_count: int
    outcome_count: int


@dataclass(frozen=True)
class ZeroVariance:
    """One side of the pair never changes, so r is undefined."""

    n: int


PairOutcome = Union[Correlated, TooFewSamples, ZeroVariance]


@dataclass(frozen=True)
class CorrelationMatrix:
    """Outcomes for the full input x outcome cross product."""

    inputs: tuple[str, ...]
    outcomes: tuple[str, ...]
    pairs: Mapping[tuple[str, str], PairOutcome] = field(default_factory=dict)

    def outcome(self, input_name: str, outcome_name: str) -> PairOutcome | None:
        return self.pairs.get((input_name, outcome_name))

    def result(self, input_name: str, outcome_name: str) -> CorrelationResult | None:
        pair = self.pairs.get((input_name, outcome_name))
        if isinstance(pair, Correlated):
            return pair.result
        return None

    def iter_pairs(self) -> Iterator[tuple[str, str, PairOutcome]]:
        """Yield (input, outcome, pair outcome) in catalog order."""
        for input_name in self.inputs:
            for outcome_name in self.outcomes:
                pair = self.pairs.get((input_name, outcome_name))
                if pair is not None:
                    yield input_name, outcome_name, pair

    def to_dict(self) -> dict[str, dict[str, dict[str, Any] | None]]:
        """Nested input -> outcome -> result-or-None mapping."""
        matrix: dict[str, dict[str, dict[str, Any] | None]] = {}
        for input_name in self.inputs:
            row: dict[str, dict[str, Any] | None] = {}
            for outcome_name in self.outcomes:
                result = self.result(input_name, outcome_name)
                row[outcome_name] = result.to_dict() if result else None
            matrix[input_name] = row
        return matrix


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def compute_pearson(x: Sequence[float], y: Sequence[float]) -> float | None:
    """Compute Pearson correlation coefficient between two paired series.

    Uses exact summation so the result does not depend on pair order.
    Returns None if correlation cannot be computed (mismatched lengths,
    fewer than 2 pairs, or a constant series).
    """
    n = len(x)
    if n != len(y) or n < 2:
        return None
    if len(set(x)) == 1 or len(set(y)) == 1:
        return None

    x_mean = math.fsum(x) / n
    y_mean = math.fsum(y) / n

    dx = [xi - x_mean for xi in x]
    dy = [yi - y_mean for yi in y]
    numerator = math.fsum(a * b for a, b in zip(dx, dy))
    sum_xx = math.fsum(a * a for a in dx)
    sum_yy = math.fsum(b * b for b in dy)

    if sum_xx == 0 or sum_yy == 0:
        return None

    r = numerator / math.sqrt(sum_xx * sum_yy)
    return max(-1.0, min(1.0, r))


def compute_p_value(r: float, n: int) -> float:
    """Two-tailed p-value for r with n samples (t-distribution, df = n - 2)."""
    df = n - 2
    if df <= 0:
        return 1.0
    r_squared = r * r
    if r_squared >= 1.0:
        return 0.0
    t = abs(r) * math.sqrt(df / (1.0 - r_squared))
    p = 2.0 * float(sp_stats.t.sf(t, df))
    return max(0.0, min(1.0, p))


def interpret_correlation(r: float) -> str:
    """Classify r into a strength band, suffixed with its sign.

    Bands by |r|: <0.1 negligible, <0.3 weak, <0.5 moderate,
    <0.7 strong, else very_strong.
    """
    abs_r = abs(r)
    if abs_r < 0.1:
        return "negligible"
    if abs_r < 0.3:
        strength = "weak"
    elif abs_r < 0.5:
        strength = "moderate"
    elif abs_r < 0.7:
        strength = "strong"
    else:
        strength = "very_strong"
    direction = "positive" if r > 0 else "negative"
    return f"{strength}_{direction}"


# ---------------------------------------------------------------------------
# Pairing
# ---------------------------------------------------------------------------


def pair_samples(
    input_samples: Sequence[VariableSample],
    outcome_samples: Sequence[VariableSample],
) -> list[tuple[Any, float, float]]:
    """Pairwise-complete intersection: (record_id, x, y) in input order.

    A record missing either variable is dropped from this pair only.
    """
    outcome_by_id: dict[Any, float] = {}
    for sample in outcome_samples:
        outcome_by_id.setdefault(sample.record_id, sample.value)

    paired: list[tuple[Any, float, float]] = []
    seen: set[Any] = set()
    for sample in input_samples:
        if sample.record_id in seen or sample.record_id not in outcome_by_id:
            continue
        seen.add(sample.record_id)
        paired.append((sample.record_id, sample.value, outcome_by_id[sample.record_id]))
    return paired


def compute_pair(
    input_samples: Sequence[VariableSample],
    outcome_samples: Sequence[VariableSample],
    min_samples: int = MIN_SAMPLES,
) -> PairOutcome:
    """Correlate one pair, returning the tagged outcome."""
    paired = pair_samples(input_samples, outcome_samples)
    n = len(paired)
    if n < min_samples:
        return TooFewSamples(
            n=n,
            input_count=len(input_samples),
            outcome_count=len(outcome_samples),
        )

    x = [p[1] for p in paired]
    y = [p[2] for p in paired]
    r = compute_pearson(x, y)
    if r is None:
        return ZeroVariance(n=n)

    return Correlated(CorrelationResult(
        r=r,
        n=n,
        p=compute_p_value(r, n),
        interpretation=interpret_correlation(r),
    ))


def correlate(
    input_samples: Sequence[VariableSample],
    outcome_samples: Sequence[VariableSample],
    min_samples: int = MIN_SAMPLES,
) -> CorrelationResult | None:
    """Correlate one pair; None when there is no signal to report."""
    pair = compute_pair(input_samples, outcome_samples, min_samples)
    if isinstance(pair, Correlated):
        return pair.result
    return None


def correlation_matrix(
    samples: Mapping[str, Sequence[VariableSample]],
    inputs: Sequence[str] = INPUT_VARIABLES,
    outcomes: Sequence[str] = OUTCOME_VARIABLES,
    min_samples: int = MIN_SAMPLES,
) -> CorrelationMatrix:
    """Compute the full input x outcome matrix.

    Args:
        samples: Extracted samples keyed by variable name. Variables with
            no entry are treated as having no samples.
        inputs: Input variable names, in enumeration order.
        outcomes: Outcome variable names, in enumeration order.
        min_samples: Minimum paired samples for a correlation.
    """
    pairs: dict[tuple[str, str], PairOutcome] = {}
    correlated = 0
    for input_name in inputs:
        input_samples = samples.get(input_name, [])
        for outcome_name in outcomes:
            pair = compute_pair(input_samples, samples.get(outcome_name, []), min_samples)
            pairs[(input_name, outcome_name)] = pair
            if isinstance(pair, Correlated):
                correlated += 1

    logger.debug(
        "Correlation matrix: %d of %d pairs correlated (min_samples=%d)",
        correlated, len(pairs), min_samples,
    )
    return CorrelationMatrix(inputs=tuple(inputs), outcomes=tuple(outcomes), pairs=pairs)
