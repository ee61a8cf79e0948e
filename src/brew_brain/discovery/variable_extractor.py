"""Variable extractor — projects brew records into named numeric samples.

Pure functions. Records are plain mappings owned by the caller and are
never mutated. Absent or non-numeric values are skipped for that
variable only; nothing is coerced to zero.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Mapping

from brew_brain.discovery.errors import UnknownVariable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Catalogs (order matters: it is the enumeration order everywhere)
# ---------------------------------------------------------------------------

INPUT_VARIABLES: tuple[str, ...] = (
    "coffee_weight",
    "water_weight",
    "ratio",
    "grind_size",
    "water_temperature",
    "bloom_water",
    "bloom_time",
    "total_brew_time",
    "days_off_roast",
)

SENSORY_VARIABLES: tuple[str, ...] = (
    "aroma_intensity",
    "sweetness_intensity",
    "body_intensity",
    "flavor_intensity",
    "brightness_intensity",
    "cleanliness_intensity",
    "complexity_intensity",
    "balance_intensity",
    "aftertaste_intensity",
)

OUTCOME_VARIABLES: tuple[str, ...] = (
    "tds",
    "extraction_yield",
    *SENSORY_VARIABLES,
    "overall_score",
)

ALL_VARIABLES: tuple[str, ...] = INPUT_VARIABLES + OUTCOME_VARIABLES

_VARIABLE_LABELS: dict[str, str] = {
    "coffee_weight": "Dose",
    "water_weight": "Water weight",
    "ratio": "Ratio",
    "grind_size": "Grind size",
    "water_temperature": "Temperature",
    "bloom_water": "Bloom water",
    "bloom_time": "Bloom time",
    "total_brew_time": "Total brew time",
    "days_off_roast": "Days off roast",
    "tds": "TDS",
    "extraction_yield": "Extraction yield",
    "aroma_intensity": "Aroma",
    "sweetness_intensity": "Sweetness",
    "body_intensity": "Body",
    "flavor_intensity": "Flavor",
    "brightness_intensity": "Brightness",
    "cleanliness_intensity": "Cleanliness",
    "complexity_intensity": "Complexity",
    "balance_intensity": "Balance",
    "aftertaste_intensity": "Aftertaste",
    "overall_score": "Overall score",
}

# Lower-case phrasing used mid-sentence ("try increasing temperature").
_INPUT_PHRASES: dict[str, str] = {
    "coffee_weight": "dose",
    "water_weight": "water amount",
    "ratio": "ratio",
    "grind_size": "grind size",
    "water_temperature": "temperature",
    "bloom_water": "bloom water",
    "bloom_time": "bloom time",
    "total_brew_time": "brew time",
    "days_off_roast": "days off roast",
}

_DECIMALS: dict[str, int] = {"tds": 2, "extraction_yield": 1}


@dataclass(frozen=True)
class VariableSample:
    """One finite numeric value of a variable, tagged with its record id."""

    record_id: Any
    value: float


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract(
    records: Iterable[Mapping[str, Any]],
    variable_names: Iterable[str],
) -> dict[str, list[VariableSample]]:
    """Extract samples for each named variable across all records.

    Args:
        records: Brew records (mappings with an ``id`` key).
        variable_names: Names from INPUT_VARIABLES or OUTCOME_VARIABLES.

    Returns:
        Dict mapping variable name to its samples, in record order.

    Raises:
        UnknownVariable: if any name is outside the catalogs.
    """
    names = list(variable_names)
    for name in names:
        validate_variable(name)

    records = list(records)
    samples: dict[str, list[VariableSample]] = {name: [] for name in names}
    for index, record in enumerate(records):
        record_id = record.get("id", index)
        for name in names:
            value = read_value(record, name)
            if value is not None:
                samples[name].append(VariableSample(record_id, value))

    logger.debug(
        "Extracted %d variables from %d records",
        len(names), len(records),
    )
    return samples


def read_value(record: Mapping[str, Any], name: str) -> float | None:
    """Read one variable from a record, falling back to derived fields."""
    value = as_number(record.get(name))
    if value is not None:
        return value
    if name == "ratio":
        return _derive_ratio(record)
    if name == "days_off_roast":
        return _derive_days_off_roast(record)
    return None


def as_number(value: Any) -> float | None:
    """Return value as a finite float, or None if it is not a real number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def validate_variable(name: str, kind: str = "variable") -> str:
    """Raise UnknownVariable unless name is in the matching catalog."""
    catalog = {
        "input": INPUT_VARIABLES,
        "outcome": OUTCOME_VARIABLES,
    }.get(kind, ALL_VARIABLES)
    if name not in catalog:
        raise UnknownVariable(name, kind)
    return name


def is_scale_metric(name: str) -> bool:
    """True for 1-10 rated metrics (sensory intensities and overall score)."""
    return name in SENSORY_VARIABLES or name == "overall_score"


def variable_label(name: str) -> str:
    """Human-readable label for a variable name."""
    if name in _VARIABLE_LABELS:
        return _VARIABLE_LABELS[name]
    return name.replace("_", " ").strip().capitalize()


def input_phrase(name: str) -> str:
    """Lower-case phrasing of an input variable for use inside sentences."""
    return _INPUT_PHRASES.get(name, name.replace("_", " "))


def format_metric_value(name: str, value: float) -> str:
    """Format a value with the display precision of its metric."""
    decimals = _DECIMALS.get(name)
    if decimals is not None:
        return f"{value:.{decimals}f}"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def parse_date(value: Any) -> date | None:
    """Parse an ISO date/datetime string (or pass through date objects)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO date/datetime into a naive UTC datetime for ordering.

    Bare dates read as midnight. Offset-aware values are shifted to UTC so
    brews logged from different zones still sort correctly.
    """
    if isinstance(value, datetime):
        stamp = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            stamp = datetime.fromisoformat(text)
        except ValueError:
            day = parse_date(text)
            return datetime.combine(day, time.min) if day else None
    else:
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc).replace(tzinfo=None)
    return stamp


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


def _derive_ratio(record: Mapping[str, Any]) -> float | None:
    coffee = as_number(record.get("coffee_weight"))
    water = as_number(record.get("water_weight"))
    if coffee is None or water is None or coffee <= 0:
        return None
    return water / coffee


def _derive_days_off_roast(record: Mapping[str, Any]) -> float | None:
    roasted = parse_date(record.get("roast_date"))
    brewed = parse_date(record.get("brew_date"))
    if roasted is None or brewed is None:
        return None
    return float((brewed - roasted).days)
