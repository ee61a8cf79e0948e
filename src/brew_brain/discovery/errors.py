"""Error taxonomy for brew analysis.

Missing or non-numeric field values are never errors; they are dropped
per-variable at extraction time.
"""

from __future__ import annotations


class BrewAnalysisError(Exception):
    """Base class for analysis errors surfaced to callers."""


class UnknownVariable(BrewAnalysisError):
    """A variable name outside the input/outcome catalogs was requested."""

    def __init__(self, name: str, kind: str = "variable"):
        self.name = name
        self.kind = kind
        super().__init__(f"Unknown {kind}: {name!r}")


class InsufficientData(BrewAnalysisError):
    """Too few paired records to say anything about a variable pair."""

    def __init__(
        self,
        found: int,
        required: int,
        input_name: str | None = None,
        outcome_name: str | None = None,
        reason: str = "samples",
    ):
        self.found = found
        self.required = required
        self.input_name = input_name
        self.outcome_name = outcome_name
        self.reason = reason
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.reason == "variance":
            return (
                f"No variation in {self.input_name} or {self.outcome_name} "
                f"across {self.found} records"
            )
        if self.input_name and self.outcome_name:
            return (
                f"Need at least {self.required} records with both "
                f"{self.input_name} and {self.outcome_name} (found {self.found})"
            )
        return f"Need at least {self.required} records (found {self.found})"
