from dataclasses import dataclass, field
from typing import Any

DEFAULT_SAMPLE_LIMIT = 1000


@dataclass(frozen=True)
class AnalysisOptions:
    """Analyzer knobs. sample_limit=0 samples every record for the schema."""

    sample_limit: int = DEFAULT_SAMPLE_LIMIT
    max_logged_parse_errors: int = 5

    def __post_init__(self) -> None:
        if self.sample_limit < 0:
            raise ValueError(f"sample_limit must be >= 0, got {self.sample_limit}")


@dataclass(frozen=True)
class FieldSummary:
    complete: int
    partial: int
    empty: int


@dataclass(frozen=True)
class AnalysisResult:
    """Schema and field statistics for one NDJSON dataset."""

    schema: dict[str, Any] = field(default_factory=dict)
    field_emptiness: dict[str, float] = field(default_factory=dict)
    record_count: int = 0
    parse_error_count: int = 0
    schema_sample_count: int = 0

    @classmethod
    def empty(cls) -> "AnalysisResult":
        return cls()

    def summary(self) -> FieldSummary:
        """Count fields that are never, sometimes and always empty."""
        complete = sum(1 for pct in self.field_emptiness.values() if pct == 0.0)
        empty = sum(1 for pct in self.field_emptiness.values() if pct == 100.0)
        return FieldSummary(
            complete=complete,
            partial=len(self.field_emptiness) - complete - empty,
            empty=empty,
        )
