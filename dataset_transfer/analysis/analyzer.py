"""Streaming NDJSON analyzer: schema inference plus field emptiness."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from dataset_transfer.analysis.emptiness import FieldEmptinessTracker
from dataset_transfer.analysis.exceptions import AnalysisError, RecordParseError
from dataset_transfer.analysis.models import AnalysisOptions, AnalysisResult
from dataset_transfer.analysis.schema_builder import SchemaBuilder
from dataset_transfer.logging.logger import Log


MAX_NESTING_DEPTH = 256


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def parse_record(line: str, line_number: int | None = None) -> dict[str, Any]:
    """Decode one NDJSON line into a record.

    Raises:
        RecordParseError: if the line is not valid JSON, not a JSON object,
            or nested deeper than MAX_NESTING_DEPTH.
    """
    try:
        value = json.loads(line, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise RecordParseError(f"invalid JSON: {exc}", line_number) from exc
    if not isinstance(value, dict):
        raise RecordParseError(
            f"expected a JSON object, got {type(value).__name__}", line_number
        )
    if nesting_depth(value) > MAX_NESTING_DEPTH:
        raise RecordParseError(
            f"nested deeper than {MAX_NESTING_DEPTH} levels", line_number
        )
    return value


def nesting_depth(value: Any) -> int:
    """Deepest level of objects and arrays in value. Scalars have depth 0."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


class SchemaAnalyzer:
    """Single-pass analyzer.

    The schema is inferred from the first `sample_limit` records; emptiness
    statistics always cover every record. Working memory depends on the
    number of distinct field paths, not on the number of lines.
    """

    def __init__(self, options: AnalysisOptions | None = None) -> None:
        self._options = options or AnalysisOptions()

    def analyze_file(self, path: Path | str) -> AnalysisResult:
        """Analyze an NDJSON file.

        Raises:
            AnalysisError: if the file cannot be opened or read.
        """
        Log.info(f"Analyzing dataset {path} for schema and field statistics")
        try:
            with open(path, encoding="utf-8", errors="replace") as handle:
                return self.analyze_lines(handle)
        except OSError as exc:
            raise AnalysisError(f"failed to read {path}: {exc}") from exc

    def analyze_lines(self, lines: Iterable[str]) -> AnalysisResult:
        sample_limit = self._options.sample_limit
        builder = SchemaBuilder()
        tracker = FieldEmptinessTracker()
        record_count = 0
        parse_errors = 0

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line:
                continue
            try:
                record = parse_record(line, line_number)
            except RecordParseError as exc:
                parse_errors += 1
                if parse_errors <= self._options.max_logged_parse_errors:
                    Log.warning(f"Failed to parse line {line_number}: {exc}")
                continue

            record_count += 1
            if sample_limit == 0 or record_count <= sample_limit:
                builder.add(record)
            tracker.observe(record)

        result = AnalysisResult(
            schema=builder.to_schema(),
            field_emptiness=tracker.emptiness(record_count),
            record_count=record_count,
            parse_error_count=parse_errors,
            schema_sample_count=builder.sample_count,
        )
        self._log_summary(result)
        return result

    @staticmethod
    def _log_summary(result: AnalysisResult) -> None:
        summary = result.summary()
        Log.info(
            "Analysis complete",
            records=result.record_count,
            schema_sampled=result.schema_sample_count,
            fields=len(result.field_emptiness),
            complete=summary.complete,
            partial=summary.partial,
            empty=summary.empty,
        )
        if result.parse_error_count:
            Log.warning(f"Skipped {result.parse_error_count} unparseable lines")
