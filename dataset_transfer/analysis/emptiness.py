"""Field presence tracking for NDJSON records.

A field path is "present" in a record when it holds effective content. Missing
keys, nulls, blank strings, empty arrays and empty objects all count as empty.
Nested objects extend the path with ``.key``; object elements of an array are
walked under ``field[]``.
"""

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from dataset_transfer.analysis.json_kind import JsonKind, kind_of

ARRAY_MARKER = "[]"
_TWO_PLACES = Decimal("0.01")


def is_empty(value: Any) -> bool:
    kind = kind_of(value)
    if kind is JsonKind.NULL:
        return True
    if kind is JsonKind.STRING:
        return value.strip() == ""
    if kind in (JsonKind.ARRAY, JsonKind.OBJECT):
        return len(value) == 0
    return False


def field_status(record: dict[str, Any], prefix: str = "") -> tuple[set[str], set[str]]:
    """Return (discovered, present) field paths for one record."""
    discovered: set[str] = set()
    present: set[str] = set()
    _walk(record, prefix, discovered, present)
    return discovered, present


def _walk(obj: dict[str, Any], prefix: str, discovered: set[str], present: set[str]) -> None:
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else key
        discovered.add(path)
        if is_empty(value):
            continue
        present.add(path)
        kind = kind_of(value)
        if kind is JsonKind.OBJECT:
            _walk(value, path, discovered, present)
        elif kind is JsonKind.ARRAY:
            element_prefix = path + ARRAY_MARKER
            for element in value:
                if kind_of(element) is JsonKind.OBJECT:
                    _walk(element, element_prefix, discovered, present)


def emptiness_percentage(record_count: int, present_count: int) -> float:
    """Share of records where the field is missing or empty, rounded half-up to 0.01."""
    if record_count <= 0:
        return 0.0
    missing = Decimal(record_count - present_count) * 100
    return float((missing / Decimal(record_count)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


class FieldEmptinessTracker:
    """Accumulates field discovery and per-record presence over a full scan."""

    def __init__(self) -> None:
        self._discovered: set[str] = set()
        self._present_counts: Counter[str] = Counter()

    def observe(self, record: dict[str, Any]) -> None:
        discovered, present = field_status(record)
        self._discovered |= discovered
        self._present_counts.update(present)

    def emptiness(self, record_count: int) -> dict[str, float]:
        """Percentages ordered by descending emptiness, then ascending path."""
        percentages = {
            path: emptiness_percentage(record_count, self._present_counts[path])
            for path in self._discovered
        }
        ordered = sorted(percentages.items(), key=lambda item: (-item[1], item[0]))
        return dict(ordered)
