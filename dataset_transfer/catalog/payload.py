"""Catalog payload construction for dataset registration."""

import copy
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from dataset_transfer.analysis.models import AnalysisResult

_SLUG_INVALID = re.compile(r"[^a-z0-9-]+")

UPDATABLE_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "schema",
    "metadata",
    "status",
    "visibility",
    "category",
    "access_tier",
    "tags",
    "size_bytes",
    "record_count",
    "s3_key",
    "s3_bucket_name",
    "data_freshness",
    "version",
    "version_notes",
    "last_updated",
    "updated_at",
    "updated_by",
)


def slugify(name: str) -> str:
    slug = _SLUG_INVALID.sub("-", name.lower()).strip("-")
    return slug or "dataset"


def dataset_id(producer_id: str, name: str) -> str:
    """Stable identity for (producer, dataset name); re-uploads target the same record."""
    return f"{producer_id}-{slugify(name)}"


def deep_merge(base: dict[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge overrides into base in place. Nested dicts merge; other values replace."""
    if not overrides:
        return base
    for key, value in overrides.items():
        existing = base.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            deep_merge(existing, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def restrict_to_updatable(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Subset of a create payload that the update endpoint accepts."""
    return {name: payload[name] for name in UPDATABLE_FIELDS if name in payload}


def default_pricing() -> dict[str, Any]:
    return {
        tier: {"amount": 0, "currency": "USD", "interval": "monthly"}
        for tier in ("basic", "professional", "enterprise")
    }


def default_stats() -> dict[str, Any]:
    return {
        "subscriber_count": 0,
        "download_count": 0,
        "download_count_7d": 0,
        "download_count_30d": 0,
        "view_count": 0,
        "last_downloaded_at": None,
        "avg_download_size_mb": 0,
    }


def default_validation(record_count: int) -> dict[str, Any]:
    return {
        "validated": False,
        "validation_errors": [],
        "row_count": record_count,
        "data_quality_score": 0,
    }


def _pop_explicit_id(overrides: dict[str, Any]) -> str | None:
    for key in ("_id", "id"):
        value = overrides.get(key)
        if isinstance(value, str) and value:
            del overrides[key]
            return value
    return None


def build_dataset_payload(
    *,
    producer_id: str,
    bucket: str,
    name: str,
    description: str,
    category: str,
    data_freshness: str,
    s3_key: str,
    size_bytes: int,
    metadata: Mapping[str, Any] | None,
    analysis: AnalysisResult | None,
    overrides: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the full create payload for one dataset upload.

    Args:
        metadata: Caller metadata already combined with the size breakdown.
        analysis: Analyzer output, or None when analysis was skipped.
        overrides: Deep-merged over the defaults. An `_id` or `id` entry
            replaces the derived identity.
        now: Clock override, mainly for tests.
    """
    overrides_copy = copy.deepcopy(dict(overrides)) if overrides else {}
    record_id = _pop_explicit_id(overrides_copy) or dataset_id(producer_id, name)

    metadata_payload = copy.deepcopy(dict(metadata)) if metadata else {}
    metadata_payload.setdefault("file_format", "json")
    metadata_payload.setdefault("encoding", "utf-8")

    analysis = analysis or AnalysisResult.empty()
    metadata_payload["schema"] = copy.deepcopy(analysis.schema)
    metadata_payload["field_emptiness"] = dict(analysis.field_emptiness)
    metadata_payload["record_count"] = analysis.record_count
    if analysis.parse_error_count > 0:
        metadata_payload["analysis_errors"] = analysis.parse_error_count

    now = now or datetime.now(UTC)
    now_iso = now.strftime("%Y-%m-%dT%H:%M:%SZ")

    payload: dict[str, Any] = {
        "_id": record_id,
        "id": record_id,
        "name": name,
        "description": description,
        "producer_id": producer_id,
        "category": category,
        "data_freshness": str(data_freshness),
        "visibility": "private",
        "status": "active",
        "access_tier": "free",
        "s3_key": s3_key,
        "s3_bucket_name": bucket,
        "s3_bucket": bucket,
        "size_bytes": size_bytes,
        "record_count": analysis.record_count,
        "version": now.strftime("%Y-%m-%d"),
        "version_notes": "",
        "parent_dataset_id": None,
        "is_latest_version": True,
        "metadata": metadata_payload,
        "schema": copy.deepcopy(analysis.schema),
        "validation": default_validation(analysis.record_count),
        "tags": [],
        "pricing": default_pricing(),
        "stats": default_stats(),
        "last_updated": now_iso,
        "created_at": now_iso,
        "created_by": producer_id,
        "updated_at": now_iso,
        "updated_by": producer_id,
        "deleted_at": None,
        "deleted_by": None,
    }
    return deep_merge(payload, overrides_copy)
