from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class DataFreshness(StrEnum):
    """Update cadences a dataset can advertise."""

    TWO_TIMES_PER_DAY = "2x-per-day"
    FOUR_TIMES_PER_DAY = "4x-per-day"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONCE = "once"
    ON_DEMAND = "on-demand"


@dataclass(frozen=True)
class DatasetRecord:
    """Catalog entry for one dataset (the subset of fields the transfer uses)."""

    id: str
    name: str
    producer_id: str
    description: str = ""
    category: str = "general"
    data_freshness: str = DataFreshness.DAILY.value
    visibility: str = "private"
    status: str = "active"
    access_tier: str = "free"
    s3_bucket: str | None = None
    s3_key: str | None = None
    size_bytes: int = 0
    record_count: int = 0
    schema: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    version: str | None = None
    version_notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    last_updated: str | None = None
    updated_by: str | None = None

    @property
    def compression_enabled(self) -> bool:
        return self.metadata.get("compression_enabled") is True

    @property
    def encryption_enabled(self) -> bool:
        return self.metadata.get("encryption_enabled") is True

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DatasetRecord":
        """Build from a catalog response or payload.

        The API is inconsistent about a few names (`_id` vs `id`,
        `s3_bucket_name` vs `s3_bucket`); both spellings are accepted.
        """
        return cls(
            id=str(data.get("_id") or data.get("id") or ""),
            name=data.get("name") or "",
            producer_id=data.get("producer_id") or "",
            description=data.get("description") or "",
            category=data.get("category") or "general",
            data_freshness=data.get("data_freshness") or DataFreshness.DAILY.value,
            visibility=data.get("visibility") or "private",
            status=data.get("status") or "active",
            access_tier=data.get("access_tier") or "free",
            s3_bucket=data.get("s3_bucket_name") or data.get("s3_bucket"),
            s3_key=data.get("s3_key"),
            size_bytes=_as_int(data.get("size_bytes", data.get("total_size_bytes"))),
            record_count=_as_int(data.get("record_count")),
            schema=data.get("schema") or {},
            metadata=data.get("metadata") or {},
            tags=list(data.get("tags") or []),
            version=data.get("version"),
            version_notes=data.get("version_notes"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            last_updated=data.get("last_updated"),
            updated_by=data.get("updated_by"),
        )


@dataclass(frozen=True)
class DownloadAuthorization:
    """Time-limited permission to GET one stored object."""

    download_url: str
    expires_at: str | None = None
    file_name: str | None = None
    file_size: int | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "DownloadAuthorization":
        url = data.get("download_url")
        if not url:
            raise ValueError("download authorization is missing download_url")
        file_size = data.get("file_size")
        legacy = data.get("dataset")
        if file_size is None and isinstance(legacy, dict):
            file_size = legacy.get("size_bytes")
        return cls(
            download_url=url,
            expires_at=data.get("expires_at"),
            file_name=data.get("file_name"),
            file_size=_as_int(file_size) if file_size is not None else None,
        )


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class RegistrationOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(frozen=True)
class Registration:
    record: DatasetRecord
    outcome: RegistrationOutcome
