from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dataset_transfer.analysis.models import AnalysisResult
from dataset_transfer.catalog.models import DataFreshness, DatasetRecord, RegistrationOutcome
from dataset_transfer.compression.codec import DEFAULT_LEVEL
from dataset_transfer.storage.base import StoredObject


@dataclass(frozen=True)
class UploadOptions:
    """What to upload and how to describe it in the catalog.

    Compression and encryption are mandatory; the flags exist so a request to
    skip either is rejected explicitly rather than ignored.
    """

    dataset_name: str
    description: str = ""
    category: str = "general"
    data_freshness: DataFreshness | str = DataFreshness.DAILY
    compress: bool = True
    encrypt: bool = True
    compression_level: int = DEFAULT_LEVEL
    metadata: dict[str, Any] = field(default_factory=dict)
    dataset_overrides: dict[str, Any] = field(default_factory=dict)


@dataclass
class SizeBreakdown:
    original_size_bytes: int = 0
    compressed_size_bytes: int = 0
    encrypted_size_bytes: int = 0
    compression_enabled: bool = False
    encryption_enabled: bool = False

    @property
    def final_size_bytes(self) -> int:
        """Size of what is actually stored."""
        if self.encryption_enabled:
            return self.encrypted_size_bytes
        return self.compressed_size_bytes

    def as_metadata(self) -> dict[str, Any]:
        return {
            "original_size_bytes": self.original_size_bytes,
            "compressed_size_bytes": self.compressed_size_bytes,
            "encrypted_size_bytes": self.encrypted_size_bytes,
            "compression_enabled": self.compression_enabled,
            "encryption_enabled": self.encryption_enabled,
        }


@dataclass(frozen=True)
class ProcessedPayload:
    """Transfer-ready bytes plus the sizes recorded on the way."""

    data: bytes
    original_size: int
    sizes: SizeBreakdown


@dataclass(frozen=True)
class UploadResult:
    dataset: DatasetRecord
    registration: RegistrationOutcome
    sizes: SizeBreakdown
    analysis: AnalysisResult
    stored: StoredObject


@dataclass(frozen=True)
class DownloadResult:
    dataset: DatasetRecord
    output_path: Path
    downloaded_bytes: int
    output_bytes: int
    decrypted: bool
    decompressed: bool
    staged: bool
