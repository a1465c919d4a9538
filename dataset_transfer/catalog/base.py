from abc import ABC, abstractmethod
from typing import Any

from dataset_transfer.catalog.models import DatasetRecord, DownloadAuthorization


class BaseCatalogClient(ABC):
    """Contract for the dataset catalog service."""

    @abstractmethod
    def create_record(self, payload: dict[str, Any]) -> DatasetRecord:
        """Register a new dataset.

        Raises:
            CatalogConflictError: if a record with the payload's identity exists.
            CatalogError: on any other failure.
        """

    @abstractmethod
    def update_record(self, record_id: str, partial: dict[str, Any]) -> DatasetRecord:
        """Apply a partial update to an existing record."""

    @abstractmethod
    def get_record(self, record_id: str) -> DatasetRecord:
        """Fetch one record."""

    @abstractmethod
    def get_download_authorization(self, record_id: str) -> DownloadAuthorization:
        """Request a time-limited download URL for the record's stored object."""
