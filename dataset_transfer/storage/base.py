from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    bucket: str
    key: str
    size_bytes: int

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class BaseObjectStorage(ABC):
    """Contract for object stores. Only byte-exact put semantics are relied upon."""

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Name of the bucket objects are written to."""

    @abstractmethod
    def put_object(
        self,
        key: str,
        data: bytes,
        tags: dict[str, str] | None = None,
    ) -> StoredObject:
        """Store data under key, replacing any existing object.

        Raises:
            StorageError: on any provider failure.
        """

    @abstractmethod
    def presigned_upload_url(self, key: str) -> str:
        """Time-limited URL that authorizes one PUT of key."""

    @abstractmethod
    def presigned_download_url(self, key: str) -> str:
        """Time-limited URL that authorizes one GET of key."""


@dataclass
class DownloadStream:
    """An open download. `declared_size` comes from the transport, if it sent one."""

    declared_size: int | None
    chunks: Iterator[bytes]


class BaseDownloader(ABC):
    """Contract for fetching the bytes behind a presigned URL."""

    @abstractmethod
    def stream(self, url: str) -> AbstractContextManager[DownloadStream]:
        """Open url for streaming.

        Raises:
            StorageError: if the request fails or returns a non-success status.
        """
