from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import pytest

from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.exceptions import CatalogConflictError, CatalogRequestError
from dataset_transfer.catalog.models import DatasetRecord, DownloadAuthorization
from dataset_transfer.config.settings import Settings
from dataset_transfer.encryption.local_key_wrapper import LocalKeyWrapper
from dataset_transfer.storage.base import (
    BaseDownloader,
    BaseObjectStorage,
    DownloadStream,
    StoredObject,
)
from dataset_transfer.storage.exceptions import StorageError

PRESIGNED_PREFIX = "memory://"


class InMemoryStorage(BaseObjectStorage, BaseDownloader):
    """Bucket held in a dict; presigned URLs resolve back to the same dict."""

    def __init__(self, bucket: str = "test-bucket") -> None:
        self._bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.tags: dict[str, dict[str, str]] = {}

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(self, key: str, data: bytes, tags: dict[str, str] | None = None) -> StoredObject:
        self.objects[key] = bytes(data)
        self.tags[key] = dict(tags or {})
        return StoredObject(bucket=self._bucket, key=key, size_bytes=len(data))

    def presigned_upload_url(self, key: str) -> str:
        return PRESIGNED_PREFIX + key

    def presigned_download_url(self, key: str) -> str:
        return PRESIGNED_PREFIX + key

    @contextmanager
    def stream(self, url: str) -> Iterator[DownloadStream]:
        key = url.removeprefix(PRESIGNED_PREFIX)
        if key not in self.objects:
            raise StorageError(f"download failed with status 404: {key}")
        data = self.objects[key]
        chunks = (data[i : i + 64] for i in range(0, len(data), 64))
        yield DownloadStream(declared_size=len(data), chunks=chunks)


class InMemoryCatalog(BaseCatalogClient):
    def __init__(self, storage: InMemoryStorage) -> None:
        self._storage = storage
        self.records: dict[str, dict[str, Any]] = {}
        self.create_calls = 0
        self.update_calls = 0

    def create_record(self, payload: dict[str, Any]) -> DatasetRecord:
        self.create_calls += 1
        record_id = payload["_id"]
        if record_id in self.records:
            raise CatalogConflictError(409, f"dataset {record_id} already exists")
        self.records[record_id] = dict(payload)
        return DatasetRecord.from_api(payload)

    def update_record(self, record_id: str, partial: dict[str, Any]) -> DatasetRecord:
        self.update_calls += 1
        self.records[record_id].update(partial)
        return DatasetRecord.from_api(self.records[record_id])

    def get_record(self, record_id: str) -> DatasetRecord:
        if record_id not in self.records:
            raise CatalogRequestError(404, f"dataset {record_id} not found")
        return DatasetRecord.from_api(self.records[record_id])

    def get_download_authorization(self, record_id: str) -> DownloadAuthorization:
        record = self.get_record(record_id)
        return DownloadAuthorization(
            download_url=self._storage.presigned_download_url(record.s3_key),
            file_size=record.size_bytes,
        )


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def catalog(storage: InMemoryStorage) -> InMemoryCatalog:
    return InMemoryCatalog(storage)


@pytest.fixture()
def key_wrapper() -> LocalKeyWrapper:
    return LocalKeyWrapper.generate()


@pytest.fixture()
def transfer_settings() -> Settings:
    return Settings(customer_id="cust-1", bucket_name="test-bucket", key_wrapper_provider="local")
