from typing import Any
from urllib.parse import urlencode

from botocore.exceptions import BotoCoreError, ClientError

from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import BaseObjectStorage, StoredObject
from dataset_transfer.storage.exceptions import StorageError


class S3ObjectStorage(BaseObjectStorage):
    """Object storage backed by an S3 (or S3-compatible) bucket."""

    def __init__(self, *, client: Any, bucket: str, presign_expiry_seconds: int = 3600) -> None:
        if not bucket:
            raise ValueError("bucket name is required")
        self._client = client
        self._bucket = bucket
        self._expiry = presign_expiry_seconds

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        key: str,
        data: bytes,
        tags: dict[str, str] | None = None,
    ) -> StoredObject:
        request: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Body": data}
        if tags:
            request["Tagging"] = urlencode(tags)
        try:
            self._client.put_object(**request)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"failed to upload s3://{self._bucket}/{key}: {exc}") from exc
        stored = StoredObject(bucket=self._bucket, key=key, size_bytes=len(data))
        Log.info(f"Uploaded to {stored.uri}", bytes=len(data))
        return stored

    def presigned_upload_url(self, key: str) -> str:
        return self._presign("put_object", key)

    def presigned_download_url(self, key: str) -> str:
        return self._presign("get_object", key)

    def _presign(self, operation: str, key: str) -> str:
        try:
            return self._client.generate_presigned_url(
                operation,
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=self._expiry,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"failed to presign {operation} for {key}: {exc}") from exc
