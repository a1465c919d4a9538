from unittest.mock import MagicMock

import httpx
import pytest
from botocore.exceptions import ClientError

from dataset_transfer.config.settings import Settings
from dataset_transfer.storage.exceptions import StorageError
from dataset_transfer.storage.factory import ObjectStorageFactory
from dataset_transfer.storage.http_downloader import HttpDownloader
from dataset_transfer.storage.s3_storage import S3ObjectStorage


def _client_error() -> ClientError:
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")


class TestS3ObjectStorage:
    def test_put_object_with_tags(self) -> None:
        client = MagicMock()
        storage = S3ObjectStorage(client=client, bucket="bucket")

        stored = storage.put_object(
            "datasets/a/data.ndjson.gz",
            b"12345",
            tags={"CustomerID": "c 1", "Component": "storage"},
        )

        client.put_object.assert_called_once_with(
            Bucket="bucket",
            Key="datasets/a/data.ndjson.gz",
            Body=b"12345",
            Tagging="CustomerID=c+1&Component=storage",
        )
        assert stored.uri == "s3://bucket/datasets/a/data.ndjson.gz"
        assert stored.size_bytes == 5

    def test_put_object_without_tags(self) -> None:
        client = MagicMock()
        S3ObjectStorage(client=client, bucket="bucket").put_object("k", b"x")
        assert "Tagging" not in client.put_object.call_args.kwargs

    def test_put_object_failure(self) -> None:
        client = MagicMock()
        client.put_object.side_effect = _client_error()
        with pytest.raises(StorageError, match="denied"):
            S3ObjectStorage(client=client, bucket="bucket").put_object("k", b"x")

    def test_presigned_urls(self) -> None:
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://signed"
        storage = S3ObjectStorage(client=client, bucket="bucket", presign_expiry_seconds=60)

        assert storage.presigned_download_url("k") == "https://signed"
        client.generate_presigned_url.assert_called_once_with(
            "get_object", Params={"Bucket": "bucket", "Key": "k"}, ExpiresIn=60
        )
        storage.presigned_upload_url("k")
        assert client.generate_presigned_url.call_args.args == ("put_object",)

    def test_requires_bucket(self) -> None:
        with pytest.raises(ValueError, match="bucket"):
            S3ObjectStorage(client=MagicMock(), bucket="")


class TestObjectStorageFactory:
    def test_creates_s3_storage(self) -> None:
        session = MagicMock()
        storage = ObjectStorageFactory.create(Settings(bucket_name="bucket"), session)
        assert storage.bucket == "bucket"
        session.client.assert_called_once_with("s3")

    def test_requires_bucket_name(self) -> None:
        with pytest.raises(ValueError, match="BUCKET_NAME"):
            ObjectStorageFactory.create(Settings(bucket_name=""), MagicMock())


class _UnreadStream(httpx.SyncByteStream):
    """Body the mock transport leaves unread, as a real transport would."""

    def __init__(self, body: bytes) -> None:
        self._body = body

    def __iter__(self):
        yield self._body


class TestHttpDownloader:
    def _make(self, handler) -> HttpDownloader:
        return HttpDownloader(client=httpx.Client(transport=httpx.MockTransport(handler)))

    def test_streams_body(self) -> None:
        downloader = self._make(
            lambda request: httpx.Response(
                200, headers={"Content-Length": "7"}, stream=_UnreadStream(b"payload")
            )
        )

        with downloader.stream("https://s3/obj") as stream:
            data = b"".join(stream.chunks)

        assert data == b"payload"
        assert stream.declared_size == 7

    def test_non_200_status(self) -> None:
        downloader = self._make(lambda request: httpx.Response(403, text="expired"))
        with pytest.raises(StorageError, match="403"):
            with downloader.stream("https://s3/obj"):
                pass

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(StorageError, match="unreachable"):
            with self._make(handler).stream("https://s3/obj"):
                pass
