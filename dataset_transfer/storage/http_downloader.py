from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from dataset_transfer.storage.base import BaseDownloader, DownloadStream
from dataset_transfer.storage.exceptions import StorageError

CHUNK_SIZE = 1024 * 1024


class HttpDownloader(BaseDownloader):
    """Streams presigned URLs over plain HTTP(S).

    Presigned URLs carry their own authorization, so no signing is applied.
    Raw bytes are yielded so a Content-Encoding header never alters the object.
    """

    def __init__(self, client: httpx.Client | None = None, timeout_seconds: float = 30.0) -> None:
        self._client = client or httpx.Client(timeout=timeout_seconds, follow_redirects=True)

    @contextmanager
    def stream(self, url: str) -> Iterator[DownloadStream]:
        try:
            with self._client.stream("GET", url) as response:
                if response.status_code != 200:
                    response.read()
                    raise StorageError(
                        f"download failed with status {response.status_code}: {response.text[:200]}"
                    )
                yield DownloadStream(
                    declared_size=_content_length(response),
                    chunks=response.iter_raw(CHUNK_SIZE),
                )
        except httpx.HTTPError as exc:
            raise StorageError(f"download failed: {exc}") from exc

    def close(self) -> None:
        self._client.close()


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
