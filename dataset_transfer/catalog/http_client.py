from typing import Any
from urllib.parse import quote

import httpx

from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.exceptions import (
    CatalogConflictError,
    CatalogError,
    CatalogRequestError,
)
from dataset_transfer.catalog.models import DatasetRecord, DownloadAuthorization


class HttpCatalogClient(BaseCatalogClient):
    """Catalog client for the dataset REST API."""

    def __init__(
        self,
        *,
        base_url: str = "",
        auth: httpx.Auth | None = None,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            auth=auth,
            timeout=timeout_seconds,
        )

    def create_record(self, payload: dict[str, Any]) -> DatasetRecord:
        body = self._request("POST", "/v1/datasets", payload)
        return DatasetRecord.from_api(body if isinstance(body, dict) else payload)

    def update_record(self, record_id: str, partial: dict[str, Any]) -> DatasetRecord:
        # The PATCH response uses different field names; report what was written.
        self._request("PATCH", f"/v1/datasets/{_segment(record_id)}", partial)
        return DatasetRecord.from_api({**partial, "_id": record_id})

    def get_record(self, record_id: str) -> DatasetRecord:
        body = self._request("GET", f"/v1/datasets/{_segment(record_id)}")
        if not isinstance(body, dict):
            raise CatalogError(f"unexpected dataset response for {record_id}")
        return DatasetRecord.from_api(body)

    def get_download_authorization(self, record_id: str) -> DownloadAuthorization:
        body = self._request("GET", f"/v1/datasets/{_segment(record_id)}/download")
        if not isinstance(body, dict):
            raise CatalogError(f"unexpected download response for {record_id}")
        try:
            return DownloadAuthorization.from_api(body)
        except ValueError as exc:
            raise CatalogError(str(exc)) from exc

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        try:
            response = self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            raise CatalogError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == httpx.codes.CONFLICT:
            raise CatalogConflictError(response.status_code, response.text)
        if not response.is_success:
            raise CatalogRequestError(response.status_code, response.text)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogError(f"{method} {path} returned invalid JSON: {exc}") from exc


def _segment(value: str) -> str:
    return quote(value, safe="")
