from dataset_transfer.exceptions import TransportError


class CatalogError(TransportError):
    """Raised when the catalog API cannot be reached or returns an unusable response."""


class CatalogRequestError(CatalogError):
    """Raised when the catalog API answers with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class CatalogConflictError(CatalogRequestError):
    """Raised on 409 Conflict: a record with the same identity already exists."""
