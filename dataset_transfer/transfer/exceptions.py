from typing import Any

from dataset_transfer.storage.base import StoredObject


class TransferError(Exception):
    """Base exception for upload/download pipeline failures.

    `stage` and `bytes_processed` are filled in by the pipeline runner when the
    error escapes a step, so callers can decide whether and how to retry.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        bytes_processed: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.bytes_processed = bytes_processed


class EmptySourceError(TransferError):
    """Raised when the source file has no bytes to transfer."""


class EncryptionUnavailableError(TransferError):
    """Raised when encryption is disabled or no key-wrapping key is configured."""


class CompressionRequiredError(TransferError):
    """Raised when an upload asks to skip compression."""


class TransferCancelledError(TransferError):
    """Raised when the caller's cancellation token trips between stages."""


class UploadedButUnregisteredError(TransferError):
    """The object reached storage but the catalog record was not written.

    Carries the stored location and the catalog payload so registration can be
    retried without uploading the bytes again.
    """

    def __init__(
        self,
        message: str,
        *,
        stored: StoredObject,
        dataset_id: str,
        payload: dict[str, Any],
        stage: str | None = None,
        bytes_processed: int | None = None,
    ) -> None:
        super().__init__(message, stage=stage, bytes_processed=bytes_processed)
        self.stored = stored
        self.dataset_id = dataset_id
        self.payload = payload
