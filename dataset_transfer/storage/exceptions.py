from dataset_transfer.exceptions import TransportError


class StorageError(TransportError):
    """Raised when object storage or a presigned transfer fails."""
