from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.exceptions import KeyWrapError, KeyWrapUnavailableError


class KmsKeyWrapper(BaseKeyWrapper):
    """Wraps data keys with an AWS KMS customer key."""

    def __init__(self, *, client: Any, key_id: str) -> None:
        self._client = client
        self._key_id = key_id.strip()

    @property
    def is_available(self) -> bool:
        return bool(self._key_id)

    def wrap(self, plaintext_key: bytes) -> bytes:
        if not self._key_id:
            raise KeyWrapUnavailableError("KMS key not configured, cannot wrap data key")
        try:
            response = self._client.encrypt(KeyId=self._key_id, Plaintext=plaintext_key)
        except (ClientError, BotoCoreError) as exc:
            raise KeyWrapError(f"KMS encryption failed: {exc}") from exc
        return response["CiphertextBlob"]

    def unwrap(self, wrapped_key: bytes) -> bytes:
        # KMS finds the key from metadata embedded in the blob
        try:
            response = self._client.decrypt(CiphertextBlob=wrapped_key)
        except (ClientError, BotoCoreError) as exc:
            raise KeyWrapError(f"KMS decrypt failed: {exc}") from exc
        return response["Plaintext"]
