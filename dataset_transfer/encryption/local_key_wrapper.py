"""Local key wrapper.

Wraps data keys under a 256-bit master key held in process memory. No network
calls. Useful for development, tests, and air-gapped transfers where both
sides share the master key out of band.
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.exceptions import KeyWrapError, KeyWrapUnavailableError

MASTER_KEY_SIZE = 32
_NONCE_SIZE = 12


def decode_master_key(encoded: str) -> bytes:
    """Decode a base64 master key from configuration.

    Raises:
        ValueError: if the value is not base64 or not 32 bytes long.
    """
    try:
        key = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"local master key is not valid base64: {exc}") from exc
    if len(key) != MASTER_KEY_SIZE:
        raise ValueError(f"local master key must be {MASTER_KEY_SIZE} bytes, got {len(key)}")
    return key


class LocalKeyWrapper(BaseKeyWrapper):
    """Blob layout: 12-byte nonce followed by the AES-GCM sealed data key."""

    def __init__(self, master_key: bytes | None) -> None:
        if master_key is not None and len(master_key) != MASTER_KEY_SIZE:
            raise ValueError(f"master key must be {MASTER_KEY_SIZE} bytes")
        self._aead = AESGCM(master_key) if master_key is not None else None

    @classmethod
    def generate(cls) -> "LocalKeyWrapper":
        return cls(AESGCM.generate_key(bit_length=256))

    @property
    def is_available(self) -> bool:
        return self._aead is not None

    def wrap(self, plaintext_key: bytes) -> bytes:
        if self._aead is None:
            raise KeyWrapUnavailableError("local master key not configured")
        nonce = os.urandom(_NONCE_SIZE)
        return nonce + self._aead.encrypt(nonce, plaintext_key, None)

    def unwrap(self, wrapped_key: bytes) -> bytes:
        if self._aead is None:
            raise KeyWrapUnavailableError("local master key not configured")
        if len(wrapped_key) <= _NONCE_SIZE:
            raise KeyWrapError("wrapped key blob is too short")
        nonce, sealed = wrapped_key[:_NONCE_SIZE], wrapped_key[_NONCE_SIZE:]
        try:
            return self._aead.decrypt(nonce, sealed, None)
        except InvalidTag as exc:
            raise KeyWrapError("wrapped key failed authentication") from exc
