"""Envelope encryption container.

Layout (all sizes in bytes, integers big-endian)::

    [4: len(wrapped_key)] [wrapped_key] [16: iv] [16: auth tag] [ciphertext]

The payload is sealed with AES-256-GCM under a fresh data key and a fresh
16-byte IV. The IV length is not the usual 12 bytes; other producers and
consumers of this format use 16, so it must stay 16. The data key itself is
stored only in wrapped form.
"""

import os
import struct
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.exceptions import (
    AuthenticationFailedError,
    CorruptEnvelopeError,
    KeyWrapUnavailableError,
)

DATA_KEY_SIZE = 32
IV_SIZE = 16
TAG_SIZE = 16
LENGTH_PREFIX_SIZE = 4
_LENGTH_PREFIX = struct.Struct(">I")


@dataclass(frozen=True)
class ParsedEnvelope:
    wrapped_key: bytes
    iv: bytes
    auth_tag: bytes
    ciphertext: bytes


def pack_envelope(wrapped_key: bytes, iv: bytes, auth_tag: bytes, ciphertext: bytes) -> bytes:
    if len(iv) != IV_SIZE or len(auth_tag) != TAG_SIZE:
        raise ValueError("iv and auth tag must both be 16 bytes")
    return b"".join(
        (_LENGTH_PREFIX.pack(len(wrapped_key)), wrapped_key, iv, auth_tag, ciphertext)
    )


def unpack_envelope(container: bytes) -> ParsedEnvelope:
    """Split a container into its fields.

    Raises:
        CorruptEnvelopeError: if any fixed or length-prefixed field runs past
            the end of the container.
    """
    view = memoryview(container)
    if len(view) < LENGTH_PREFIX_SIZE:
        raise CorruptEnvelopeError(
            f"envelope too short for key length prefix ({len(view)} bytes)"
        )
    (key_length,) = _LENGTH_PREFIX.unpack_from(view, 0)
    offset = LENGTH_PREFIX_SIZE

    fields = []
    for name, size in (("wrapped key", key_length), ("iv", IV_SIZE), ("auth tag", TAG_SIZE)):
        if len(view) - offset < size:
            raise CorruptEnvelopeError(
                f"envelope truncated reading {name}: need {size} bytes at offset "
                f"{offset}, have {len(view) - offset}"
            )
        fields.append(bytes(view[offset : offset + size]))
        offset += size

    wrapped_key, iv, auth_tag = fields
    return ParsedEnvelope(
        wrapped_key=wrapped_key,
        iv=iv,
        auth_tag=auth_tag,
        ciphertext=bytes(view[offset:]),
    )


class EnvelopeCipher:
    """Hybrid encryption: AES-256-GCM payload, data key wrapped by a collaborator."""

    def __init__(self, key_wrapper: BaseKeyWrapper) -> None:
        self._key_wrapper = key_wrapper

    @property
    def is_available(self) -> bool:
        return self._key_wrapper.is_available

    def encrypt(self, plaintext: bytes) -> bytes:
        if not self._key_wrapper.is_available:
            raise KeyWrapUnavailableError("no wrapping key configured, cannot encrypt")

        data_key = os.urandom(DATA_KEY_SIZE)
        iv = os.urandom(IV_SIZE)
        sealed = AESGCM(data_key).encrypt(iv, plaintext, None)
        ciphertext, auth_tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

        wrapped_key = self._key_wrapper.wrap(data_key)
        return pack_envelope(wrapped_key, iv, auth_tag, ciphertext)

    def decrypt(self, container: bytes) -> bytes:
        """Open a container produced by `encrypt`.

        Raises:
            CorruptEnvelopeError: on a truncated container or a data key of
                the wrong size.
            KeyWrapError: if the collaborator cannot unwrap the data key.
            AuthenticationFailedError: if the tag does not verify.
        """
        envelope = unpack_envelope(container)
        data_key = self._key_wrapper.unwrap(envelope.wrapped_key)
        if len(data_key) != DATA_KEY_SIZE:
            raise CorruptEnvelopeError(
                f"unwrapped data key is {len(data_key)} bytes, expected {DATA_KEY_SIZE}"
            )
        try:
            return AESGCM(data_key).decrypt(
                envelope.iv, envelope.ciphertext + envelope.auth_tag, None
            )
        except InvalidTag as exc:
            raise AuthenticationFailedError(
                "authentication tag mismatch: envelope was modified or the key is wrong"
            ) from exc
