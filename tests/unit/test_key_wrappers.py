import base64
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from dataset_transfer.encryption.exceptions import KeyWrapError, KeyWrapUnavailableError
from dataset_transfer.encryption.kms_key_wrapper import KmsKeyWrapper
from dataset_transfer.encryption.local_key_wrapper import LocalKeyWrapper, decode_master_key


def _client_error(code: str, message: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "Encrypt")


class TestKmsKeyWrapper:
    def test_wrap_calls_kms_encrypt(self) -> None:
        client = MagicMock()
        client.encrypt.return_value = {"CiphertextBlob": b"wrapped-blob"}
        wrapper = KmsKeyWrapper(client=client, key_id="alias/datasets")

        assert wrapper.wrap(b"k" * 32) == b"wrapped-blob"
        client.encrypt.assert_called_once_with(KeyId="alias/datasets", Plaintext=b"k" * 32)

    def test_unwrap_calls_kms_decrypt(self) -> None:
        client = MagicMock()
        client.decrypt.return_value = {"Plaintext": b"k" * 32}
        wrapper = KmsKeyWrapper(client=client, key_id="alias/datasets")

        assert wrapper.unwrap(b"wrapped-blob") == b"k" * 32
        client.decrypt.assert_called_once_with(CiphertextBlob=b"wrapped-blob")

    def test_empty_key_id_is_unavailable(self) -> None:
        wrapper = KmsKeyWrapper(client=MagicMock(), key_id="  ")
        assert wrapper.is_available is False
        with pytest.raises(KeyWrapUnavailableError):
            wrapper.wrap(b"k" * 32)

    def test_provider_error_message_is_kept(self) -> None:
        client = MagicMock()
        client.encrypt.side_effect = _client_error("AccessDeniedException", "not authorized")
        wrapper = KmsKeyWrapper(client=client, key_id="alias/datasets")

        with pytest.raises(KeyWrapError, match="not authorized"):
            wrapper.wrap(b"k" * 32)

    def test_decrypt_error_is_key_wrap_error(self) -> None:
        client = MagicMock()
        client.decrypt.side_effect = _client_error("InvalidCiphertextException", "bad blob")
        with pytest.raises(KeyWrapError, match="bad blob"):
            KmsKeyWrapper(client=client, key_id="k").unwrap(b"x")


class TestLocalKeyWrapper:
    def test_round_trip(self) -> None:
        wrapper = LocalKeyWrapper.generate()
        assert wrapper.unwrap(wrapper.wrap(b"d" * 32)) == b"d" * 32

    def test_tampered_blob(self) -> None:
        wrapper = LocalKeyWrapper.generate()
        blob = bytearray(wrapper.wrap(b"d" * 32))
        blob[-1] ^= 0x01
        with pytest.raises(KeyWrapError, match="failed authentication"):
            wrapper.unwrap(bytes(blob))

    def test_short_blob(self) -> None:
        with pytest.raises(KeyWrapError, match="too short"):
            LocalKeyWrapper.generate().unwrap(b"123")

    def test_without_master_key(self) -> None:
        wrapper = LocalKeyWrapper(None)
        assert wrapper.is_available is False
        with pytest.raises(KeyWrapUnavailableError):
            wrapper.wrap(b"d" * 32)

    def test_rejects_wrong_master_key_size(self) -> None:
        with pytest.raises(ValueError, match="32 bytes"):
            LocalKeyWrapper(b"short")


class TestDecodeMasterKey:
    def test_decodes_base64(self) -> None:
        raw = bytes(range(32))
        assert decode_master_key(base64.b64encode(raw).decode()) == raw

    def test_rejects_non_base64(self) -> None:
        with pytest.raises(ValueError, match="not valid base64"):
            decode_master_key("***")

    def test_rejects_wrong_length(self) -> None:
        with pytest.raises(ValueError, match="must be 32 bytes"):
            decode_master_key(base64.b64encode(b"x" * 16).decode())
