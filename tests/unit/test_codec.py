import gzip

import pytest

from dataset_transfer.compression.codec import DEFAULT_LEVEL, GzipCodec, validate_level
from dataset_transfer.compression.exceptions import CompressionError, CorruptPayloadError

SAMPLE = b'{"id": 1, "name": "alpha"}\n{"id": 2, "name": "beta"}\n' * 50


class TestGzipCodecRoundTrip:
    @pytest.mark.parametrize("level", range(1, 10))
    def test_restores_input_at_every_level(self, level: int) -> None:
        codec = GzipCodec()
        assert codec.decompress(codec.compress(SAMPLE, level)) == SAMPLE

    def test_empty_input(self) -> None:
        codec = GzipCodec()
        assert codec.decompress(codec.compress(b"", DEFAULT_LEVEL)) == b""

    def test_binary_input(self) -> None:
        codec = GzipCodec()
        data = bytes(range(256)) * 4
        assert codec.decompress(codec.compress(data, 9)) == data

    def test_output_is_standard_gzip(self) -> None:
        compressed = GzipCodec().compress(SAMPLE, 6)
        assert compressed[:2] == b"\x1f\x8b"
        assert gzip.decompress(compressed) == SAMPLE

    def test_output_is_deterministic(self) -> None:
        codec = GzipCodec()
        assert codec.compress(SAMPLE, 6) == codec.compress(SAMPLE, 6)

    def test_repetitive_input_shrinks(self) -> None:
        assert len(GzipCodec().compress(SAMPLE, 9)) < len(SAMPLE)


class TestGzipCodecErrors:
    @pytest.mark.parametrize("level", [0, 10, -1])
    def test_rejects_out_of_range_level(self, level: int) -> None:
        with pytest.raises(CompressionError, match="between 1 and 9"):
            GzipCodec().compress(SAMPLE, level)

    def test_rejects_bool_level(self) -> None:
        with pytest.raises(CompressionError, match="must be an integer"):
            validate_level(True)

    def test_corrupt_input(self) -> None:
        with pytest.raises(CorruptPayloadError):
            GzipCodec().decompress(b"definitely not gzip")

    def test_truncated_input(self) -> None:
        compressed = GzipCodec().compress(SAMPLE, 6)
        with pytest.raises(CorruptPayloadError):
            GzipCodec().decompress(compressed[: len(compressed) // 2])

    def test_corrupt_payload_is_a_compression_error(self) -> None:
        assert issubclass(CorruptPayloadError, CompressionError)


class TestGzipCodecSuffix:
    def test_file_suffix(self) -> None:
        assert GzipCodec.file_suffix == ".gz"
