import gzip
import zlib

from dataset_transfer.compression.base import BaseCompressor
from dataset_transfer.compression.exceptions import CompressionError, CorruptPayloadError

MIN_LEVEL = 1
MAX_LEVEL = 9
DEFAULT_LEVEL = 6


def validate_level(level: int) -> int:
    """Return level unchanged if it is an int in 1..9, else raise CompressionError."""
    if isinstance(level, bool) or not isinstance(level, int):
        raise CompressionError(f"compression level must be an integer, got {level!r}")
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise CompressionError(
            f"compression level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}"
        )
    return level


class GzipCodec(BaseCompressor):
    """gzip (RFC 1952) codec. Output is readable by any standard gunzip."""

    file_suffix = ".gz"

    def compress(self, data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
        validate_level(level)
        try:
            return gzip.compress(data, compresslevel=level, mtime=0)
        except (zlib.error, OSError, ValueError) as exc:
            raise CompressionError(f"gzip compression failed: {exc}") from exc

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as exc:
            raise CorruptPayloadError(f"gzip payload is corrupt: {exc}") from exc
