from abc import ABC, abstractmethod


class BaseCompressor(ABC):
    """Contract for reversible byte-stream compressors."""

    file_suffix: str = ""

    @abstractmethod
    def compress(self, data: bytes, level: int) -> bytes:
        """Compress data at the given effort level.

        Args:
            data: Raw bytes, possibly empty.
            level: Effort level from 1 (fastest) to 9 (smallest).

        Returns:
            Compressed bytes that `decompress` restores exactly.

        Raises:
            CompressionError: on an invalid level or writer failure.
        """

    @abstractmethod
    def decompress(self, data: bytes) -> bytes:
        """Restore bytes produced by `compress`.

        Raises:
            CorruptPayloadError: if the input is not a valid stream.
        """
