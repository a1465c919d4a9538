class CompressionError(Exception):
    """Raised when the compressor cannot produce output (bad level, writer failure)."""


class CorruptPayloadError(CompressionError):
    """Raised when compressed input is malformed or truncated."""
