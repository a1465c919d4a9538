class EnvelopeError(Exception):
    """Base exception for envelope encryption failures."""


class CorruptEnvelopeError(EnvelopeError):
    """Raised when a container is truncated or structurally malformed."""


class AuthenticationFailedError(EnvelopeError):
    """Raised when the GCM tag does not verify (tampering or wrong key)."""


class KeyWrapError(EnvelopeError):
    """Raised when the key-wrapping service fails to wrap or unwrap a data key."""


class KeyWrapUnavailableError(KeyWrapError):
    """Raised when no wrapping key is configured."""
