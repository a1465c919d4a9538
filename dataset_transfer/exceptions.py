class TransportError(Exception):
    """Base exception for failures reported by an external collaborator.

    Raised by the storage, download and catalog adapters. The core never
    retries these; retry policy belongs to the caller or the transport.
    """
