from abc import ABC, abstractmethod


class BaseKeyWrapper(ABC):
    """Contract for services that protect data keys under a managed master key."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether a wrapping key is configured."""

    @abstractmethod
    def wrap(self, plaintext_key: bytes) -> bytes:
        """Encrypt a data key.

        Returns:
            An opaque blob whose length is chosen by the service.

        Raises:
            KeyWrapUnavailableError: if no wrapping key is configured.
            KeyWrapError: on any service failure.
        """

    @abstractmethod
    def unwrap(self, wrapped_key: bytes) -> bytes:
        """Recover a data key from a blob returned by `wrap`.

        Raises:
            KeyWrapError: on any service failure.
        """
