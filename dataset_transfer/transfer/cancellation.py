import threading
import time
from collections.abc import Callable

from dataset_transfer.transfer.exceptions import TransferCancelledError


class CancellationToken:
    """Cooperative cancellation with an optional monotonic deadline.

    `cancel()` may be called from any thread; the pipeline polls the token
    between stages and between download chunks.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout_seconds if timeout_seconds is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.deadline_exceeded

    def raise_if_cancelled(self, stage: str) -> None:
        if self._event.is_set():
            raise TransferCancelledError(f"transfer cancelled before {stage}", stage=stage)
        if self.deadline_exceeded:
            raise TransferCancelledError(f"deadline exceeded before {stage}", stage=stage)
