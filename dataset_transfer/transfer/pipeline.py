from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Generic, Protocol, TypeVar

from dataset_transfer.analysis.models import AnalysisResult
from dataset_transfer.catalog.models import DatasetRecord, DownloadAuthorization, Registration
from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import StoredObject
from dataset_transfer.transfer.cancellation import CancellationToken
from dataset_transfer.transfer.exceptions import TransferError
from dataset_transfer.transfer.models import ProcessedPayload, SizeBreakdown, UploadOptions


class UploadState(StrEnum):
    START = "start"
    ANALYZED = "analyzed"
    COMPRESSED = "compressed"
    ENCRYPTED = "encrypted"
    UPLOADED = "uploaded"
    REGISTERED = "registered"
    DONE = "done"
    FAILED = "failed"


class DownloadState(StrEnum):
    START = "start"
    FETCHED = "fetched"
    AUTHORIZED = "authorized"
    DOWNLOADED = "downloaded"
    DECRYPTED = "decrypted"
    DECOMPRESSED = "decompressed"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(slots=True)
class UploadContext:
    file_path: Path
    options: UploadOptions
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    state: UploadState = UploadState.START
    analysis: AnalysisResult | None = None
    data: bytes = b""
    sizes: SizeBreakdown = field(default_factory=SizeBreakdown)
    processed: ProcessedPayload | None = None
    payload: dict[str, Any] | None = None
    stored: StoredObject | None = None
    registration: Registration | None = None
    failure_reason: str = ""

    @property
    def bytes_processed(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class DownloadContext:
    dataset_id: str
    output_path: Path
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    state: DownloadState = DownloadState.START
    record: DatasetRecord | None = None
    authorization: DownloadAuthorization | None = None
    data: bytes = b""
    downloaded_bytes: int = 0
    staged: bool = False
    decrypted: bool = False
    decompressed: bool = False
    failure_reason: str = ""

    @property
    def bytes_processed(self) -> int:
        return len(self.data)


class _Context(Protocol):
    cancellation: CancellationToken
    state: Any
    failure_reason: str

    @property
    def bytes_processed(self) -> int: ...


ContextT = TypeVar("ContextT", UploadContext, DownloadContext)


class PipelineStep(ABC, Generic[ContextT]):
    """One stage of a transfer. `completes` is the state reached on success, if any."""

    name: ClassVar[str]
    completes: ClassVar[StrEnum | None] = None

    @abstractmethod
    def run(self, context: ContextT) -> ContextT:
        raise NotImplementedError


def run_steps(steps: list[PipelineStep[ContextT]], context: ContextT, failed: StrEnum) -> ContextT:
    """Run steps in order, checking cancellation before each one.

    On failure the context moves to `failed`, the exception is annotated with
    the stage and the bytes held at that point, and re-raised unchanged.
    """
    for step in steps:
        try:
            context.cancellation.raise_if_cancelled(step.name)
            context = step.run(context)
        except Exception as exc:
            _record_failure(context, step.name, exc, failed)
            raise
        if step.completes is not None:
            context.state = step.completes
    return context


def _record_failure(context: _Context, stage: str, exc: Exception, failed: StrEnum) -> None:
    bytes_processed = context.bytes_processed
    context.state = failed
    context.failure_reason = f"{stage}: {exc}"
    if isinstance(exc, TransferError):
        if exc.stage is None:
            exc.stage = stage
        if exc.bytes_processed is None:
            exc.bytes_processed = bytes_processed
    else:
        exc.add_note(f"stage={stage} bytes_processed={bytes_processed}")
    Log.error(f"Stage {stage} failed: {exc}", bytes_processed=bytes_processed)
