import dataclasses
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from dataset_transfer.analysis.analyzer import SchemaAnalyzer
from dataset_transfer.analysis.models import AnalysisResult
from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.models import DataFreshness
from dataset_transfer.catalog.payload import build_dataset_payload, slugify
from dataset_transfer.catalog.registrar import DatasetRegistrar
from dataset_transfer.compression.base import BaseCompressor
from dataset_transfer.compression.codec import validate_level
from dataset_transfer.encryption.envelope import EnvelopeCipher
from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import BaseDownloader, BaseObjectStorage
from dataset_transfer.transfer.cancellation import CancellationToken
from dataset_transfer.transfer.exceptions import (
    CompressionRequiredError,
    EmptySourceError,
    EncryptionUnavailableError,
    TransferError,
)
from dataset_transfer.transfer.models import ProcessedPayload
from dataset_transfer.transfer.pipeline import (
    DownloadContext,
    DownloadState,
    PipelineStep,
    UploadContext,
    UploadState,
)

OBJECT_FILE_NAME = "data.ndjson"


def object_key(dataset_name: str, suffix: str = "") -> str:
    return f"datasets/{slugify(dataset_name)}/{OBJECT_FILE_NAME}{suffix}"


def reduction_percent(before: int, after: int) -> float:
    if before == 0:
        return 0.0
    return (1 - after / before) * 100


# Upload


class ValidateOptionsStep(PipelineStep[UploadContext]):
    name = "validate"

    def __init__(self, cipher: EnvelopeCipher) -> None:
        self._cipher = cipher

    def run(self, context: UploadContext) -> UploadContext:
        options = context.options
        if not options.dataset_name or not options.dataset_name.strip():
            raise TransferError("dataset name is required")
        if not options.encrypt:
            raise EncryptionUnavailableError(
                "encryption is mandatory for dataset uploads and cannot be disabled"
            )
        if not options.compress:
            raise CompressionRequiredError(
                "compression is mandatory for dataset uploads and cannot be disabled"
            )
        if not self._cipher.is_available:
            raise EncryptionUnavailableError(
                "encryption is required but no key-wrapping key is configured"
            )
        validate_level(options.compression_level)

        context.options = dataclasses.replace(
            options,
            category=options.category or "general",
            data_freshness=options.data_freshness or DataFreshness.DAILY,
        )
        return context


class AnalyzeStep(PipelineStep[UploadContext]):
    name = "analyze"
    completes = UploadState.ANALYZED

    def __init__(self, analyzer: SchemaAnalyzer) -> None:
        self._analyzer = analyzer

    def run(self, context: UploadContext) -> UploadContext:
        try:
            context.analysis = self._analyzer.analyze_file(context.file_path)
        except Exception as exc:
            Log.exception(f"Schema analysis failed, continuing without it: {exc}")
            context.analysis = AnalysisResult.empty()
        return context


class LoadSourceStep(PipelineStep[UploadContext]):
    name = "load"

    def run(self, context: UploadContext) -> UploadContext:
        data = Path(context.file_path).read_bytes()
        if not data:
            raise EmptySourceError(
                f"file is empty: {context.file_path} (no data to upload)"
            )
        context.data = data
        context.sizes.original_size_bytes = len(data)
        Log.info(f"Loaded {len(data)} bytes from {context.file_path}")
        return context


class CompressStep(PipelineStep[UploadContext]):
    name = "compress"
    completes = UploadState.COMPRESSED

    def __init__(self, compressor: BaseCompressor) -> None:
        self._compressor = compressor

    def run(self, context: UploadContext) -> UploadContext:
        before = len(context.data)
        context.data = self._compressor.compress(
            context.data, context.options.compression_level
        )
        context.sizes.compressed_size_bytes = len(context.data)
        context.sizes.compression_enabled = True
        Log.info(
            f"Compressed: {before} -> {len(context.data)} bytes "
            f"({reduction_percent(before, len(context.data)):.1f}% reduction)"
        )
        return context


class EncryptStep(PipelineStep[UploadContext]):
    name = "encrypt"
    completes = UploadState.ENCRYPTED

    def __init__(self, cipher: EnvelopeCipher) -> None:
        self._cipher = cipher

    def run(self, context: UploadContext) -> UploadContext:
        context.data = self._cipher.encrypt(context.data)
        context.sizes.encrypted_size_bytes = len(context.data)
        context.sizes.encryption_enabled = True
        context.processed = ProcessedPayload(
            data=context.data,
            original_size=context.sizes.original_size_bytes,
            sizes=context.sizes,
        )
        Log.info(f"Encrypted: {len(context.data)} bytes")
        return context


class BuildPayloadStep(PipelineStep[UploadContext]):
    name = "build_payload"

    def __init__(self, producer_id: str, bucket: str, suffix: str) -> None:
        self._producer_id = producer_id
        self._bucket = bucket
        self._suffix = suffix

    def run(self, context: UploadContext) -> UploadContext:
        options = context.options
        metadata = {**options.metadata, **context.sizes.as_metadata()}
        context.payload = build_dataset_payload(
            producer_id=self._producer_id,
            bucket=self._bucket,
            name=options.dataset_name,
            description=options.description,
            category=options.category,
            data_freshness=options.data_freshness,
            s3_key=object_key(options.dataset_name, self._suffix),
            size_bytes=context.sizes.final_size_bytes,
            metadata=metadata,
            analysis=context.analysis,
            overrides=options.dataset_overrides,
        )
        return context


class UploadObjectStep(PipelineStep[UploadContext]):
    name = "upload"
    completes = UploadState.UPLOADED

    def __init__(self, storage: BaseObjectStorage, customer_id: str) -> None:
        self._storage = storage
        self._customer_id = customer_id

    def run(self, context: UploadContext) -> UploadContext:
        key = context.payload["s3_key"]
        tags = {
            "CustomerID": self._customer_id,
            "Component": "storage",
            "Purpose": "dataset-storage",
            "DatasetName": context.options.dataset_name,
        }
        context.stored = self._storage.put_object(key, context.data, tags=tags)
        return context


class RegisterStep(PipelineStep[UploadContext]):
    name = "register"
    completes = UploadState.REGISTERED

    def __init__(self, registrar: DatasetRegistrar) -> None:
        self._registrar = registrar

    def run(self, context: UploadContext) -> UploadContext:
        context.registration = self._registrar.register(context.payload)
        return context


# Download


class FetchRecordStep(PipelineStep[DownloadContext]):
    name = "fetch_record"
    completes = DownloadState.FETCHED

    def __init__(self, catalog: BaseCatalogClient) -> None:
        self._catalog = catalog

    def run(self, context: DownloadContext) -> DownloadContext:
        context.record = self._catalog.get_record(context.dataset_id)
        Log.info(
            f"Dataset {context.record.id}: {context.record.size_bytes} bytes, "
            f"compressed={context.record.compression_enabled} "
            f"encrypted={context.record.encryption_enabled}"
        )
        return context


class AuthorizeDownloadStep(PipelineStep[DownloadContext]):
    name = "authorize"
    completes = DownloadState.AUTHORIZED

    def __init__(self, catalog: BaseCatalogClient) -> None:
        self._catalog = catalog

    def run(self, context: DownloadContext) -> DownloadContext:
        context.authorization = self._catalog.get_download_authorization(context.dataset_id)
        return context


class DownloadStep(PipelineStep[DownloadContext]):
    """Fetch the stored object. Large objects are staged on disk while streaming."""

    name = "download"
    completes = DownloadState.DOWNLOADED

    def __init__(self, downloader: BaseDownloader, large_file_threshold_bytes: int) -> None:
        self._downloader = downloader
        self._threshold = large_file_threshold_bytes

    def run(self, context: DownloadContext) -> DownloadContext:
        with self._downloader.stream(context.authorization.download_url) as stream:
            declared = stream.declared_size
            if declared is None:
                declared = context.authorization.file_size
            if declared is not None and declared > self._threshold:
                Log.info(f"Large download ({declared} bytes), staging to a temporary file")
                context.data = self._stage(stream.chunks, context.cancellation)
                context.staged = True
            else:
                context.data = self._collect(stream.chunks, context.cancellation)

        context.downloaded_bytes = len(context.data)
        if declared is not None and declared != context.downloaded_bytes:
            Log.warning(
                f"Downloaded {context.downloaded_bytes} bytes, expected {declared}"
            )
        Log.info(f"Downloaded {context.downloaded_bytes} bytes")
        return context

    def _collect(self, chunks: Iterable[bytes], cancellation: CancellationToken) -> bytes:
        parts = []
        for chunk in chunks:
            cancellation.raise_if_cancelled(self.name)
            parts.append(chunk)
        return b"".join(parts)

    def _stage(self, chunks: Iterable[bytes], cancellation: CancellationToken) -> bytes:
        staged = tempfile.NamedTemporaryFile(prefix="dataset-", suffix=".tmp", delete=False)
        try:
            with staged:
                for chunk in chunks:
                    cancellation.raise_if_cancelled(self.name)
                    staged.write(chunk)
            return Path(staged.name).read_bytes()
        finally:
            os.unlink(staged.name)


class DecryptStep(PipelineStep[DownloadContext]):
    name = "decrypt"
    completes = DownloadState.DECRYPTED

    def __init__(self, cipher: EnvelopeCipher) -> None:
        self._cipher = cipher

    def run(self, context: DownloadContext) -> DownloadContext:
        if not context.record.encryption_enabled:
            return context
        before = len(context.data)
        context.data = self._cipher.decrypt(context.data)
        context.decrypted = True
        Log.info(f"Decrypted: {before} -> {len(context.data)} bytes")
        return context


class DecompressStep(PipelineStep[DownloadContext]):
    name = "decompress"
    completes = DownloadState.DECOMPRESSED

    def __init__(self, compressor: BaseCompressor) -> None:
        self._compressor = compressor

    def run(self, context: DownloadContext) -> DownloadContext:
        if not context.record.compression_enabled:
            return context
        before = len(context.data)
        context.data = self._compressor.decompress(context.data)
        context.decompressed = True
        Log.info(f"Decompressed: {before} -> {len(context.data)} bytes")
        return context


class PersistStep(PipelineStep[DownloadContext]):
    name = "persist"
    completes = DownloadState.PERSISTED

    def run(self, context: DownloadContext) -> DownloadContext:
        output_path = Path(context.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(context.data)
        Log.info(f"Saved {len(context.data)} bytes to {output_path}")
        return context
