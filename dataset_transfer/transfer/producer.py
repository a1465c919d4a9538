from pathlib import Path

import boto3

from dataset_transfer.analysis.analyzer import SchemaAnalyzer
from dataset_transfer.analysis.models import AnalysisOptions
from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.factory import CatalogClientFactory
from dataset_transfer.catalog.http_client import HttpCatalogClient
from dataset_transfer.catalog.models import Registration
from dataset_transfer.catalog.registrar import DatasetRegistrar
from dataset_transfer.compression.base import BaseCompressor
from dataset_transfer.compression.codec import GzipCodec
from dataset_transfer.config.aws import aws_session
from dataset_transfer.config.settings import Settings
from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.envelope import EnvelopeCipher
from dataset_transfer.encryption.factory import KeyWrapperFactory
from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import BaseObjectStorage
from dataset_transfer.storage.factory import ObjectStorageFactory
from dataset_transfer.transfer.cancellation import CancellationToken
from dataset_transfer.transfer.exceptions import UploadedButUnregisteredError
from dataset_transfer.transfer.models import UploadOptions, UploadResult
from dataset_transfer.transfer.pipeline import (
    PipelineStep,
    UploadContext,
    UploadState,
    run_steps,
)
from dataset_transfer.transfer.steps import (
    AnalyzeStep,
    BuildPayloadStep,
    CompressStep,
    EncryptStep,
    LoadSourceStep,
    RegisterStep,
    UploadObjectStep,
    ValidateOptionsStep,
)


class Producer:
    """Packages an NDJSON file and publishes it to storage and the catalog.

    Pipeline: validate -> analyze -> load -> compress -> encrypt ->
    build payload -> upload -> register.
    """

    def __init__(
        self,
        steps: list[PipelineStep[UploadContext]],
        registrar: DatasetRegistrar,
        resources: list[HttpCatalogClient] | None = None,
    ) -> None:
        self._steps = steps
        self._registrar = registrar
        self._resources = resources or []

    def upload(
        self,
        file_path: str | Path,
        options: UploadOptions,
        cancellation: CancellationToken | None = None,
    ) -> UploadResult:
        """Upload one dataset file.

        Raises:
            UploadedButUnregisteredError: the object is in storage but the
                catalog record was not written; retry with `retry_registration`.
            TransferError: on validation, cancellation or empty input.
        """
        context = UploadContext(
            file_path=Path(file_path),
            options=options,
            cancellation=cancellation or CancellationToken(),
        )
        Log.info(f"Uploading dataset '{options.dataset_name}' from {context.file_path}")

        try:
            run_steps(self._steps, context, failed=UploadState.FAILED)
        except Exception as exc:
            if context.stored is None or context.registration is not None:
                raise
            raise UploadedButUnregisteredError(
                f"uploaded to {context.stored.uri} but catalog registration failed: {exc}",
                stored=context.stored,
                dataset_id=context.payload["_id"],
                payload=context.payload,
                stage=RegisterStep.name,
                bytes_processed=context.bytes_processed,
            ) from exc

        context.state = UploadState.DONE
        Log.info(
            f"Upload complete: {context.registration.record.id} "
            f"({context.registration.outcome}) at {context.stored.uri}"
        )
        return UploadResult(
            dataset=context.registration.record,
            registration=context.registration.outcome,
            sizes=context.sizes,
            analysis=context.analysis,
            stored=context.stored,
        )

    def retry_registration(self, error: UploadedButUnregisteredError) -> Registration:
        """Register an already-stored object without uploading it again."""
        Log.info(f"Retrying registration of {error.dataset_id} for {error.stored.uri}")
        return self._registrar.register(error.payload)

    def close(self) -> None:
        """Release the HTTP clients this producer created."""
        for resource in self._resources:
            resource.close()


def build_producer(
    settings: Settings,
    *,
    key_wrapper: BaseKeyWrapper | None = None,
    storage: BaseObjectStorage | None = None,
    catalog: BaseCatalogClient | None = None,
    analyzer: SchemaAnalyzer | None = None,
    compressor: BaseCompressor | None = None,
    session: boto3.Session | None = None,
) -> Producer:
    """Wire a Producer from settings. Passed-in collaborators take precedence."""
    if not settings.customer_id:
        raise ValueError("CUSTOMER_ID is required for uploads")

    if session is None and None in (key_wrapper, storage, catalog):
        session = aws_session(settings)
    key_wrapper = key_wrapper or KeyWrapperFactory.create(settings, session)
    storage = storage or ObjectStorageFactory.create(settings, session)
    resources = []
    if catalog is None:
        catalog = CatalogClientFactory.create(settings, session)
        resources.append(catalog)
    analyzer = analyzer or SchemaAnalyzer(
        AnalysisOptions(sample_limit=settings.schema_sample_limit)
    )
    compressor = compressor or GzipCodec()

    cipher = EnvelopeCipher(key_wrapper)
    registrar = DatasetRegistrar(catalog)
    steps: list[PipelineStep[UploadContext]] = [
        ValidateOptionsStep(cipher),
        AnalyzeStep(analyzer),
        LoadSourceStep(),
        CompressStep(compressor),
        EncryptStep(cipher),
        BuildPayloadStep(settings.customer_id, storage.bucket, compressor.file_suffix),
        UploadObjectStep(storage, settings.customer_id),
        RegisterStep(registrar),
    ]
    return Producer(steps, registrar, resources)
