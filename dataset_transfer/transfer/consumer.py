from pathlib import Path

import boto3

from dataset_transfer.catalog.base import BaseCatalogClient
from dataset_transfer.catalog.factory import CatalogClientFactory
from dataset_transfer.catalog.http_client import HttpCatalogClient
from dataset_transfer.compression.base import BaseCompressor
from dataset_transfer.compression.codec import GzipCodec
from dataset_transfer.config.aws import aws_session
from dataset_transfer.config.settings import Settings
from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.envelope import EnvelopeCipher
from dataset_transfer.encryption.factory import KeyWrapperFactory
from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import BaseDownloader
from dataset_transfer.storage.http_downloader import HttpDownloader
from dataset_transfer.transfer.cancellation import CancellationToken
from dataset_transfer.transfer.models import DownloadResult
from dataset_transfer.transfer.pipeline import (
    DownloadContext,
    DownloadState,
    PipelineStep,
    run_steps,
)
from dataset_transfer.transfer.steps import (
    AuthorizeDownloadStep,
    DecompressStep,
    DecryptStep,
    DownloadStep,
    FetchRecordStep,
    PersistStep,
)


class Consumer:
    """Fetches a dataset and restores the producer's original bytes.

    Pipeline: fetch record -> authorize -> download -> decrypt -> decompress -> persist.
    """

    def __init__(
        self,
        steps: list[PipelineStep[DownloadContext]],
        resources: list[HttpCatalogClient | HttpDownloader] | None = None,
    ) -> None:
        self._steps = steps
        self._resources = resources or []

    def download(
        self,
        dataset_id: str,
        output_path: str | Path,
        cancellation: CancellationToken | None = None,
    ) -> DownloadResult:
        context = DownloadContext(
            dataset_id=dataset_id,
            output_path=Path(output_path),
            cancellation=cancellation or CancellationToken(),
        )
        Log.info(f"Downloading dataset {dataset_id} to {context.output_path}")
        run_steps(self._steps, context, failed=DownloadState.FAILED)
        return DownloadResult(
            dataset=context.record,
            output_path=context.output_path,
            downloaded_bytes=context.downloaded_bytes,
            output_bytes=len(context.data),
            decrypted=context.decrypted,
            decompressed=context.decompressed,
            staged=context.staged,
        )

    def close(self) -> None:
        """Release the HTTP clients this consumer created."""
        for resource in self._resources:
            resource.close()


def build_consumer(
    settings: Settings,
    *,
    key_wrapper: BaseKeyWrapper | None = None,
    catalog: BaseCatalogClient | None = None,
    downloader: BaseDownloader | None = None,
    compressor: BaseCompressor | None = None,
    session: boto3.Session | None = None,
) -> Consumer:
    if session is None and None in (key_wrapper, catalog):
        session = aws_session(settings)
    key_wrapper = key_wrapper or KeyWrapperFactory.create(settings, session)
    resources = []
    if catalog is None:
        catalog = CatalogClientFactory.create(settings, session)
        resources.append(catalog)
    if downloader is None:
        downloader = HttpDownloader(timeout_seconds=settings.http_timeout_seconds)
        resources.append(downloader)
    compressor = compressor or GzipCodec()

    steps: list[PipelineStep[DownloadContext]] = [
        FetchRecordStep(catalog),
        AuthorizeDownloadStep(catalog),
        DownloadStep(downloader, settings.large_file_threshold_bytes),
        DecryptStep(EnvelopeCipher(key_wrapper)),
        DecompressStep(compressor),
        PersistStep(),
    ]
    return Consumer(steps, resources)
