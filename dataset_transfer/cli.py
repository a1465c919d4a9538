"""Command line interface for uploading and downloading datasets."""

import json
from contextlib import closing
from pathlib import Path
from typing import NoReturn

import typer

from dataset_transfer.catalog.models import DataFreshness
from dataset_transfer.compression.exceptions import CompressionError
from dataset_transfer.config.settings import Settings
from dataset_transfer.encryption.exceptions import EnvelopeError
from dataset_transfer.exceptions import TransportError
from dataset_transfer.logging.logger import Log
from dataset_transfer.transfer.consumer import build_consumer
from dataset_transfer.transfer.exceptions import TransferError, UploadedButUnregisteredError
from dataset_transfer.transfer.models import UploadOptions
from dataset_transfer.transfer.producer import build_producer

app = typer.Typer(
    help="dataset-transfer - package, publish and retrieve NDJSON datasets",
    no_args_is_help=True,
)

EXIT_FAILED = 1
EXIT_UNREGISTERED = 2

EXPECTED_FAILURES = (
    TransferError,
    TransportError,
    EnvelopeError,
    CompressionError,
    ValueError,
    OSError,
)


def die(exc: Exception, *, message: str, code: int = EXIT_FAILED) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code) from exc


@app.callback()
def _init(ctx: typer.Context) -> None:
    """Load settings once per invocation and configure logging."""
    settings = Settings()
    Log.configure(settings.log_level)
    ctx.obj = settings


@app.command()
def upload(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="NDJSON file to upload."),
    name: str = typer.Option(..., "--name", "-n", help="Dataset name."),
    description: str = typer.Option("", "--description", "-d"),
    category: str = typer.Option("general", "--category"),
    freshness: DataFreshness = typer.Option(DataFreshness.DAILY, "--freshness"),
    level: int | None = typer.Option(
        None, "--level", min=1, max=9, help="gzip level, 1-9. Defaults to COMPRESSION_LEVEL."
    ),
    metadata: str = typer.Option("", "--metadata", help="Extra metadata as a JSON object."),
):
    """Analyze, compress, encrypt, upload and register a dataset."""
    settings: Settings = ctx.obj
    try:
        extra = json.loads(metadata) if metadata else {}
    except ValueError as exc:
        die(exc, message=f"--metadata is not valid JSON: {exc}")
    if not isinstance(extra, dict):
        typer.echo("Error: --metadata must be a JSON object", err=True)
        raise typer.Exit(EXIT_FAILED)

    options = UploadOptions(
        dataset_name=name,
        description=description,
        category=category,
        data_freshness=freshness,
        compression_level=level if level is not None else settings.compression_level,
        metadata=extra,
    )
    try:
        with closing(build_producer(settings)) as producer:
            result = producer.upload(file, options)
    except UploadedButUnregisteredError as exc:
        typer.echo(f"Object stored at {exc.stored.uri} (dataset id {exc.dataset_id})", err=True)
        die(exc, message=f"registration failed: {exc}", code=EXIT_UNREGISTERED)
    except EXPECTED_FAILURES as exc:
        die(exc, message=str(exc))

    typer.echo(f"Dataset {result.dataset.id} {result.registration}")
    typer.echo(f"Stored at {result.stored.uri} ({result.sizes.final_size_bytes} bytes)")
    typer.echo(f"Records: {result.analysis.record_count}")


@app.command()
def download(
    ctx: typer.Context,
    dataset_id: str = typer.Argument(..., help="Catalog id of the dataset."),
    output: Path = typer.Argument(..., dir_okay=False, help="Where to write the data."),
):
    """Download, decrypt and decompress a dataset to a local file."""
    settings: Settings = ctx.obj
    try:
        with closing(build_consumer(settings)) as consumer:
            result = consumer.download(dataset_id, output)
    except EXPECTED_FAILURES as exc:
        die(exc, message=str(exc))

    typer.echo(f"Saved {result.output_bytes} bytes to {result.output_path}")
