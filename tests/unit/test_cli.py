from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from dataset_transfer import cli
from dataset_transfer.analysis.models import AnalysisResult
from dataset_transfer.catalog.models import DatasetRecord, RegistrationOutcome
from dataset_transfer.logging.logger import Log
from dataset_transfer.storage.base import StoredObject
from dataset_transfer.storage.exceptions import StorageError
from dataset_transfer.transfer.exceptions import EmptySourceError, UploadedButUnregisteredError
from dataset_transfer.transfer.models import DownloadResult, SizeBreakdown, UploadResult

runner = CliRunner()
STORED = StoredObject(bucket="bucket", key="datasets/prices/data.ndjson.gz", size_bytes=42)


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Log, "configure", lambda *args, **kwargs: None)


@pytest.fixture()
def source(tmp_path: Path) -> Path:
    path = tmp_path / "prices.ndjson"
    path.write_text('{"a": 1}\n', encoding="utf-8")
    return path


def _patch_producer(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    producer = MagicMock()
    monkeypatch.setattr(cli, "build_producer", lambda settings: producer)
    return producer


def _patch_consumer(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    consumer = MagicMock()
    monkeypatch.setattr(cli, "build_consumer", lambda settings: consumer)
    return consumer


class TestUploadCommand:
    def test_success(self, monkeypatch: pytest.MonkeyPatch, source: Path) -> None:
        producer = _patch_producer(monkeypatch)
        producer.upload.return_value = UploadResult(
            dataset=DatasetRecord(id="cust-1-prices", name="prices", producer_id="cust-1"),
            registration=RegistrationOutcome.CREATED,
            sizes=SizeBreakdown(encrypted_size_bytes=42, encryption_enabled=True),
            analysis=AnalysisResult(record_count=1),
            stored=STORED,
        )

        result = runner.invoke(
            cli.app,
            ["upload", str(source), "--name", "prices", "--level", "9", "--metadata", '{"k": "v"}'],
        )

        assert result.exit_code == 0, result.output
        assert "Dataset cust-1-prices created" in result.output
        options = producer.upload.call_args.args[1]
        assert options.compression_level == 9
        assert options.metadata == {"k": "v"}

    def test_unregistered_upload_exits_2(self, monkeypatch: pytest.MonkeyPatch, source: Path) -> None:
        producer = _patch_producer(monkeypatch)
        producer.upload.side_effect = UploadedButUnregisteredError(
            "catalog down", stored=STORED, dataset_id="cust-1-prices", payload={}
        )

        result = runner.invoke(cli.app, ["upload", str(source), "--name", "prices"])

        assert result.exit_code == 2
        assert "s3://bucket/datasets/prices/data.ndjson.gz" in result.output

    def test_failure_exits_1(self, monkeypatch: pytest.MonkeyPatch, source: Path) -> None:
        producer = _patch_producer(monkeypatch)
        producer.upload.side_effect = EmptySourceError("file is empty")

        result = runner.invoke(cli.app, ["upload", str(source), "--name", "prices"])

        assert result.exit_code == 1
        assert "file is empty" in result.output

    @pytest.mark.parametrize("metadata", ["{broken", "[1, 2]"])
    def test_rejects_bad_metadata(
        self, monkeypatch: pytest.MonkeyPatch, source: Path, metadata: str
    ) -> None:
        producer = _patch_producer(monkeypatch)

        result = runner.invoke(
            cli.app, ["upload", str(source), "--name", "prices", "--metadata", metadata]
        )

        assert result.exit_code == 1
        producer.upload.assert_not_called()

    def test_level_defaults_to_settings(
        self, monkeypatch: pytest.MonkeyPatch, source: Path
    ) -> None:
        monkeypatch.setenv("COMPRESSION_LEVEL", "9")
        producer = _patch_producer(monkeypatch)

        runner.invoke(cli.app, ["upload", str(source), "--name", "prices"])

        options = producer.upload.call_args.args[1]
        assert options.compression_level == 9

    def test_level_flag_overrides_settings(
        self, monkeypatch: pytest.MonkeyPatch, source: Path
    ) -> None:
        monkeypatch.setenv("COMPRESSION_LEVEL", "9")
        producer = _patch_producer(monkeypatch)

        runner.invoke(cli.app, ["upload", str(source), "--name", "prices", "--level", "2"])

        assert producer.upload.call_args.args[1].compression_level == 2

    def test_producer_is_closed_after_failure(
        self, monkeypatch: pytest.MonkeyPatch, source: Path
    ) -> None:
        producer = _patch_producer(monkeypatch)
        producer.upload.side_effect = EmptySourceError("file is empty")

        runner.invoke(cli.app, ["upload", str(source), "--name", "prices"])

        producer.close.assert_called_once()


class TestDownloadCommand:
    def test_success(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        consumer = _patch_consumer(monkeypatch)
        output = tmp_path / "out.ndjson"
        consumer.download.return_value = DownloadResult(
            dataset=DatasetRecord(id="cust-1-prices", name="prices", producer_id="cust-1"),
            output_path=output,
            downloaded_bytes=42,
            output_bytes=100,
            decrypted=True,
            decompressed=True,
            staged=False,
        )

        result = runner.invoke(cli.app, ["download", "cust-1-prices", str(output)])

        assert result.exit_code == 0, result.output
        assert "Saved 100 bytes" in result.output
        consumer.download.assert_called_once_with("cust-1-prices", output)
        consumer.close.assert_called_once()

    def test_failure_exits_1(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        consumer = _patch_consumer(monkeypatch)
        consumer.download.side_effect = StorageError("download failed with status 403")

        result = runner.invoke(cli.app, ["download", "cust-1-prices", str(tmp_path / "o")])

        assert result.exit_code == 1
        assert "403" in result.output
