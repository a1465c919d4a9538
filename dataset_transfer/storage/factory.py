import boto3

from dataset_transfer.config.aws import aws_session
from dataset_transfer.config.settings import Settings
from dataset_transfer.storage.s3_storage import S3ObjectStorage


class ObjectStorageFactory:
    """Creates the S3-backed object store for the configured bucket."""

    @classmethod
    def create(cls, settings: Settings, session: boto3.Session | None = None) -> S3ObjectStorage:
        if not settings.bucket_name:
            raise ValueError("BUCKET_NAME is required for uploads")
        session = session or aws_session(settings)
        return S3ObjectStorage(
            client=session.client("s3"),
            bucket=settings.bucket_name,
            presign_expiry_seconds=settings.presign_expiry_seconds,
        )
