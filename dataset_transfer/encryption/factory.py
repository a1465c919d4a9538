from typing import ClassVar

import boto3

from dataset_transfer.config.aws import aws_session
from dataset_transfer.config.settings import Settings
from dataset_transfer.encryption.base import BaseKeyWrapper
from dataset_transfer.encryption.kms_key_wrapper import KmsKeyWrapper
from dataset_transfer.encryption.local_key_wrapper import LocalKeyWrapper, decode_master_key


class KeyWrapperFactory:
    """Creates the configured key-wrapping adapter."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("kms", "local")

    @classmethod
    def create(cls, settings: Settings, session: boto3.Session | None = None) -> BaseKeyWrapper:
        provider = settings.key_wrapper_provider.lower()
        if provider == "kms":
            session = session or aws_session(settings)
            return KmsKeyWrapper(client=session.client("kms"), key_id=settings.kms_key_id)
        if provider == "local":
            master_key = (
                decode_master_key(settings.local_master_key)
                if settings.local_master_key
                else None
            )
            return LocalKeyWrapper(master_key)
        raise ValueError(
            f"Unknown key wrapper provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
