import boto3

from dataset_transfer.config.settings import Settings


def aws_session(settings: Settings) -> boto3.Session:
    """Build a boto3 session from explicit settings.

    Empty credentials fall back to boto3's default provider chain.
    """
    kwargs: dict[str, str] = {"region_name": settings.aws_region}
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    return boto3.Session(**kwargs)
