import boto3

from dataset_transfer.catalog.http_client import HttpCatalogClient
from dataset_transfer.catalog.signing import SigV4Auth
from dataset_transfer.config.aws import aws_session
from dataset_transfer.config.settings import Settings


class CatalogClientFactory:
    """Creates a catalog client that signs requests with the session's AWS credentials."""

    @classmethod
    def create(cls, settings: Settings, session: boto3.Session | None = None) -> HttpCatalogClient:
        session = session or aws_session(settings)
        credentials = session.get_credentials()
        if credentials is None:
            raise ValueError(
                "AWS credentials are required to call the catalog API "
                "(set AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY or configure a profile)"
            )
        return HttpCatalogClient(
            base_url=settings.api_endpoint,
            auth=SigV4Auth(credentials, settings.aws_region),
            timeout_seconds=settings.http_timeout_seconds,
        )
