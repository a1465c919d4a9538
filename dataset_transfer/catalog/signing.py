from collections.abc import Generator

import httpx
from botocore.auth import SigV4Auth as BotocoreSigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

_SIGNED_HEADERS = ("Authorization", "X-Amz-Date", "X-Amz-Security-Token", "X-Amz-Content-SHA256")


class SigV4Auth(httpx.Auth):
    """httpx auth hook that signs each request with AWS Signature Version 4."""

    requires_request_body = True

    def __init__(self, credentials: Credentials, region: str, service: str = "execute-api") -> None:
        self._credentials = credentials
        self._region = region
        self._service = service

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        # Signed headers must all be sent, bodiless GETs included.
        request.headers.setdefault("Content-Type", "application/json")
        aws_request = AWSRequest(
            method=request.method,
            url=str(request.url),
            data=request.content,
            headers={"Content-Type": request.headers["Content-Type"]},
        )
        signer = BotocoreSigV4Auth(
            self._credentials.get_frozen_credentials(), self._service, self._region
        )
        signer.add_auth(aws_request)
        for name in _SIGNED_HEADERS:
            value = aws_request.headers.get(name)
            if value is not None:
                request.headers[name] = value
        yield request
