import typing

import httpx
from typing_extensions import override

SESSION_HEADER = "X-SFDC-Session"


class SalesforceAuth(httpx.Auth):
    """
    Stamps the session credential onto outgoing requests.

    The REST API takes the credential as an `Authorization: Bearer` header,
    the asynchronous job API insists on `X-SFDC-Session` instead.
    """

    header: str
    scheme: str | None
    token: str

    def __init__(self, token: str, header: str = "Authorization", scheme: str | None = "Bearer"):
        self.token = token
        self.header = header
        self.scheme = scheme

    @classmethod
    def bearer(cls, token: str) -> "SalesforceAuth":
        return cls(token)

    @classmethod
    def session_header(cls, token: str) -> "SalesforceAuth":
        return cls(token, header=SESSION_HEADER, scheme=None)

    @override
    def auth_flow(
        self, request: httpx.Request
    ) -> typing.Generator[httpx.Request, httpx.Response, None]:
        if self.scheme:
            request.headers[self.header] = f"{self.scheme} {self.token}"
        else:
            request.headers[self.header] = self.token
        yield request
