import typing
import httpx


class SalesforceToken(typing.NamedTuple):
    instance: httpx.URL
    token: str
    payload: dict[str, typing.Any] | None = None


SalesforceTokenGenerator = typing.Generator[httpx.Request, httpx.Response | None, SalesforceToken]

SalesforceLogin = typing.Callable[
    [], SalesforceTokenGenerator
]

__all__ = ["SalesforceToken", "SalesforceLogin", "SalesforceTokenGenerator"]
