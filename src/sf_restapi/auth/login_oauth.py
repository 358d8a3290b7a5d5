"""OAuth 2.0 login flows.

Each flow is a generator: it yields the `httpx.Request` to send, is sent
back the `httpx.Response`, and returns a `SalesforceToken`. Whoever drives
the generator owns the transport.
"""

from json import JSONDecodeError
from typing import Any

import httpx

from ..exceptions import AuthMissingResponse, SalesforceAuthenticationFailed
from ..logger import getLogger
from .types import SalesforceLogin, SalesforceToken, SalesforceTokenGenerator

LOGGER = getLogger("auth")

DEFAULT_LOGIN_URL = "https://login.salesforce.com"
TOKEN_PATH = "/services/oauth2/token"


def token_url(login_url: str | httpx.URL) -> httpx.URL:
    return httpx.URL(str(login_url).rstrip("/") + TOKEN_PATH)


def token_login(
    login_url: str | httpx.URL,
    token_data: dict[str, Any],
) -> SalesforceTokenGenerator:
    """Post `token_data` to the token endpoint and parse the grant."""
    response = yield httpx.Request(
        "POST",
        token_url(login_url),
        data=token_data,
        headers={"Accept": "application/json"},
    )
    if response is None:
        raise AuthMissingResponse("No response received")

    try:
        json_response = response.json()
    except JSONDecodeError as e:
        raise SalesforceAuthenticationFailed(
            str(response.status_code), response.text
        ) from e

    if not 200 <= response.status_code < 300:
        if isinstance(json_response, dict):
            raise SalesforceAuthenticationFailed(
                json_response.get("error"), json_response.get("error_description")
            )
        raise SalesforceAuthenticationFailed(str(response.status_code), response.text)

    if not isinstance(json_response, dict):
        raise SalesforceAuthenticationFailed(
            "INVALID_RESPONSE", "Login response is not a JSON object"
        )
    try:
        access_token = json_response["access_token"]
        instance_url = json_response["instance_url"]
    except KeyError as e:
        raise SalesforceAuthenticationFailed(
            "INVALID_RESPONSE", f"Login response is missing '{e.args[0]}'"
        ) from e

    return SalesforceToken(httpx.URL(instance_url), access_token, json_response)


def password_login(
    username: str,
    password: str,
    security_token: str = "",
    client_id: str | None = None,
    client_secret: str | None = None,
    login_url: str | httpx.URL = DEFAULT_LOGIN_URL,
) -> SalesforceLogin:
    """
    Username-password grant. The security token, when the org requires
    one, is appended to the password.
    """

    def _password_login() -> SalesforceTokenGenerator:
        LOGGER.info("Logging in to %s as %s", login_url, username)
        token_data = {
            "grant_type": "password",
            "client_id": client_id or "",
            "client_secret": client_secret or "",
            "username": username,
            "password": password + (security_token or ""),
        }
        return (yield from token_login(login_url, token_data))

    return _password_login
