import json
from collections.abc import Iterator, Mapping
from functools import cached_property
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx
from httpx import Client

from ._models import ReturnType, as_namespace, payload_field
from .auth import SalesforceAuth, SalesforceToken, password_login
from .auth.login_oauth import DEFAULT_LOGIN_URL
from .auth.types import SalesforceTokenGenerator
from .exceptions import (
    SalesforceAuthenticationFailed,
    SalesforceGeneralError,
    SalesforceInvalidArgument,
    SalesforceNotAuthenticated,
    SalesforceTransportError,
    classify_response,
)
from .logger import getLogger
from .metrics import ApiUsage, usage_from_response
from .session import DEFAULT_API_VERSION, Session

if TYPE_CHECKING:
    from .resources.bulk import BulkResource
    from .resources.sobjects import SObjectResource

LOGGER = getLogger("client")

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=2.0)
JSON_CONTENT_TYPE = "application/json"

RequestParams = Mapping[str, Any] | list | str | bytes | None

FORM_SCALARS = (str, bytes, int, float)


def encode_body(params: RequestParams, content_type: str) -> str | bytes:
    """JSON for JSON requests, form-urlencoded for everything else.
    Pre-encoded payloads (CSV, XML, ...) are sent as they are."""
    if isinstance(params, (str, bytes)):
        return params
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == JSON_CONTENT_TYPE:
        return json.dumps(params)
    return urlencode(_flat_form_params(params), doseq=True)


def _flat_form_params(params: RequestParams) -> Mapping[str, Any]:
    # form bodies carry scalars or lists of scalars only
    if isinstance(params, Mapping):
        for name, value in params.items():
            values = value if isinstance(value, (list, tuple)) else [value]
            if all(isinstance(item, FORM_SCALARS) for item in values):
                continue
            raise SalesforceInvalidArgument(
                f"Form parameter {name!r} must be a scalar or a list of scalars, "
                f"got {type(value).__name__}"
            )
        return params
    raise SalesforceInvalidArgument(
        f"Form parameters must be a mapping, got {type(params).__name__}"
    )


class SalesforceClient(Client):
    """
    Client for the Salesforce REST and asynchronous job APIs.

    Every call goes through `execute`, which builds the request, sends it,
    classifies the response and decodes the body according to
    `return_type`. Authenticated calls require a prior `login`.
    """

    DEFAULT_HEADERS = {"Content-Type": JSON_CONTENT_TYPE}

    session: Session
    login_url: str
    client_id: str | None
    client_secret: str | None
    return_type: ReturnType
    last_response: str | None = None
    api_usage: ApiUsage | None = None

    def __init__(
        self,
        login_url: str = DEFAULT_LOGIN_URL,
        api_version: str | int | float = DEFAULT_API_VERSION,
        client_id: str | None = None,
        client_secret: str | None = None,
        return_type: ReturnType | str = ReturnType.DICT,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        **kwargs,
    ):
        super().__init__(timeout=timeout, **kwargs)
        self.login_url = str(login_url).rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.return_type = ReturnType(return_type)
        self.session = Session.for_instance(self.login_url, api_version)

    def __str__(self):
        state = "logged in" if self.session.is_authenticated else "not logged in"
        return f"{type(self).__name__} -> {self.session.base_url} ({state})"

    # session

    def login(self, username: str, password: str, security_token: str = ""):
        """
        Log in with the OAuth2 username-password flow.

        Returns the decoded token response (issued_at, scope, ...).
        The current session is only replaced once the exchange succeeded.
        """
        login_flow = password_login(
            username,
            password,
            security_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            login_url=self.login_url,
        )()
        token = self._run_login_flow(login_flow)
        self.session = Session.for_instance(
            str(token.instance), self.session.api_version, token.token
        )
        LOGGER.info(
            "Logged into %s using API version %s",
            self.session.base_url,
            self.session.api_version,
        )
        return self._decode_payload(token.payload or {})

    def _run_login_flow(self, login_flow: SalesforceTokenGenerator) -> SalesforceToken:
        try:
            login_request = next(login_flow)
            while True:
                login_request.extensions.setdefault("timeout", self.timeout.as_dict())
                try:
                    login_response = self.send(login_request)
                except httpx.TransportError as e:
                    raise SalesforceAuthenticationFailed(
                        "TRANSPORT_ERROR", str(e) or type(e).__name__
                    ) from e
                self.last_response = login_response.text
                login_request = login_flow.send(login_response)
        except StopIteration as login_result:
            return login_result.value

    # dispatch

    def build_dispatch_request(
        self,
        url: str | httpx.URL,
        params: RequestParams = None,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Request:
        method = method.upper()
        request_headers = httpx.Headers(self.DEFAULT_HEADERS)
        if headers:
            request_headers.update(headers)

        if method == "GET":
            return self.build_request(
                method, url, params=params or None, headers=request_headers
            )

        content = None
        if params:
            content = encode_body(params, request_headers.get("Content-Type", ""))
        return self.build_request(method, url, content=content, headers=request_headers)

    def execute(
        self,
        url: str | httpx.URL,
        params: RequestParams = None,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        auth: httpx.Auth | None = None,
        resource_name: str = "",
    ) -> Any:
        """Send one request and return its decoded, classified response"""
        request = self.build_dispatch_request(url, params, method, headers)
        LOGGER.debug("%s %s", request.method, request.url)
        try:
            response = self.send(request, auth=auth)
        except httpx.TransportError as e:
            raise SalesforceTransportError(
                str(e) or type(e).__name__, request.method, str(request.url)
            ) from e

        self.last_response = response.text
        if (api_usage := usage_from_response(response)) is not None:
            self.api_usage = api_usage
        LOGGER.debug("%s %s -> %d", request.method, request.url, response.status_code)

        body = classify_response(response, resource_name)
        return self._decode(response, body)

    def _decode(self, response: httpx.Response, body: str) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if response.content and content_type and "json" not in content_type.lower():
            # CSV / XML bodies are handed back as text
            return body
        try:
            if self.return_type is ReturnType.OBJECT:
                return json.loads(body, object_hook=lambda obj: SimpleNamespace(**obj))
            return json.loads(body)
        except ValueError as e:
            raise SalesforceGeneralError(
                f"Could not decode response body: {e}",
                response.status_code,
                body,
                method=response.request.method,
                url_path=response.request.url.path,
            ) from e

    def _decode_payload(self, payload: Mapping[str, Any]) -> Any:
        if self.return_type is ReturnType.OBJECT:
            return as_namespace(payload)
        return dict(payload)

    def _require_session(self) -> Session:
        session = self.session
        if not session.is_authenticated:
            raise SalesforceNotAuthenticated()
        return session

    def request_authenticated(
        self,
        path: str,
        params: RequestParams = None,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        resource_name: str = "",
    ) -> Any:
        """Authenticated call relative to the versioned REST data URL"""
        session = self._require_session()
        return self.execute(
            session.rest_url + path,
            params,
            method,
            headers,
            auth=SalesforceAuth.bearer(session.credential),  # type: ignore[arg-type]
            resource_name=resource_name,
        )

    def request_batch(
        self,
        path: str,
        params: RequestParams = None,
        method: str = "POST",
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Authenticated call relative to the asynchronous job URL"""
        session = self._require_session()
        return self.execute(
            session.batch_url + path,
            params,
            method,
            headers,
            auth=SalesforceAuth.session_header(session.credential),  # type: ignore[arg-type]
            resource_name="Job",
        )

    def request_base(
        self,
        path: str,
        params: RequestParams = None,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Authenticated call relative to the instance URL"""
        session = self._require_session()
        return self.execute(
            session.base_url + path,
            params,
            method,
            headers,
            auth=SalesforceAuth.bearer(session.credential),  # type: ignore[arg-type]
        )

    # org level resources

    def get_api_versions(self):
        """API versions available on the instance. Does not require a login."""
        return self.execute(self.session.base_url + "/services/data")

    def get_org_limits(self):
        return self.request_authenticated("limits/")

    def get_available_resources(self):
        return self.request_authenticated("")

    # query

    def search(self, query: str, include_deleted: bool = False, explain: bool = False):
        """
        Run a SOQL query. `include_deleted` also searches deleted and merged
        records; `explain` returns the query plan instead of records.
        """
        params = {"explain": query} if explain else {"q": query}
        path = "queryAll/" if include_deleted else "query/"
        return self.request_authenticated(path, params, "GET")

    def get_query_from_url(self, next_records_url: str):
        return self.request_base(next_records_url)

    def query_records(self, query: str, include_deleted: bool = False) -> Iterator[Any]:
        """Every record matching `query`, following `nextRecordsUrl` pages"""
        result = self.search(query, include_deleted)
        while True:
            yield from payload_field(result, "records", [])
            next_records_url = payload_field(result, "nextRecordsUrl")
            if payload_field(result, "done", True) or not next_records_url:
                return
            result = self.get_query_from_url(next_records_url)

    # resources

    @cached_property
    def bulk(self) -> "BulkResource":
        from .resources.bulk import BulkResource

        return BulkResource(self)

    @cached_property
    def sobjects(self) -> "SObjectResource":
        from .resources.sobjects import SObjectResource

        return SObjectResource(self)
