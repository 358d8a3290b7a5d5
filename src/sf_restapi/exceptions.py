"""Exceptions raised by sf_restapi, and the classifier that maps
raw HTTP responses onto them.

Every failure surfaces as a subclass of `SalesforceError`; nothing is
retried or downgraded to a log line.
"""

import json

import httpx

NOT_MODIFIED_PAYLOAD = {
    "message": "The requested object has not changed since the specified time"
}
EMPTY_SUCCESS_PAYLOAD = {"success": True}

SUCCESS_STATUS_CODES = frozenset({200, 201, 204, 300})
NOT_MODIFIED_STATUS_CODE = 304


class SalesforceError(Exception):
    """Base class for every error raised by this package"""


class SalesforceTransportError(SalesforceError):
    """The HTTP exchange itself failed (connect, TLS, timeout, ...)"""

    def __init__(self, message: str, method: str = "", url: str = ""):
        super().__init__(message)
        self.message = message
        self.method = method
        self.url = url

    def __str__(self):
        if self.url:
            return f"{self.method} {self.url} failed: {self.message}"
        return self.message


class SalesforceAuthenticationFailed(SalesforceError):
    """The password grant exchange was rejected or returned unusable data"""

    def __init__(self, code: str | None, message: str | None):
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self):
        return f"{self.code}: {self.message}"


class AuthMissingResponse(SalesforceAuthenticationFailed):
    def __init__(self, message: str = "No response received"):
        super().__init__("NO_RESPONSE", message)

    def __str__(self):
        return str(self.message)


class SalesforceNotAuthenticated(SalesforceError):
    def __init__(self, message: str = "You have not logged in yet."):
        super().__init__(message)


class SalesforceInvalidArgument(SalesforceError, ValueError):
    pass


class SalesforceInvalidReference(SalesforceError, ValueError):
    pass


class SalesforceStateTransitionError(SalesforceError):
    """A job state change came back in a state other than the one requested"""

    def __init__(self, job_id: str, expected: str, actual: str | None):
        super().__init__(job_id, expected, actual)
        self.job_id = job_id
        self.expected = expected
        self.actual = actual

    def __str__(self):
        return (
            f"Job {self.job_id} could not be moved to state {self.expected} "
            f"(platform reported {self.actual})"
        )


class SalesforceApiError(SalesforceError):
    """The platform rejected a request"""

    message = "Error Code {status_code}. Response content: {description}"

    def __init__(
        self,
        description: str,
        status_code: int,
        raw_body: str,
        method: str = "",
        url_path: str = "",
        resource_name: str = "",
    ):
        super().__init__(description)
        self.description = description
        self.status_code = status_code
        self.raw_body = raw_body
        self.method = method
        self.url_path = url_path
        self.resource_name = resource_name

    def __str__(self):
        return self.message.format(
            status_code=self.status_code,
            description=self.description,
            url_path=self.url_path,
            resource_name=self.resource_name or "",
            method=self.method,
        )

    def __repr__(self):
        return f"{type(self).__name__}({str(self)!r})"


class SalesforceMalformedRequest(SalesforceApiError):
    message = "Malformed request {url_path}. Response content: {description}"


class SalesforceExpiredSession(SalesforceApiError):
    message = "Expired session for {url_path}. Response content: {description}"


class SalesforceRefusedRequest(SalesforceApiError):
    message = "Request refused for {url_path}. Response content: {description}"


class SalesforceResourceNotFound(SalesforceApiError):
    message = (
        "Resource {resource_name} Not Found ({status_code} {url_path}). "
        "Response content: {description}"
    )


class SalesforceMethodNotAllowedForResource(SalesforceApiError):
    message = "HTTP Method {method} not allowed for {url_path}. Response content: {description}"


class SalesforceApiVersionIncompatible(SalesforceApiError):
    message = "Conflicting request for {url_path}. Response content: {description}"


class SalesforceResourceRemoved(SalesforceApiError):
    message = "Resource {url_path} has been removed. Response content: {description}"


class SalesforceInvalidHeaderPreconditions(SalesforceApiError):
    message = "Header preconditions not met for {url_path}. Response content: {description}"


class SalesforceUriLimitExceeded(SalesforceApiError):
    message = "URI length limit exceeded for {url_path}. Response content: {description}"


class SalesforceUnsupportedFormat(SalesforceApiError):
    message = "Unsupported content format for {url_path}. Response content: {description}"


class SalesforceEdgeRoutingUnavailable(SalesforceApiError):
    message = "Edge routing unavailable for {url_path}. Response content: {description}"


class SalesforceMissingConditionalHeader(SalesforceApiError):
    message = "Missing conditional header for {url_path}. Response content: {description}"


class SalesforceHeaderLimitExceeded(SalesforceApiError):
    message = "Header limit exceeded for {url_path}. Response content: {description}"


class SalesforceServerError(SalesforceApiError):
    message = "Internal server error ({status_code} {url_path}). Response content: {description}"


class SalesforceEdgeCommFailure(SalesforceApiError):
    message = "Edge communication failure for {url_path}. Response content: {description}"


class SalesforceServerUnavailable(SalesforceApiError):
    message = "Server unavailable ({status_code} {url_path}). Response content: {description}"


class SalesforceGeneralError(SalesforceApiError):
    def __str__(self):
        url_path = self.url_path
        if len(url_path) > 255:
            url_path = url_path[:255] + "..."
        return (
            f"Error Code {self.status_code} on {self.method.upper()} {url_path}. "
            f"Response content: {self.description}"
        )


_STATUS_EXCEPTIONS: dict[int, type[SalesforceApiError]] = {
    400: SalesforceMalformedRequest,
    401: SalesforceExpiredSession,
    403: SalesforceRefusedRequest,
    404: SalesforceResourceNotFound,
    405: SalesforceMethodNotAllowedForResource,
    409: SalesforceApiVersionIncompatible,
    410: SalesforceResourceRemoved,
    412: SalesforceInvalidHeaderPreconditions,
    414: SalesforceUriLimitExceeded,
    415: SalesforceUnsupportedFormat,
    420: SalesforceEdgeRoutingUnavailable,
    428: SalesforceMissingConditionalHeader,
    431: SalesforceHeaderLimitExceeded,
    500: SalesforceServerError,
    502: SalesforceEdgeCommFailure,
    503: SalesforceServerUnavailable,
}


def error_description(raw_body: str) -> str:
    """
    Pull a human readable description out of an error body.

    Understands the three shapes the platform uses:
    * OAuth: {"error": ..., "error_description": ...}
    * REST: [{"message": ..., "errorCode": ...}, ...]
    * Async API: {"exceptionCode": ..., "exceptionMessage": ...}
    Anything else is returned verbatim.
    """
    try:
        parsed = json.loads(raw_body)
    except ValueError:
        return raw_body

    if isinstance(parsed, dict):
        for key in ("error_description", "error", "exceptionMessage", "message"):
            if parsed.get(key):
                return str(parsed[key])
    elif isinstance(parsed, list) and parsed and isinstance(parsed[0], dict):
        if parsed[0].get("message"):
            return str(parsed[0]["message"])
    return raw_body


def _request_info(response: httpx.Response) -> tuple[str, str]:
    try:
        request = response.request
    except RuntimeError:
        # responses built by hand carry no request
        return "", ""
    return request.method, request.url.path


def classify_response(response: httpx.Response, resource_name: str = "") -> str:
    """
    Decide whether a completed exchange succeeded.

    Returns the body text to decode on success, synthesizing a JSON payload
    for bodiless "not modified" and success responses. Raises the
    status-specific `SalesforceApiError` subclass otherwise.
    """
    raw_body = response.text
    status_code = response.status_code

    if status_code == NOT_MODIFIED_STATUS_CODE:
        return raw_body or json.dumps(NOT_MODIFIED_PAYLOAD)

    if status_code in SUCCESS_STATUS_CODES:
        return raw_body or json.dumps(EMPTY_SUCCESS_PAYLOAD)

    if raw_body:
        description = error_description(raw_body)
    else:
        description = f"HTTP {status_code} {response.reason_phrase}".rstrip()

    method, url_path = _request_info(response)
    exc_type = _STATUS_EXCEPTIONS.get(status_code, SalesforceGeneralError)
    raise exc_type(
        description,
        status_code,
        raw_body,
        method=method,
        url_path=url_path,
        resource_name=resource_name,
    )
