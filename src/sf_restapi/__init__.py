from .client import SalesforceClient
from ._models import ReturnType
from .auth import SalesforceToken, SalesforceAuth, password_login
from .data.bulk import BatchInfo, BatchResult, Job
from .session import Session
from .exceptions import (
    SalesforceError,
    SalesforceApiError,
    SalesforceAuthenticationFailed,
    SalesforceInvalidArgument,
    SalesforceInvalidReference,
    SalesforceNotAuthenticated,
    SalesforceStateTransitionError,
    SalesforceTransportError,
)

__all__ = [
    "SalesforceClient",
    "ReturnType",
    "SalesforceAuth",
    "SalesforceToken",
    "password_login",
    "Session",
    "Job",
    "BatchInfo",
    "BatchResult",
    "SalesforceError",
    "SalesforceApiError",
    "SalesforceAuthenticationFailed",
    "SalesforceInvalidArgument",
    "SalesforceInvalidReference",
    "SalesforceNotAuthenticated",
    "SalesforceStateTransitionError",
    "SalesforceTransportError",
]
