from .httpx import SalesforceAuth
from .types import SalesforceLogin, SalesforceToken
from .login_oauth import password_login, token_login


__all__ = [
    "SalesforceAuth",
    "SalesforceLogin",
    "SalesforceToken",
    "password_login",
    "token_login",
]
