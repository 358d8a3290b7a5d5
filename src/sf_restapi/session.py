from typing import NamedTuple

from .exceptions import SalesforceInvalidArgument

DEFAULT_API_VERSION = "63.0"

DATA_PATH = "/services/data/v{version}/"
ASYNC_JOB_PATH = "/services/async/{version}/job"


def format_api_version(api_version: str | int | float) -> str:
    """Normalize 63, 63.0, "63" and "v63.0" to "63.0"."""
    if isinstance(api_version, str):
        api_version = api_version.strip().lstrip("vV")
    try:
        return f"{float(api_version):.1f}"
    except (TypeError, ValueError) as e:
        raise SalesforceInvalidArgument(
            f"'{api_version}' is not a valid API version"
        ) from e


class Session(NamedTuple):
    """
    Credential and base URLs for one logged-in org.

    Sessions are immutable; a login builds a complete new one and the
    client swaps it in, so readers never see a half-populated session.
    """

    base_url: str
    rest_url: str
    batch_url: str
    api_version: str
    credential: str | None = None

    @classmethod
    def for_instance(
        cls,
        instance_url: str,
        api_version: str | int | float = DEFAULT_API_VERSION,
        credential: str | None = None,
    ) -> "Session":
        base_url = str(instance_url).rstrip("/")
        version = format_api_version(api_version)
        return cls(
            base_url=base_url,
            rest_url=base_url + DATA_PATH.format(version=version),
            batch_url=base_url + ASYNC_JOB_PATH.format(version=version),
            api_version=version,
            credential=credential,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.credential)

    def __repr__(self):
        return (
            f"Session(base_url={self.base_url!r}, api_version={self.api_version!r}, "
            f"authenticated={self.is_authenticated})"
        )
