from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import SalesforceClient


class ApiResource:
    """A group of API operations sharing the dispatch of one client"""

    client: "SalesforceClient"

    def __init__(self, client: "SalesforceClient"):
        self.client = client
