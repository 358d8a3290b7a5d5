import datetime
from collections.abc import Mapping
from email.utils import format_datetime
from typing import Any

from ..exceptions import SalesforceInvalidArgument
from .base import ApiResource

OBJECT_PATH = "sobjects/"


def http_date(since: datetime.date) -> str:
    """RFC 7231 date for conditional request headers. Naive values are UTC."""
    if not isinstance(since, datetime.datetime):
        since = datetime.datetime.combine(since, datetime.time(), datetime.timezone.utc)
    elif since.tzinfo is None:
        since = since.replace(tzinfo=datetime.timezone.utc)
    return format_datetime(since.astimezone(datetime.timezone.utc), usegmt=True)


class SObjectResource(ApiResource):
    """
    Record and metadata operations of the sObject REST resources.
    https://developer.salesforce.com/docs/atlas.en-us.api_rest.meta/api_rest/resources_list.htm
    """

    def get_all_objects(self):
        return self.client.request_authenticated(OBJECT_PATH)

    def get_object_metadata(
        self,
        object_name: str,
        describe: bool = False,
        since: datetime.date | None = None,
    ):
        """
        Basic metadata for an object, or the full describe (fields, urls,
        child relationships) when `describe` is set. With `since`, the
        platform answers "not modified" unless the metadata changed
        after that moment.
        """
        headers = {}
        if since is not None:
            if not isinstance(since, datetime.date):
                raise SalesforceInvalidArgument(
                    "To get object metadata since a point in time, "
                    "`since` must be a date or datetime"
                )
            headers["If-Modified-Since"] = http_date(since)

        path = OBJECT_PATH + object_name
        if describe:
            path += "/describe/"
        return self.client.request_authenticated(
            path, headers=headers, resource_name=object_name
        )

    def create(self, object_name: str, data: Mapping[str, Any]):
        return self.client.request_authenticated(
            OBJECT_PATH + object_name, data, "POST", resource_name=object_name
        )

    def upsert(self, object_name: str, data: Mapping[str, Any]):
        """`object_name` identifies the record: `Object/ExternalIdField/Value`"""
        return self.client.request_authenticated(
            OBJECT_PATH + object_name, data, "PATCH", resource_name=object_name
        )

    def update(self, object_name: str, record_id: str, data: Mapping[str, Any]):
        return self.client.request_authenticated(
            f"{OBJECT_PATH}{object_name}/{record_id}",
            data,
            "PATCH",
            resource_name=object_name,
        )

    def delete(self, object_name: str, record_id: str):
        return self.client.request_authenticated(
            f"{OBJECT_PATH}{object_name}/{record_id}",
            None,
            "DELETE",
            resource_name=object_name,
        )

    def get(self, object_name: str, record_id: str, fields: list[str] | None = None):
        params = {}
        if fields:
            params["fields"] = ",".join(fields)
        return self.client.request_authenticated(
            f"{OBJECT_PATH}{object_name}/{record_id}",
            params,
            resource_name=object_name,
        )
