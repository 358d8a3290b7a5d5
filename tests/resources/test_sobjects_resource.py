import datetime

import httpx
import pytest

from sf_restapi.exceptions import SalesforceInvalidArgument, SalesforceResourceNotFound
from sf_restapi.resources.sobjects import http_date

REST_URL = "https://na1.my.salesforce.com/services/data/v63.0/"


def test_http_date():
    moment = datetime.datetime(2024, 3, 1, 8, 30, tzinfo=datetime.timezone.utc)
    assert http_date(moment) == "Fri, 01 Mar 2024 08:30:00 GMT"
    assert http_date(datetime.date(2024, 3, 1)) == "Fri, 01 Mar 2024 00:00:00 GMT"
    assert http_date(datetime.datetime(2024, 3, 1, 8, 30)) == "Fri, 01 Mar 2024 08:30:00 GMT"
    pacific = datetime.timezone(datetime.timedelta(hours=-8))
    assert http_date(datetime.datetime(2024, 3, 1, 0, 30, tzinfo=pacific)) == (
        "Fri, 01 Mar 2024 08:30:00 GMT"
    )


def test_get_all_objects(sf_client, fake_sf):
    fake_sf.queue_json({"encoding": "UTF-8", "sobjects": [{"name": "Account"}]})

    result = sf_client.sobjects.get_all_objects()

    assert result["sobjects"][0]["name"] == "Account"
    assert str(fake_sf.last_request.url) == REST_URL + "sobjects/"


def test_get_object_metadata(sf_client, fake_sf):
    fake_sf.queue_json({"objectDescribe": {"name": "Account"}, "recentItems": []})

    sf_client.sobjects.get_object_metadata("Account")

    request = fake_sf.last_request
    assert str(request.url) == REST_URL + "sobjects/Account"
    assert "If-Modified-Since" not in request.headers


def test_get_object_metadata_describe_since(sf_client, fake_sf):
    fake_sf.queue(httpx.Response(304))
    since = datetime.datetime(2024, 3, 1, 8, 30, tzinfo=datetime.timezone.utc)

    result = sf_client.sobjects.get_object_metadata("Account", True, since)

    request = fake_sf.last_request
    assert str(request.url) == REST_URL + "sobjects/Account/describe/"
    assert request.headers["If-Modified-Since"] == "Fri, 01 Mar 2024 08:30:00 GMT"
    assert result == {
        "message": "The requested object has not changed since the specified time"
    }


@pytest.mark.parametrize("since", ["2024-03-01", 1709281800, object()])
def test_get_object_metadata_rejects_invalid_since(sf_client, fake_sf, since):
    with pytest.raises(SalesforceInvalidArgument):
        sf_client.sobjects.get_object_metadata("Account", since=since)

    assert fake_sf.requests == []


def test_create_returns_success_for_empty_body(sf_client, fake_sf):
    fake_sf.queue(httpx.Response(201))

    result = sf_client.sobjects.create("Account", {"Name": "Acme"})

    assert result == {"success": True}
    request = fake_sf.last_request
    assert request.method == "POST"
    assert str(request.url) == REST_URL + "sobjects/Account"
    assert fake_sf.last_json() == {"Name": "Acme"}


def test_create_returns_platform_body(sf_client, fake_sf):
    fake_sf.queue_json({"id": "001R000000abcDEF", "success": True, "errors": []}, 201)

    result = sf_client.sobjects.create("Account", {"Name": "Acme"})

    assert result["id"] == "001R000000abcDEF"


def test_upsert(sf_client, fake_sf):
    fake_sf.queue(httpx.Response(204))

    sf_client.sobjects.upsert("Account/External_Id__c/ACME-1", {"Name": "Acme"})

    request = fake_sf.last_request
    assert request.method == "PATCH"
    assert str(request.url) == REST_URL + "sobjects/Account/External_Id__c/ACME-1"


def test_update(sf_client, fake_sf):
    fake_sf.queue(httpx.Response(204))

    assert sf_client.sobjects.update("Account", "001R000000abcDEF", {"Name": "Acme 2"}) == {
        "success": True
    }

    request = fake_sf.last_request
    assert request.method == "PATCH"
    assert str(request.url) == REST_URL + "sobjects/Account/001R000000abcDEF"
    assert fake_sf.last_json() == {"Name": "Acme 2"}


def test_delete(sf_client, fake_sf):
    fake_sf.queue(httpx.Response(204))

    sf_client.sobjects.delete("Account", "001R000000abcDEF")

    request = fake_sf.last_request
    assert request.method == "DELETE"
    assert str(request.url) == REST_URL + "sobjects/Account/001R000000abcDEF"
    assert request.content == b""


def test_get_with_fields(sf_client, fake_sf):
    fake_sf.queue_json({"Id": "001R000000abcDEF", "Name": "Acme"})

    result = sf_client.sobjects.get("Account", "001R000000abcDEF", ["Id", "Name"])

    assert result["Name"] == "Acme"
    assert fake_sf.last_request.url.params["fields"] == "Id,Name"


def test_get_missing_record(sf_client, fake_sf):
    fake_sf.queue_json(
        [{"errorCode": "NOT_FOUND", "message": "The requested resource does not exist"}],
        404,
    )

    with pytest.raises(SalesforceResourceNotFound) as excinfo:
        sf_client.sobjects.get("Account", "001R000000missing")

    assert excinfo.value.resource_name == "Account"
    assert "Resource Account Not Found" in str(excinfo.value)
