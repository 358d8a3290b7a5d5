import json
from typing import Generator

import httpx
import pytest

from sf_restapi.client import SalesforceClient
from sf_restapi.session import Session

INSTANCE_URL = "https://na1.my.salesforce.com"
LOGIN_URL = "https://login.salesforce.com"
ACCESS_TOKEN = "00D000000000001!AQ0AQFAKE_TOKEN"


class FakeSalesforce:
    """Records every request and answers with the queued responses in order"""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []

    def queue(self, *responses: httpx.Response | Exception):
        self.responses.extend(responses)
        return self

    def queue_json(self, data, status_code: int = 200, **kwargs):
        return self.queue(httpx.Response(status_code, json=data, **kwargs))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert self.responses, f"Unexpected request {request.method} {request.url}"
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_sf() -> FakeSalesforce:
    return FakeSalesforce()


@pytest.fixture
def anonymous_client(fake_sf) -> Generator[SalesforceClient, None, None]:
    """A client that has not logged in yet"""
    with SalesforceClient(
        login_url=LOGIN_URL,
        api_version="63.0",
        client_id="consumer-key",
        client_secret="consumer-secret",
        transport=httpx.MockTransport(fake_sf),
    ) as client:
        yield client


@pytest.fixture
def sf_client(anonymous_client) -> SalesforceClient:
    """A client holding a live session for INSTANCE_URL"""
    anonymous_client.session = Session.for_instance(
        INSTANCE_URL, "63.0", ACCESS_TOKEN
    )
    return anonymous_client


def job_json(state: str = "Open", **fields):
    return {
        "id": "750R0000000zlh9IAA",
        "operation": "insert",
        "object": "Account",
        "createdById": "005R0000000hAqRIAU",
        "createdDate": "2024-05-01T12:00:00.000+0000",
        "systemModstamp": "2024-05-01T12:00:00.000+0000",
        "state": state,
        "concurrencyMode": "Parallel",
        "contentType": "JSON",
        "numberBatchesQueued": 0,
        "numberBatchesInProgress": 0,
        "numberBatchesCompleted": 0,
        "numberBatchesFailed": 0,
        "numberBatchesTotal": 0,
        "numberRecordsProcessed": 0,
        "numberRetries": 0,
        "apiVersion": 63.0,
        **fields,
    }


def batch_json(state: str = "Queued", **fields):
    return {
        "id": "751R0000000zRJ2IAM",
        "jobId": "750R0000000zlh9IAA",
        "state": state,
        "createdDate": "2024-05-01T12:00:01.000+0000",
        "systemModstamp": "2024-05-01T12:00:01.000+0000",
        "numberRecordsProcessed": 0,
        "numberRecordsFailed": 0,
        "totalProcessingTime": 0,
        "apiActiveProcessingTime": 0,
        "apexProcessingTime": 0,
        **fields,
    }


@pytest.fixture
def job_payload():
    return job_json


@pytest.fixture
def batch_payload():
    return batch_json
