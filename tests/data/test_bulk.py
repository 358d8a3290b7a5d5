import datetime

import pytest

from sf_restapi.data.bulk import BatchInfo, BatchResult, Job


def test_job_from_platform_payload(job_payload):
    job = Job(**job_payload())

    assert job.id == "750R0000000zlh9IAA"
    assert job.operation == Job.OPERATION_INSERT
    assert job.object == "Account"
    assert job.contentType == "JSON"
    assert job.concurrencyMode == "Parallel"
    assert job.apiVersion == 63.0
    assert job.createdDate == datetime.datetime(
        2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc
    )
    assert job.numberBatchesTotal == 0
    assert job.extra_fields == {}


def test_job_fields_are_optional():
    job = Job(id="750R0000000zlh9IAA")

    assert job.state is None
    assert job.externalIdFieldName is None
    assert not job.is_open
    assert "state" not in job


@pytest.mark.parametrize(
    "state,is_open",
    [("Open", True), ("Closed", False), ("Aborted", False), ("Failed", False)],
)
def test_job_is_open(job_payload, state, is_open):
    assert Job(**job_payload(state=state)).is_open is is_open


def test_job_keeps_unlisted_picklist_values(job_payload):
    job = Job(
        **job_payload(state="Deleted", operation="merge", concurrencyMode="Serial-Fast")
    )

    assert job.state == "Deleted"
    assert job.operation == "merge"
    assert job.concurrencyMode == "Serial-Fast"
    assert not job.is_open


def test_job_picklists_still_require_text(job_payload):
    with pytest.raises(TypeError):
        Job(**job_payload(state=3))


def test_job_counters_from_strings(job_payload):
    job = Job(**job_payload(numberRecordsProcessed="42", apiVersion="63.0"))

    assert job.numberRecordsProcessed == 42
    assert job.apiVersion == 63.0


def test_job_to_dict(job_payload):
    payload = job_payload(fastPathEnabled=False)
    job = Job(**payload)

    data = job.to_dict()

    assert data["id"] == payload["id"]
    assert data["createdDate"] == "2024-05-01T12:00:00.000+00:00"
    assert data["fastPathEnabled"] is False


def test_job_state_can_be_refreshed(job_payload):
    job = Job(**job_payload())

    job.update_fields({"state": "Closed", "numberBatchesCompleted": 3})

    assert job.state == Job.STATE_CLOSED
    assert job.numberBatchesCompleted == 3


def test_batch_info_links_its_job(job_payload, batch_payload):
    job = Job(**job_payload())
    batch = BatchInfo(job, **batch_payload())

    assert batch.job is job
    assert batch.jobId == job.id
    assert batch.state == BatchInfo.STATE_QUEUED


@pytest.mark.parametrize(
    "state,is_done",
    [
        ("Queued", False),
        ("InProgress", False),
        ("Completed", True),
        ("Failed", True),
        ("Not Processed", True),
        ("NotProcessed", True),
        ("Pending", False),
    ],
)
def test_batch_info_is_done(job_payload, batch_payload, state, is_done):
    batch = BatchInfo(Job(**job_payload()), **batch_payload(state=state))
    assert batch.is_done is is_done


def test_batch_info_keeps_unlisted_state(job_payload, batch_payload):
    batch = BatchInfo(Job(**job_payload()), **batch_payload(state="Done"))
    assert batch.state == "Done"


def test_platform_fields_named_like_back_references(job_payload, batch_payload):
    job = Job(**job_payload(self="x"))
    batch = BatchInfo(job, **batch_payload(job="platform value"))
    result = BatchResult(batch, id="001R000000aaaAAA", batch_info="platform value")

    assert job.extra_fields["self"] == "x"
    assert batch.job is job
    assert batch["job"] == "platform value"
    assert result.batch_info is batch
    assert result["batch_info"] == "platform value"


def test_batch_result(job_payload, batch_payload):
    batch = BatchInfo(Job(**job_payload()), **batch_payload(state="Completed"))

    result = BatchResult(
        batch, id="001R000000aaaAAA", success="true", created="false", errors=[]
    )

    assert result.batch_info is batch
    assert result.success is True
    assert result.created is False
    assert result.errors == []


def test_batch_result_rejects_non_list_errors(job_payload, batch_payload):
    batch = BatchInfo(Job(**job_payload()), **batch_payload())

    with pytest.raises(TypeError):
        BatchResult(batch, id="001R000000aaaAAA", errors="boom")
