"""
Job lifecycle of the asynchronous (Bulk 1.0) API:
create job -> add batches -> close/abort -> fetch batch results.
https://developer.salesforce.com/docs/atlas.en-us.api_asynch.meta/api_asynch/asynch_api_intro.htm

Jobs and batches may be referenced either by their id or by the record
itself. State changes are requests; the state reported back by the
platform is authoritative.
"""

import csv
from collections.abc import Mapping
from io import StringIO
from typing import Any

from .._models import as_mapping
from ..data.bulk import BatchInfo, BatchResult, Job, JobOperation
from ..exceptions import SalesforceInvalidReference, SalesforceStateTransitionError
from ..logger import getLogger
from .base import ApiResource

LOGGER = getLogger("bulk")

JobRef = Job | str
BatchRef = BatchInfo | str

CONTENT_MEDIA_TYPES = {
    "JSON": "application/json",
    "CSV": "text/csv",
    "XML": "application/xml",
    "ZIP_CSV": "zip/csv",
    "ZIP_JSON": "zip/json",
    "ZIP_XML": "zip/xml",
}

# column headers of CSV batch results
CSV_RESULT_COLUMNS = {
    "Id": "id",
    "Success": "success",
    "Created": "created",
    "Error": "errors",
}


def _resolve_id(reference: Any, entity_type: type[Job] | type[BatchInfo]) -> str:
    if isinstance(reference, str):
        if reference:
            return reference
    elif isinstance(reference, entity_type) and reference.id:
        return reference.id
    name = entity_type.__name__
    raise SalesforceInvalidReference(
        f"A {name} ID or instance of {name} must be provided, got {reference!r}"
    )


def resolve_job_id(job: JobRef) -> str:
    return _resolve_id(job, Job)


def resolve_batch_id(batch: BatchRef) -> str:
    return _resolve_id(batch, BatchInfo)


class BulkResource(ApiResource):
    def create_job(
        self,
        operation: JobOperation,
        object_name: str,
        content_type: str = "JSON",
        external_id_field_name: str | None = None,
    ) -> Job:
        """
        Open a new job. `external_id_field_name` is only sent for upserts,
        where the platform requires it.
        """
        payload = {
            "operation": operation,
            "object": object_name,
            "contentType": content_type,
        }
        if external_id_field_name and operation == Job.OPERATION_UPSERT:
            payload["externalIdFieldName"] = external_id_field_name

        job = Job(**as_mapping(self.client.request_batch("", payload)))
        LOGGER.info("Opened %s job %s on %s", operation, job.id, object_name)
        return job

    def _change_state(self, job: JobRef, state: str) -> Job:
        job_id = resolve_job_id(job)
        data = as_mapping(self.client.request_batch(f"/{job_id}", {"state": state}))
        if data.get("state") != state:
            LOGGER.warning(
                "Job %s reported state %s after a request for %s",
                job_id,
                data.get("state"),
                state,
            )
            raise SalesforceStateTransitionError(job_id, state, data.get("state"))
        return Job(**data)

    def close_job(self, job: JobRef) -> Job:
        return self._change_state(job, Job.STATE_CLOSED)

    def abort_job(self, job: JobRef) -> Job:
        return self._change_state(job, Job.STATE_ABORTED)

    def get_job(self, job: JobRef) -> Job:
        job_id = resolve_job_id(job)
        return Job(**as_mapping(self.client.request_batch(f"/{job_id}", method="GET")))

    def _materialize_job(self, job: JobRef) -> Job:
        if isinstance(job, Job):
            return job
        return self.get_job(job)

    def add_batch(
        self,
        job: JobRef,
        payload: Any,
        content_type: str | None = None,
    ) -> BatchInfo:
        """
        Submit one batch of records. `payload` is a list of records for JSON
        jobs, or the already encoded CSV/XML document for other jobs.
        """
        job_id = resolve_job_id(job)
        job = self._materialize_job(job)
        if content_type is None:
            content_type = job.contentType or "JSON"
        headers = {
            "Content-Type": CONTENT_MEDIA_TYPES.get(content_type, content_type)
        }
        data = self.client.request_batch(f"/{job_id}/batch", payload, headers=headers)
        batch_info = BatchInfo(job, **as_mapping(data))
        LOGGER.debug("Added batch %s to job %s", batch_info.id, job_id)
        return batch_info

    def get_job_batches(self, job: JobRef) -> list[BatchInfo]:
        job_id = resolve_job_id(job)
        data = self.client.request_batch(f"/{job_id}/batch", method="GET")
        job = self._materialize_job(job)
        return [
            BatchInfo(job, **as_mapping(batch))
            for batch in as_mapping(data).get("batchInfo", [])
        ]

    def get_batch_info(self, job: JobRef, batch: BatchRef) -> BatchInfo:
        job_id = resolve_job_id(job)
        batch_id = resolve_batch_id(batch)
        data = self.client.request_batch(f"/{job_id}/batch/{batch_id}", method="GET")
        return BatchInfo(self._materialize_job(job), **as_mapping(data))

    def get_batch_results(self, job: JobRef, batch: BatchRef) -> list[BatchResult]:
        """One result per record of the batch, in the order the platform lists them"""
        job_id = resolve_job_id(job)
        batch_id = resolve_batch_id(batch)
        data = self.client.request_batch(
            f"/{job_id}/batch/{batch_id}/result", method="GET"
        )
        if not isinstance(batch, BatchInfo):
            batch = self.get_batch_info(job, batch)

        if isinstance(data, str):
            records: Any = map(_csv_result_fields, csv.DictReader(StringIO(data)))
        elif isinstance(data, list):
            records = data
        else:
            # bodiless response
            records = []
        return [
            BatchResult(batch, **_result_fields(record)) for record in records
        ]


def _result_fields(record: Any) -> dict[str, Any]:
    # query jobs list result ids rather than result records
    if isinstance(record, str):
        return {"id": record}
    if isinstance(record, Mapping):
        return dict(record)
    return as_mapping(record)


def _csv_result_fields(row: Mapping[str, str]) -> dict[str, Any]:
    fields = {CSV_RESULT_COLUMNS.get(name, name): value for name, value in row.items()}
    if "errors" in fields:
        fields["errors"] = [fields["errors"]] if fields["errors"] else []
    return fields
