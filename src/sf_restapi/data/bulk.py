"""
Records of the asynchronous (Bulk 1.0) job API.
https://developer.salesforce.com/docs/atlas.en-us.api_asynch.meta/api_asynch/asynch_api_reference_jobinfo.htm
"""

from typing import ClassVar, Literal

from .fields import (
    CheckboxField,
    DateTimeField,
    FieldConfigurableObject,
    IdField,
    IntField,
    ListField,
    NumberField,
    PicklistField,
    TextField,
)

JobOperation = Literal[
    "insert", "update", "upsert", "delete", "hardDelete", "query", "queryAll"
]


class Job(FieldConfigurableObject):
    """A declared bulk operation that batches are submitted against"""

    OPERATION_INSERT: ClassVar[str] = "insert"
    OPERATION_UPDATE: ClassVar[str] = "update"
    OPERATION_UPSERT: ClassVar[str] = "upsert"
    OPERATION_DELETE: ClassVar[str] = "delete"
    OPERATION_HARD_DELETE: ClassVar[str] = "hardDelete"
    OPERATION_QUERY: ClassVar[str] = "query"
    OPERATION_QUERY_ALL: ClassVar[str] = "queryAll"

    STATE_OPEN: ClassVar[str] = "Open"
    STATE_CLOSED: ClassVar[str] = "Closed"
    STATE_ABORTED: ClassVar[str] = "Aborted"
    STATE_FAILED: ClassVar[str] = "Failed"

    id = IdField()
    operation = PicklistField(
        options=[
            "insert",
            "update",
            "upsert",
            "delete",
            "hardDelete",
            "query",
            "queryAll",
        ],
        strict=False,
    )
    object = TextField()
    contentType = TextField()
    externalIdFieldName = TextField()
    state = PicklistField(options=["Open", "Closed", "Aborted", "Failed"], strict=False)
    concurrencyMode = PicklistField(options=["Parallel", "Serial"], strict=False)
    apiVersion = NumberField()
    createdById = IdField()
    createdDate = DateTimeField()
    systemModstamp = DateTimeField()
    numberBatchesQueued = IntField()
    numberBatchesInProgress = IntField()
    numberBatchesCompleted = IntField()
    numberBatchesFailed = IntField()
    numberBatchesTotal = IntField()
    numberRecordsProcessed = IntField()
    numberRecordsFailed = IntField()
    numberRetries = IntField()
    totalProcessingTime = IntField()
    apiActiveProcessingTime = IntField()
    apexProcessingTime = IntField()

    @property
    def is_open(self) -> bool:
        return self.state == self.STATE_OPEN


class BatchInfo(FieldConfigurableObject):
    """One chunk of work submitted to a `Job`"""

    STATE_QUEUED: ClassVar[str] = "Queued"
    STATE_IN_PROGRESS: ClassVar[str] = "InProgress"
    STATE_COMPLETED: ClassVar[str] = "Completed"
    STATE_FAILED: ClassVar[str] = "Failed"
    STATE_NOT_PROCESSED: ClassVar[str] = "Not Processed"
    DONE_STATES: ClassVar[frozenset[str]] = frozenset(
        {"Completed", "Failed", "Not Processed", "NotProcessed"}
    )

    id = IdField()
    jobId = IdField()
    state = PicklistField(
        options=["Queued", "InProgress", "Completed", "Failed", "Not Processed"],
        strict=False,
    )
    stateMessage = TextField()
    createdDate = DateTimeField()
    systemModstamp = DateTimeField()
    numberRecordsProcessed = IntField()
    numberRecordsFailed = IntField()
    totalProcessingTime = IntField()
    apiActiveProcessingTime = IntField()
    apexProcessingTime = IntField()

    def __init__(self, job: Job, /, **fields):
        super().__init__(**fields)
        self._job = job

    @property
    def job(self) -> Job:
        return self._job

    @property
    def is_done(self) -> bool:
        return self.state in self.DONE_STATES


class BatchResult(FieldConfigurableObject):
    """The outcome of one record of a completed batch"""

    id = TextField()
    success = CheckboxField()
    created = CheckboxField()
    errors = ListField()

    def __init__(self, batch_info: BatchInfo, /, **fields):
        super().__init__(**fields)
        self._batch_info = batch_info

    @property
    def batch_info(self) -> BatchInfo:
        return self._batch_info
