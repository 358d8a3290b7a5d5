from .base import ApiResource
from .bulk import BulkResource, resolve_batch_id, resolve_job_id

__all__ = ["ApiResource", "BulkResource", "resolve_batch_id", "resolve_job_id"]
