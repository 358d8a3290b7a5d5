from .bulk import BatchInfo, BatchResult, Job

__all__ = ["BatchInfo", "BatchResult", "Job"]
