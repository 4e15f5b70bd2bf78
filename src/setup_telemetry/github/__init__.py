"""GitHub REST access: job records, the listing client and the job resolver."""

from .client import WorkflowJobsClient
from .models import JobList, JobRecord, format_timestamp
from .resolver import (
    DEFAULT_POLICY,
    FALLBACK_JOB_NAME,
    RESOLVER_RETRYABLE,
    JobLister,
    JobResolution,
    JobResolver,
    find_matching_job,
)

__all__ = [
    "WorkflowJobsClient",
    "JobList",
    "JobRecord",
    "format_timestamp",
    "DEFAULT_POLICY",
    "FALLBACK_JOB_NAME",
    "RESOLVER_RETRYABLE",
    "JobLister",
    "JobResolution",
    "JobResolver",
    "find_matching_job",
]
