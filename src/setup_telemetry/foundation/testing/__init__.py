"""Testing helpers: fakes for the job listing, output sink and log renderer."""

from .mock import CapturingRenderer, FakeJobsClient, MemorySink, job_record

__all__ = ["CapturingRenderer", "FakeJobsClient", "MemorySink", "job_record"]
