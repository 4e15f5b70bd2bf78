"""Resolve which job record of a run belongs to this process.

A job record may not be listed yet when the step starts, so the lookup runs
through a retry policy. Two layers:

- ``find_matching_job``: pure scan of one listing
- ``JobResolver``: list + scan inside ``call_with_retry``; exhaustion yields
  a not-found ``JobResolution`` carrying a fallback job name instead of an
  exception
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Protocol

from setup_telemetry.foundation.errors import ErrorCode, JobNotVisibleError, StepError, StepException
from setup_telemetry.runtime.observability.logging import BoundLogger, get_logger
from setup_telemetry.runtime.retry import (
    DEFAULT_RETRYABLE,
    ConstantBackoff,
    RetryExhausted,
    RetryPolicy,
    call_with_retry,
)

if TYPE_CHECKING:
    from setup_telemetry.foundation.config import RunContext

    from .models import JobRecord

# Job name used for the span id when no record could be resolved
FALLBACK_JOB_NAME = "unknown-job"

# Any failed listing is retried, as is a job that is not visible yet
RESOLVER_RETRYABLE: frozenset[ErrorCode] = DEFAULT_RETRYABLE | {
    ErrorCode.API_KEY_INVALID,
    ErrorCode.PERMISSION_DENIED,
    ErrorCode.NOT_FOUND,
    ErrorCode.PARSE_ERROR,
    ErrorCode.UNKNOWN,
}

DEFAULT_POLICY = RetryPolicy(
    max_attempts=3,
    backoff=ConstantBackoff(3.0),
    retryable_codes=RESOLVER_RETRYABLE,
)


class JobLister(Protocol):
    """Anything that can list the jobs of a run (the REST client, test fakes)."""

    def list_jobs(self, owner: str, repo: str, run_id: int) -> Sequence[JobRecord]: ...


def find_matching_job(jobs: Iterable[JobRecord], run_attempt: int, runner_name: str) -> JobRecord | None:
    """First job whose attempt and runner name both match, else None."""
    return next((job for job in jobs if job.matches(run_attempt, runner_name)), None)


@dataclass(frozen=True, slots=True)
class JobResolution:
    """Outcome of a resolution.

    Attributes:
        job: The matching record, None when resolution was exhausted
        attempts: Number of listing calls made
        error: Last failure when not found
    """

    job: JobRecord | None
    attempts: int
    error: StepError | None = None

    @property
    def found(self) -> bool:
        return self.job is not None

    @property
    def job_name(self) -> str:
        return self.job.name if self.job is not None else FALLBACK_JOB_NAME

    @property
    def job_id(self) -> str:
        return str(self.job.id) if self.job is not None else ""

    @property
    def created_at(self) -> str:
        return self.job.created_at_rfc3339 if self.job is not None else ""

    @property
    def started_at(self) -> str:
        return self.job.started_at_rfc3339 if self.job is not None else ""


@dataclass(slots=True)
class JobResolver:
    """Finds this runner's job record, retrying while it is not visible.

    Example:
        >>> resolver = JobResolver(client)
        >>> resolution = resolver.resolve(context)
        >>> resolution.job_name
        'build (ubuntu-latest)'
    """

    lister: JobLister
    policy: RetryPolicy = DEFAULT_POLICY
    sleep: Callable[[float], None] = time.sleep
    log: BoundLogger = field(default_factory=lambda: get_logger("setup_telemetry.resolver"))

    def _attempt(self, context: RunContext, calls: list[int]) -> JobRecord:
        calls.append(1)
        jobs = self.lister.list_jobs(context.repository_owner, context.repository_name, context.run_id)
        self.log.info("Looking for job with runner name", runner=context.runner_name, jobs=len(jobs))
        for job in jobs:
            self.log.debug("Inspecting job", job=job.name, runner=job.runner_name, attempt=job.run_attempt)
        if (job := find_matching_job(jobs, context.run_attempt, context.runner_name)) is None:
            raise JobNotVisibleError(
                f"no job found for runner {context.runner_name!r} on attempt {context.run_attempt}"
            )
        self.log.info("Match found", job=job.name, job_id=job.id)
        return job

    def resolve(self, context: RunContext) -> JobResolution:
        """Resolve the job record for ``context``. Never raises for lookup failures."""
        calls: list[int] = []
        try:
            job = call_with_retry(
                lambda: self._attempt(context, calls),
                self.policy,
                "resolve_job",
                log=self.log,
                sleep=self.sleep,
            )
        except RetryExhausted as e:
            last = e.last_error
            error = last.error if isinstance(last, StepException) else StepError.from_exception("resolve_job", last)
            self.log.error("Failed to resolve job", attempts=e.attempts, error=str(error))
            return JobResolution(job=None, attempts=len(calls), error=error)
        return JobResolution(job=job, attempts=len(calls))
