"""Workflow job records as returned by the GitHub REST API."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


def format_timestamp(value: datetime | None) -> str:
    """RFC 3339 in UTC with a ``Z`` suffix; empty for unknown times."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.replace(tzinfo=None).isoformat(timespec="seconds") + "Z"


class JobRecord(BaseModel):
    """One job of a workflow run. Unknown API fields are ignored.

    ``runner_name`` is null until a runner picks the job up, ``started_at``
    may be null for jobs that never started.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: Annotated[str, Field(min_length=1)]
    run_attempt: NonNegativeInt | None = None
    runner_name: str | None = None
    created_at: datetime
    started_at: datetime | None = None

    def matches(self, run_attempt: int, runner_name: str) -> bool:
        """Exact match on both the attempt and the runner name."""
        return self.run_attempt == run_attempt and self.runner_name == runner_name

    @property
    def created_at_rfc3339(self) -> str:
        return format_timestamp(self.created_at)

    @property
    def started_at_rfc3339(self) -> str:
        return format_timestamp(self.started_at)


class JobList(BaseModel):
    """Body of ``GET /repos/{owner}/{repo}/actions/runs/{run_id}/jobs``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jobs: tuple[JobRecord, ...] = ()
