"""Read-only GitHub REST client for workflow job listings.

Only one endpoint is used: list jobs for a workflow run. Failures are raised
as recoverable GitHubApiErrors; the ErrorCode says what went wrong and the
resolver policy decides which codes are worth another attempt.

Example:
    >>> with WorkflowJobsClient(SecretStr("ghp_...")) as client:
    ...     jobs = client.list_jobs("octo-org", "octo-repo", 42)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

import httpx
from pydantic import SecretStr, ValidationError

from setup_telemetry.foundation.config.settings import DEFAULT_API_URL
from setup_telemetry.foundation.errors import ErrorCode, GitHubApiError
from setup_telemetry.runtime.observability.logging import BoundLogger, get_logger

from .models import JobList, JobRecord

if TYPE_CHECKING:
    from types import TracebackType

    from setup_telemetry.foundation.config import HttpSettings

API_VERSION = "2022-11-28"

# Longest response body echoed into debug logs
_BODY_PREVIEW = 2048


def _rate_limited(headers: httpx.Headers) -> bool:
    """Primary limit exhausted, or a secondary limit asking to back off."""
    return headers.get("x-ratelimit-remaining") == "0" or "retry-after" in headers


def _status_code(response: httpx.Response) -> ErrorCode:
    """Map an HTTP error status to an ErrorCode."""
    status = response.status_code
    if status == 401:
        return ErrorCode.API_KEY_INVALID
    if status == 429 or (status == 403 and _rate_limited(response.headers)):
        return ErrorCode.RATE_LIMITED
    if status == 403:
        return ErrorCode.PERMISSION_DENIED
    if status == 404:
        return ErrorCode.NOT_FOUND
    if status >= 500:
        return ErrorCode.EXTERNAL_SERVICE_ERROR
    return ErrorCode.UNKNOWN


class WorkflowJobsClient:
    """Lists the jobs of a workflow run with a bearer token.

    Args:
        token: GitHub token with ``actions: read`` on the repository
        base_url: REST API root (``GITHUB_API_URL`` on GHES)
        timeout: Request timeout in seconds
        per_page: Page size; only the first page is read
        user_agent: User-Agent header value
        transport: httpx transport override (tests use ``httpx.MockTransport``)
    """

    __slots__ = ("_client", "per_page", "log")

    def __init__(
        self,
        token: SecretStr,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        per_page: int = 100,
        user_agent: str = "setup-telemetry",
        transport: httpx.BaseTransport | None = None,
        log: BoundLogger | None = None,
    ) -> None:
        self.per_page = per_page
        self.log = log or get_logger("setup_telemetry.github")
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token.get_secret_value()}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": user_agent,
            },
        )

    @classmethod
    def from_settings(cls, token: SecretStr, api_url: str, http: HttpSettings, **kwargs: object) -> Self:
        return cls(
            token,
            base_url=api_url,
            timeout=http.timeout,
            per_page=http.per_page,
            user_agent=http.user_agent,
            **kwargs,  # type: ignore[arg-type]
        )

    def list_jobs(self, owner: str, repo: str, run_id: int) -> list[JobRecord]:
        """Fetch the first page of jobs for a workflow run.

        Raises:
            GitHubApiError: transport failure, error status, or undecodable body
        """
        path = f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs"
        self.log.info("Fetching workflow jobs from GitHub API", run_id=run_id)
        try:
            response = self._client.get(path, params={"per_page": self.per_page})
        except httpx.TimeoutException as e:
            raise GitHubApiError.create("list_jobs", f"Request timed out: {e}", ErrorCode.TIMEOUT, recoverable=True) from e
        except httpx.TransportError as e:
            raise GitHubApiError.create("list_jobs", f"Network error: {e}", ErrorCode.NETWORK_ERROR, recoverable=True) from e

        if response.is_error:
            body = response.text[:_BODY_PREVIEW]
            self.log.info("GitHub API response status", status=f"{response.status_code} {response.reason_phrase}")
            self.log.debug("GitHub API response body", body=body)
            raise GitHubApiError.create(
                "list_jobs",
                f"GitHub API returned {response.status_code} for {path}",
                _status_code(response),
                recoverable=True,
                details=body,
            )

        try:
            listing = JobList.model_validate_json(response.content)
        except ValidationError as e:
            raise GitHubApiError.create(
                "list_jobs", f"Unexpected jobs payload: {e.error_count()} validation error(s)", ErrorCode.PARSE_ERROR,
                recoverable=True, details=str(e),
            ) from e
        return list(listing.jobs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        self.close()
