"""Standardized error handling for the telemetry step.

Provides error codes and structured errors for the resolver, the retry layer
and the process exit path. Uses Pydantic for validation and serialization.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorCode(StrEnum):
    """Standard error codes for step failures.

    Used for retry decisions and exit reporting.
    """
    API_KEY_MISSING = "API_KEY_MISSING"
    API_KEY_INVALID = "API_KEY_INVALID"
    RATE_LIMITED = "RATE_LIMITED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_CONFIG = "INVALID_CONFIG"
    NO_RESULTS = "NO_RESULTS"
    PARSE_ERROR = "PARSE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# Flattened pattern -> code mapping, checked in insertion order
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connect": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "transport": ErrorCode.NETWORK_ERROR,
    "rate": ErrorCode.RATE_LIMITED,
    "auth": ErrorCode.API_KEY_INVALID,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.PARSE_ERROR,
    "notfound": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    """Cached classification by exception signature."""
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code. Step exceptions carry their own code."""
    if isinstance(exc, StepException):
        return exc.error.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


# Transient conditions that may heal within a few seconds
RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.TIMEOUT,
    ErrorCode.NETWORK_ERROR,
    ErrorCode.EXTERNAL_SERVICE_ERROR,
    ErrorCode.NO_RESULTS,
})


class StepError(BaseModel):
    """Structured error for step failures.

    Attributes:
        operation: What the step was doing (e.g. "list_jobs", "configure")
        message: Human-readable error message
        code: Machine-readable error code
        recoverable: Whether a retry might succeed
        details: Optional detailed information (e.g. response body)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Step Error",
            "examples": [{
                "operation": "list_jobs",
                "message": "GitHub API returned 502",
                "code": "EXTERNAL_SERVICE_ERROR",
                "recoverable": True,
            }],
        },
    )

    operation: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = True
    details: str | None = Field(default=None, repr=False)

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @classmethod
    def from_exception(
        cls,
        operation: str,
        exc: Exception,
        context: str = "",
    ) -> Self:
        """Create from exception with auto-classification."""
        code = classify_exception(exc)
        text = str(exc) or type(exc).__name__
        return cls(
            operation=operation,
            message=f"{context}: {text}" if context else text,
            code=code,
            recoverable=code in RETRYABLE_CODES,
        )

    def render(self) -> str:
        return f"[{self.code}] {self.operation}: {self.message}"

    __str__ = render


class StepException(Exception):
    """Exception wrapping a StepError for raising."""

    code: ErrorCode = ErrorCode.UNKNOWN
    operation: str = "step"

    def __init__(self, error: StepError | str) -> None:
        if isinstance(error, str):
            error = StepError(
                operation=self.operation,
                message=error,
                code=self.code,
                recoverable=self.code in RETRYABLE_CODES,
            )
        self.error = error
        super().__init__(error.message)

    @classmethod
    def create(cls, operation: str, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *,
               recoverable: bool | None = None, details: str | None = None) -> Self:
        """Create exception with an explicit code."""
        return cls(StepError(
            operation=operation,
            message=message,
            code=code,
            recoverable=code in RETRYABLE_CODES if recoverable is None else recoverable,
            details=details,
        ))


class ConfigurationError(StepException):
    """Missing or malformed step configuration. Always fatal."""

    code = ErrorCode.INVALID_CONFIG
    operation = "configure"


class GitHubApiError(StepException):
    """The workflow jobs listing could not be fetched or decoded."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    operation = "list_jobs"


class JobNotVisibleError(StepException):
    """No job in the listing belongs to this runner (yet)."""

    code = ErrorCode.NO_RESULTS
    operation = "match_job"


class ResolutionError(StepException):
    """Job resolution exhausted every attempt."""

    code = ErrorCode.NOT_FOUND
    operation = "resolve_job"
