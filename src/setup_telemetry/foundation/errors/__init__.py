"""Error handling for setup-telemetry.

- ErrorCode: Standard error codes for step failures
- StepError/StepException: Structured errors and exceptions
- ConfigurationError, GitHubApiError, JobNotVisibleError, ResolutionError
"""

from .errors import (
    ConfigurationError,
    RETRYABLE_CODES,
    ErrorCode,
    GitHubApiError,
    JobNotVisibleError,
    ResolutionError,
    StepError,
    StepException,
    classify_exception,
)

__all__ = [
    "ErrorCode", "RETRYABLE_CODES", "StepError", "StepException", "classify_exception",
    "ConfigurationError", "GitHubApiError", "JobNotVisibleError", "ResolutionError",
]
