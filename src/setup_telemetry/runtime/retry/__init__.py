"""Retry policies for remote calls.

Provides a generic retry loop with pluggable backoff strategies, independent
of what is being retried.

Example:
    >>> from setup_telemetry.runtime.retry import RetryPolicy, ConstantBackoff, call_with_retry
    >>> policy = RetryPolicy(max_attempts=3, backoff=ConstantBackoff(3.0))
    >>> jobs = call_with_retry(lambda: client.list_jobs("octo", "repo", 42), policy, "list_jobs")
"""

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff
from .policy import (
    DEFAULT_RETRYABLE,
    RetryExhausted,
    RetryPolicy,
    call_with_retry,
)

__all__ = [
    # Backoff strategies
    "Backoff",
    "ConstantBackoff",
    "ExponentialBackoff",
    # Policy
    "RetryPolicy",
    "DEFAULT_RETRYABLE",
    # Execution
    "RetryExhausted",
    "call_with_retry",
]
