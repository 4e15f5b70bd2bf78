"""Retry policy and the generic retry loop.

The loop knows nothing about jobs: it calls an operation, asks the policy
whether the raised exception is worth another attempt, sleeps, and tries
again. Exceptions are classified into ErrorCodes; StepExceptions carry
their own code.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Annotated, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from setup_telemetry.foundation.errors import RETRYABLE_CODES, ErrorCode, StepException, classify_exception
from setup_telemetry.runtime.observability.logging import BoundLogger, get_logger

from .backoff import Backoff, ConstantBackoff, ExponentialBackoff

if TYPE_CHECKING:
    from setup_telemetry.foundation.config import RetrySettings

T = TypeVar("T")

# Transient errors that may succeed on retry
DEFAULT_RETRYABLE: frozenset[ErrorCode] = RETRYABLE_CODES


class RetryPolicy(BaseModel):
    """Configurable retry policy.

    Attributes:
        max_attempts: Total attempts including the first (1 = no retries)
        backoff: Backoff strategy for delay calculation
        retryable_codes: Error codes that trigger another attempt
        on_retry: Optional callback ``(retry, code, delay)`` for retry events

    Example:
        >>> policy = RetryPolicy(
        ...     max_attempts=3,
        ...     backoff=ConstantBackoff(3.0),
        ...     retryable_codes=frozenset({ErrorCode.TIMEOUT}),
        ... )
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For Backoff protocol
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
    )

    max_attempts: Annotated[int, Field(ge=1, le=10)] = 3
    backoff: Backoff = Field(default_factory=ConstantBackoff, repr=False)
    retryable_codes: frozenset[ErrorCode] = DEFAULT_RETRYABLE
    on_retry: Callable[[int, ErrorCode, float], None] | None = Field(default=None, exclude=True, repr=False)

    @field_validator("retryable_codes", mode="before")
    @classmethod
    def _normalize_codes(cls, v: frozenset[ErrorCode] | set[str] | list[str] | tuple[str, ...]) -> frozenset[ErrorCode]:
        """Accept strings and convert to ErrorCode enum."""
        return frozenset(ErrorCode(c) if isinstance(c, str) else c for c in v)

    @classmethod
    def from_settings(cls, settings: RetrySettings, **overrides: object) -> RetryPolicy:
        backoff: Backoff = (
            ExponentialBackoff(base=settings.delay, max_delay=settings.max_delay)
            if settings.strategy == "exponential"
            else ConstantBackoff(settings.delay)
        )
        return cls(max_attempts=settings.max_attempts, backoff=backoff, **overrides)

    def should_retry(self, exc: BaseException, attempt: int) -> bool:
        """Whether another attempt follows a failure of 0-indexed ``attempt``."""
        if attempt + 1 >= self.max_attempts:
            return False
        if isinstance(exc, StepException) and not exc.error.recoverable:
            return False
        return classify_exception(exc) in self.retryable_codes

    def get_delay(self, attempt: int) -> float:
        return self.backoff.delay(attempt)


class RetryExhausted(Exception):
    """Raised when no attempt succeeded. Wraps the last failure."""

    __slots__ = ("attempts", "last_error")

    def __init__(self, operation: str, attempts: int, last_error: Exception) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempt(s): {last_error}")


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    name: str,
    *,
    log: BoundLogger | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` until it returns or the policy gives up.

    Args:
        operation: Zero-argument callable; failures are signalled by raising
        policy: Attempt count, backoff and retryable codes
        name: Operation name for logging
        log: Logger (defaults to one named after the retry module)
        sleep: Sleep function, injectable for tests

    Returns:
        The first successful result

    Raises:
        RetryExhausted: every attempt failed, or a failure was not retryable
    """
    log = (log or get_logger("setup_telemetry.retry")).bind(operation=name)

    for attempt in range(policy.max_attempts):
        try:
            return operation()
        except Exception as e:
            code = classify_exception(e)
            if not policy.should_retry(e, attempt):
                log.debug("giving up", attempt=attempt + 1, max_attempts=policy.max_attempts, code=code.value)
                raise RetryExhausted(name, attempt + 1, e) from e

            delay = policy.get_delay(attempt)
            log.warning(
                f"attempt {attempt + 1}/{policy.max_attempts} failed, retrying in {delay:.1f}s",
                code=code.value, error=str(e),
            )
            if policy.on_retry:
                policy.on_retry(attempt, code, delay)
            sleep(delay)

    raise AssertionError("unreachable: max_attempts >= 1")
