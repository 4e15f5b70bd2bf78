"""Tests for backoff strategies and the generic retry loop."""

from __future__ import annotations

import pytest

from setup_telemetry.foundation.config import RetrySettings
from setup_telemetry.foundation.errors import RETRYABLE_CODES, ErrorCode, GitHubApiError, JobNotVisibleError
from setup_telemetry.runtime.retry import (
    ConstantBackoff,
    ExponentialBackoff,
    RetryExhausted,
    RetryPolicy,
    call_with_retry,
)


class Flaky:
    """Callable failing ``failures`` times before returning ``value``."""

    def __init__(self, failures: list[Exception], value: str = "ok") -> None:
        self.failures = list(failures)
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.value


@pytest.fixture
def sleeps() -> list[float]:
    return []


# ═════════════════════════════════════════════════════════════════════════════
# Backoff
# ═════════════════════════════════════════════════════════════════════════════


def test_constant_backoff_is_fixed() -> None:
    backoff = ConstantBackoff(3.0)
    assert [backoff.delay(n) for n in range(4)] == [3.0, 3.0, 3.0, 3.0]


def test_exponential_backoff_grows_and_caps() -> None:
    backoff = ExponentialBackoff(base=1.0, multiplier=2.0, max_delay=5.0)
    assert [backoff.delay(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]


# ═════════════════════════════════════════════════════════════════════════════
# Policy
# ═════════════════════════════════════════════════════════════════════════════


def test_policy_stops_at_last_attempt() -> None:
    policy = RetryPolicy(max_attempts=3)
    err = GitHubApiError("502")
    assert policy.should_retry(err, 0)
    assert policy.should_retry(err, 1)
    assert not policy.should_retry(err, 2)


def test_policy_respects_codes_and_recoverability() -> None:
    policy = RetryPolicy(max_attempts=3, retryable_codes=["TIMEOUT"])
    assert policy.retryable_codes == frozenset({ErrorCode.TIMEOUT})
    assert policy.should_retry(GitHubApiError.create("list_jobs", "slow", ErrorCode.TIMEOUT), 0)
    assert not policy.should_retry(GitHubApiError("502"), 0)
    assert not policy.should_retry(
        GitHubApiError.create("list_jobs", "slow", ErrorCode.TIMEOUT, recoverable=False), 0,
    )


def test_policy_classifies_foreign_exceptions() -> None:
    policy = RetryPolicy(max_attempts=2, retryable_codes=frozenset({ErrorCode.NETWORK_ERROR}))
    assert policy.should_retry(ConnectionError("connection reset"), 0)
    assert not policy.should_retry(ValueError("bad value"), 0)


def test_single_attempt_policy_never_retries() -> None:
    policy = RetryPolicy(max_attempts=1)
    assert not policy.should_retry(GitHubApiError("502"), 0)


def test_default_codes_match_recoverable_errors() -> None:
    assert RetryPolicy().retryable_codes == RETRYABLE_CODES
    assert ErrorCode.NO_RESULTS in RETRYABLE_CODES
    assert ErrorCode.API_KEY_INVALID not in RETRYABLE_CODES


def test_policy_from_settings() -> None:
    constant = RetryPolicy.from_settings(RetrySettings(max_attempts=5, delay=2.0))
    assert constant.max_attempts == 5
    assert constant.get_delay(3) == 2.0

    exponential = RetryPolicy.from_settings(RetrySettings(strategy="exponential", delay=1.0, max_delay=3.0))
    assert [exponential.get_delay(n) for n in range(3)] == [1.0, 2.0, 3.0]


# ═════════════════════════════════════════════════════════════════════════════
# call_with_retry
# ═════════════════════════════════════════════════════════════════════════════


def test_success_on_first_attempt_does_not_sleep(sleeps: list[float]) -> None:
    op = Flaky([])
    assert call_with_retry(op, RetryPolicy(), "op", sleep=sleeps.append) == "ok"
    assert op.calls == 1
    assert sleeps == []


def test_retries_transient_failure_with_fixed_delay(sleeps: list[float]) -> None:
    op = Flaky([GitHubApiError("502"), GitHubApiError("503")])
    policy = RetryPolicy(max_attempts=3, backoff=ConstantBackoff(3.0))
    assert call_with_retry(op, policy, "op", sleep=sleeps.append) == "ok"
    assert op.calls == 3
    assert sleeps == [3.0, 3.0]


def test_exhaustion_wraps_last_error(sleeps: list[float]) -> None:
    errors = [JobNotVisibleError("first"), JobNotVisibleError("second"), JobNotVisibleError("third")]
    op = Flaky(errors)
    policy = RetryPolicy(max_attempts=3, retryable_codes=frozenset({ErrorCode.NO_RESULTS}))

    with pytest.raises(RetryExhausted) as info:
        call_with_retry(op, policy, "op", sleep=sleeps.append)

    assert info.value.attempts == 3
    assert info.value.last_error is errors[2]
    assert isinstance(info.value.__cause__, JobNotVisibleError)
    assert len(sleeps) == 2


def test_non_retryable_failure_stops_immediately(sleeps: list[float]) -> None:
    op = Flaky([GitHubApiError.create("list_jobs", "bad credentials", ErrorCode.API_KEY_INVALID)])
    with pytest.raises(RetryExhausted) as info:
        call_with_retry(op, RetryPolicy(max_attempts=3), "op", sleep=sleeps.append)
    assert info.value.attempts == 1
    assert op.calls == 1
    assert sleeps == []


def test_on_retry_callback_receives_events(sleeps: list[float]) -> None:
    events: list[tuple[int, ErrorCode, float]] = []
    policy = RetryPolicy(max_attempts=2, backoff=ConstantBackoff(0.5), on_retry=lambda *e: events.append(e))
    call_with_retry(Flaky([GitHubApiError("502")]), policy, "op", sleep=sleeps.append)
    assert events == [(0, ErrorCode.EXTERNAL_SERVICE_ERROR, 0.5)]
