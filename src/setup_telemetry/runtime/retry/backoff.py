"""Backoff strategies for retry policies.

Provides pluggable delay calculation between attempts:
- ConstantBackoff: Fixed delay (default for job lookup)
- ExponentialBackoff: Exponential growth with cap
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation.

    Retry numbers are 0-indexed (delay before the second attempt = retry 0).
    """

    def delay(self, attempt: int) -> float:
        """Calculate delay in seconds before the given retry."""
        ...


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between attempts.

    Fits waits with a known, short upper bound such as a job record
    becoming visible in the API.

    Attributes:
        delay_seconds: Fixed delay in seconds (default: 3.0)
    """

    delay_seconds: float = 3.0

    def delay(self, attempt: int) -> float:
        return self.delay_seconds


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Exponential backoff.

    Delay = min(base * (multiplier ^ attempt), max_delay)

    Attributes:
        base: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay cap in seconds (default: 30.0)
        multiplier: Exponential growth factor (default: 2.0)
    """

    base: float = 1.0
    max_delay: float = 30.0
    multiplier: float = 2.0

    def delay(self, attempt: int) -> float:
        return min(self.base * (self.multiplier ** attempt), self.max_delay)
