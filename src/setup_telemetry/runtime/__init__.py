"""Runtime - Identifier derivation, retry, and logging.

Contains: tracing ids, retry policies, observability.
"""

from __future__ import annotations

__all__ = [
    # Tracing
    "TraceIdentifiers", "compose_traceparent", "derive_identifiers",
    "derive_span_id", "derive_trace_id", "parse_traceparent",
    # Retry
    "Backoff", "ConstantBackoff", "ExponentialBackoff",
    "RetryPolicy", "RetryExhausted", "call_with_retry", "DEFAULT_RETRYABLE",
    # Observability
    "BoundLogger", "configure_logging", "get_logger", "log_context",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("TraceIdentifiers", "compose_traceparent", "derive_identifiers",
                "derive_span_id", "derive_trace_id", "parse_traceparent"):
        from . import tracing
        return getattr(tracing, name)
    if name in ("Backoff", "ConstantBackoff", "ExponentialBackoff",
                "RetryPolicy", "RetryExhausted", "call_with_retry", "DEFAULT_RETRYABLE"):
        from . import retry
        return getattr(retry, name)
    if name in ("BoundLogger", "configure_logging", "get_logger", "log_context"):
        from .observability import logging
        return getattr(logging, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
