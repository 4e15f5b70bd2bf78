"""setup-telemetry - deterministic trace context for GitHub Actions jobs.

Derives a trace id shared by every job of a workflow run and a span id per
job, finds this job's record through the GitHub REST API, and publishes the
identifiers as step outputs for downstream telemetry correlation.

Quick Start:
    >>> from setup_telemetry import derive_trace_id, derive_span_id, compose_traceparent
    >>> trace_id = derive_trace_id(1000, 1)
    >>> span_id = derive_span_id(1000, 1, "build")
    >>> compose_traceparent(trace_id, span_id)  # doctest: +ELLIPSIS
    '00-...-01'

As an Actions step:
    - uses: ./
      with:
        github-token: ${{ secrets.GITHUB_TOKEN }}
"""

from __future__ import annotations

__version__ = "0.3.0"

from .runtime.tracing import (
    TraceIdentifiers,
    compose_traceparent,
    derive_identifiers,
    derive_span_id,
    derive_trace_id,
    parse_traceparent,
)

__all__ = [
    "__version__",
    "TraceIdentifiers",
    "compose_traceparent",
    "derive_identifiers",
    "derive_span_id",
    "derive_trace_id",
    "parse_traceparent",
]
