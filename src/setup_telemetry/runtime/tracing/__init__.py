"""Tracing module: deterministic trace/span ids and the traceparent header."""

from .ids import (
    TraceIdentifiers,
    compose_traceparent,
    derive_identifiers,
    derive_span_id,
    derive_trace_id,
    parse_traceparent,
)

__all__ = [
    "TraceIdentifiers",
    "compose_traceparent",
    "derive_identifiers",
    "derive_span_id",
    "derive_trace_id",
    "parse_traceparent",
]
