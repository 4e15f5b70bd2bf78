"""Deterministic trace identifiers for workflow jobs.

Identifiers are pure functions of run metadata so that any tool looking at
the same run, attempt and job derives the same values without coordination.
Every job of a run shares one trace id and gets its own span id.

Example:
    >>> ids = derive_identifiers(1000, 1, "build")
    >>> len(ids.trace_id), len(ids.span_id)
    (32, 16)
    >>> ids.traceparent.startswith("00-")
    True
"""

from __future__ import annotations

import hashlib
import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

TRACEPARENT_VERSION = "00"
SAMPLED_FLAGS = "01"

# Suffix that separates trace derivation from span derivation
_TRACE_MARKER = "t"

_TRACEPARENT_RE = re.compile(r"^([0-9a-f]{2})-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})$")

TraceId = Annotated[str, Field(pattern=r"^[0-9a-f]{32}$")]
SpanId = Annotated[str, Field(pattern=r"^[0-9a-f]{16}$")]


def _sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def derive_trace_id(run_id: int, run_attempt: int) -> str:
    """First 16 digest bytes of ``sha256("<run_id><run_attempt>t")`` as hex."""
    return _sha256_hex(f"{run_id}{run_attempt}{_TRACE_MARKER}")[:32]


def derive_span_id(run_id: int, run_attempt: int, job_name: str) -> str:
    """Digest bytes 8-15 of ``sha256("<run_id><run_attempt><job_name>")`` as hex."""
    return _sha256_hex(f"{run_id}{run_attempt}{job_name}")[16:32]


def compose_traceparent(trace_id: str, span_id: str) -> str:
    """W3C trace-context version 00 header with the sampled flag set."""
    return f"{TRACEPARENT_VERSION}-{trace_id}-{span_id}-{SAMPLED_FLAGS}"


def parse_traceparent(value: str) -> tuple[str, str]:
    """Split a version 00 traceparent into ``(trace_id, span_id)``.

    Raises:
        ValueError: malformed header, unsupported version, or all-zero ids
    """
    if not (m := _TRACEPARENT_RE.match(value.strip())):
        raise ValueError(f"Malformed traceparent: {value!r}")
    version, trace_id, span_id, _flags = m.groups()
    if version != TRACEPARENT_VERSION:
        raise ValueError(f"Unsupported traceparent version: {version}")
    if trace_id == "0" * 32 or span_id == "0" * 16:
        raise ValueError(f"Invalid all-zero id in traceparent: {value!r}")
    return trace_id, span_id


class TraceIdentifiers(BaseModel):
    """Trace and span id of one job, plus the header that carries them."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    trace_id: TraceId
    span_id: SpanId

    @computed_field
    @property
    def traceparent(self) -> str:
        return compose_traceparent(self.trace_id, self.span_id)


def derive_identifiers(run_id: int, run_attempt: int, job_name: str) -> TraceIdentifiers:
    """Derive the full identifier set for one job."""
    return TraceIdentifiers(
        trace_id=derive_trace_id(run_id, run_attempt),
        span_id=derive_span_id(run_id, run_attempt, job_name),
    )
