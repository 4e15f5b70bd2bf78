"""Tests for deterministic trace/span id derivation."""

from __future__ import annotations

import hashlib
import re

import pytest
from pydantic import ValidationError

from setup_telemetry.runtime.tracing import (
    TraceIdentifiers,
    compose_traceparent,
    derive_identifiers,
    derive_span_id,
    derive_trace_id,
    parse_traceparent,
)

HEX32 = re.compile(r"^[0-9a-f]{32}$")
HEX16 = re.compile(r"^[0-9a-f]{16}$")


# ═════════════════════════════════════════════════════════════════════════════
# Trace ID
# ═════════════════════════════════════════════════════════════════════════════


def test_trace_id_known_vector() -> None:
    """Run 1000 attempt 1 hashes the literal string "10001t"."""
    expected = hashlib.sha256(b"10001t").hexdigest()[:32]
    assert derive_trace_id(1000, 1) == expected


@pytest.mark.parametrize(("run_id", "attempt"), [(0, 0), (1, 1), (123, 2), (9876543210, 17)])
def test_trace_id_shape_and_determinism(run_id: int, attempt: int) -> None:
    first = derive_trace_id(run_id, attempt)
    assert HEX32.match(first)
    assert derive_trace_id(run_id, attempt) == first


def test_trace_id_changes_with_attempt() -> None:
    assert derive_trace_id(123, 1) != derive_trace_id(123, 2)
    assert derive_trace_id(123, 1) != derive_trace_id(124, 1)


# ═════════════════════════════════════════════════════════════════════════════
# Span ID
# ═════════════════════════════════════════════════════════════════════════════


def test_span_id_uses_middle_digest_bytes() -> None:
    """Span id is hex chars 16..32 of sha256("<run><attempt><job>"), no marker."""
    digest = hashlib.sha256(b"10001build").hexdigest()
    assert derive_span_id(1000, 1, "build") == digest[16:32]
    assert derive_span_id(1000, 1, "build") != digest[:16]


def test_span_id_shape_and_job_sensitivity() -> None:
    build = derive_span_id(1000, 1, "build")
    test = derive_span_id(1000, 1, "test")
    assert HEX16.match(build) and HEX16.match(test)
    assert build != test
    assert derive_span_id(1000, 1, "build") == build


def test_span_id_handles_unicode_job_names() -> None:
    name = "déploiement 🚀"
    expected = hashlib.sha256(f"10001{name}".encode()).hexdigest()[16:32]
    assert derive_span_id(1000, 1, name) == expected


# ═════════════════════════════════════════════════════════════════════════════
# Traceparent
# ═════════════════════════════════════════════════════════════════════════════


def test_compose_traceparent_exact_layout() -> None:
    t, s = "a" * 32, "b" * 16
    assert compose_traceparent(t, s) == "00-" + t + "-" + s + "-01"


def test_parse_traceparent_roundtrip_of_derived_ids() -> None:
    ids = derive_identifiers(1000, 1, "build")
    assert parse_traceparent(ids.traceparent) == (ids.trace_id, ids.span_id)


@pytest.mark.parametrize("value", [
    "",
    "00-abc-def-01",
    "01-" + "a" * 32 + "-" + "b" * 16 + "-01",
    "00-" + "0" * 32 + "-" + "b" * 16 + "-01",
    "00-" + "A" * 32 + "-" + "b" * 16 + "-01",
])
def test_parse_traceparent_rejects_malformed(value: str) -> None:
    with pytest.raises(ValueError):
        parse_traceparent(value)


def test_identifiers_model_validates_width() -> None:
    with pytest.raises(ValidationError):
        TraceIdentifiers(trace_id="abc", span_id="b" * 16)
    ids = TraceIdentifiers(trace_id="a" * 32, span_id="b" * 16)
    assert ids.traceparent == f"00-{'a' * 32}-{'b' * 16}-01"
    assert ids.model_dump()["traceparent"] == ids.traceparent
