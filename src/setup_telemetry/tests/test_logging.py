"""Tests for structured logging renderers and bound context."""

from __future__ import annotations

import io

import orjson
import pytest

from setup_telemetry.foundation.testing import CapturingRenderer
from setup_telemetry.runtime.observability.logging import (
    BoundLogger,
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
    WorkflowCommandRenderer,
    configure_logging,
    get_logger,
    log_context,
)


def test_bind_merges_context_without_mutating() -> None:
    renderer = CapturingRenderer()
    base = BoundLogger(context={"component": "resolver"}, _renderer=renderer)
    bound = base.bind(run_id=42)

    bound.info("hello", job="build")
    base.info("bare")

    first, second = renderer.entries
    assert first.context == {"component": "resolver", "run_id": 42, "job": "build"}
    assert second.context == {"component": "resolver"}
    assert base.context == {"component": "resolver"}


def test_level_filtering() -> None:
    renderer = CapturingRenderer()
    log = BoundLogger(_renderer=renderer, _level=30)
    log.debug("hidden")
    log.info("hidden")
    log.warning("shown")
    assert renderer.events() == ["shown"]


def test_log_context_scopes_values() -> None:
    renderer = CapturingRenderer()
    log = BoundLogger(_renderer=renderer)
    with log_context(step="resolve"):
        log.info("inside")
    log.info("outside")
    assert renderer.entries[0].context == {"step": "resolve"}
    assert renderer.entries[1].context == {}


def test_workflow_command_renderer() -> None:
    out = io.StringIO()
    log = BoundLogger(_renderer=WorkflowCommandRenderer(output=out))

    log.info("trace-id: abc")
    log.warning("retrying\nsoon", attempt=1)
    log.debug("detail")

    assert out.getvalue().splitlines() == [
        "trace-id: abc",
        "::warning::retrying%0Asoon attempt=1",
        "::debug::detail",
    ]


def test_workflow_command_renderer_escapes_info_lines() -> None:
    out = io.StringIO()
    log = BoundLogger(_renderer=WorkflowCommandRenderer(output=out))

    log.info("job-name: build\n::error::injected", job="a\r\nb")

    (line,) = out.getvalue().splitlines()
    assert line == "job-name: build%0A::error::injected job=a%0D%0Ab"


def test_exception_attaches_traceback() -> None:
    renderer = CapturingRenderer()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        BoundLogger(_renderer=renderer).exception("failed")
    (entry,) = renderer.entries
    assert entry.level == "error"
    assert "RuntimeError: boom" in (entry.trace or "")
    assert entry.plain() == "failed"


def test_json_renderer() -> None:
    out = io.StringIO()
    BoundLogger(context={"run_id": 7}, _renderer=JsonRenderer(output=out)).error("boom")
    record = orjson.loads(out.getvalue())
    assert record["level"] == "error"
    assert record["event"] == "boom"
    assert record["run_id"] == 7
    assert "timestamp" in record


def test_console_renderer_without_colors() -> None:
    out = io.StringIO()
    renderer = ConsoleRenderer(output=out, colors=False, show_timestamp=False)
    BoundLogger(_renderer=renderer).info("match found", job="build")
    assert out.getvalue() == '[info] match found job="build"\n'


@pytest.mark.parametrize(("fmt", "kind"), [
    ("actions", WorkflowCommandRenderer),
    ("console", ConsoleRenderer),
    ("json", JsonRenderer),
    ("none", NoOpRenderer),
])
def test_configure_logging_formats(fmt: str, kind: type) -> None:
    assert isinstance(configure_logging(format=fmt), kind)


def test_configure_logging_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging(format="xml")


def test_get_logger_uses_configured_level() -> None:
    configure_logging(format="none", level="warning")
    log = get_logger("setup_telemetry.test", run_id=1)
    assert log.context == {"run_id": 1, "logger": "setup_telemetry.test"}
    assert log._level == 30
