"""Structured logging for the telemetry step.

Log calls carry an event string plus key/value context. Where the entry ends
up depends on the configured renderer:
- ``actions``: workflow commands on stdout, understood by the runner
- ``console``: human-readable lines on stderr for local runs
- ``json``: one orjson document per line

Quick Start:
    >>> from setup_telemetry.runtime.observability.logging import configure_logging, get_logger
    >>> configure_logging(format="actions")
    >>> log = get_logger("resolver", run_id=42)
    >>> log.info("inspecting job", job="build", runner="runner-1")
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO

import orjson

from setup_telemetry.actions.commands import escape_data, format_command

if TYPE_CHECKING:
    from types import TracebackType

JsonValue = str | int | float | bool | None | list[Any] | dict[str, Any]
JsonDict = dict[str, Any]

# Values added by log_context, visible to every logger in scope
_scoped: ContextVar[JsonDict] = ContextVar("scoped_log_context", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Entries and Loggers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LogEntry:
    """One rendered log event."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def when(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)

    @property
    def ts_iso(self) -> str:
        return self.when.isoformat()

    @property
    def ts_human(self) -> str:
        """HH:MM:SS.mmm in UTC."""
        return self.when.strftime("%H:%M:%S.%f")[:-3]

    @property
    def trace(self) -> str | None:
        return self.context.get("exc_info")

    def fields(self) -> list[tuple[str, Any]]:
        """Context pairs sorted by key, traceback excluded."""
        return sorted((k, v) for k, v in self.context.items() if k != "exc_info")

    def plain(self) -> str:
        """Event followed by ``key=value`` pairs, without colors."""
        return " ".join([self.event, *(f"{k}={v}" for k, v in self.fields())])


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying fixed context; ``bind`` derives a logger with more.

    Example:
        >>> log = BoundLogger(context={"component": "resolver"})
        >>> log.bind(attempt=2).info("match found", job="build")
        # => match found attempt=2 component=resolver job=build
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: JsonValue) -> BoundLogger:
        return BoundLogger({**self.context, **kw}, self._renderer, self._level)

    def _emit(self, level: int, event: str, kw: JsonDict) -> None:
        if level < self._level:
            return
        entry = LogEntry(time.time(), logging.getLevelName(level).lower(), event, {**_scoped.get(), **self.context, **kw})
        (self._renderer or _active_renderer()).render(entry)

    def debug(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.DEBUG, event, kw)

    def info(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.INFO, event, kw)

    def warning(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.WARNING, event, kw)

    def error(self, event: str, **kw: JsonValue) -> None:
        self._emit(logging.ERROR, event, kw)

    def exception(self, event: str, **kw: JsonValue) -> None:
        """Error entry with the current traceback attached."""
        self._emit(logging.ERROR, event, {**kw, "exc_info": traceback.format_exc()})


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class WorkflowCommandRenderer:
    """Runner output: debug/warning/error as workflow commands, info as plain lines.

    Info lines are escaped like command messages, so values taken from the
    API cannot start a command of their own.
    """

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        text = entry.plain() if entry.trace is None else f"{entry.plain()}\n{entry.trace}"
        if entry.level in ("debug", "warning", "error"):
            line = format_command(entry.level, text)
        else:
            line = escape_data(text)
        print(line, file=self.output, flush=True)


_ANSI = {"reset": "\033[0m", "dim": "\033[2m", "bold": "\033[1m", "red": "\033[31m",
         "green": "\033[32m", "yellow": "\033[33m", "blue": "\033[34m", "cyan": "\033[36m"}
_LEVEL_COLOR = {"debug": "dim", "info": "green", "warning": "yellow", "error": "red"}


@dataclass(slots=True)
class ConsoleRenderer:
    """Readable lines for local runs: ``[time] [level] event key=value ...``."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = colors when output is a tty
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def _paint(self, text: str, color: str) -> str:
        return f"{_ANSI[color]}{text}{_ANSI['reset']}" if self.colors else text

    def _value(self, value: object) -> str:
        if isinstance(value, str):
            return self._paint(f'"{value}"', "yellow")
        if isinstance(value, bool):
            return self._paint(str(value).lower(), "blue")
        if isinstance(value, int | float):
            return self._paint(str(value), "blue")
        return repr(value)

    def render(self, entry: LogEntry) -> None:
        parts = [self._paint(entry.ts_human, "dim")] if self.show_timestamp else []
        parts.append(self._paint(f"[{entry.level}]", _LEVEL_COLOR.get(entry.level, "dim")))
        parts.append(self._paint(entry.event, "bold"))
        parts.extend(f"{self._paint(k, 'cyan')}={self._value(v)}" for k, v in entry.fields())
        print(" ".join(parts), file=self.output)
        if entry.trace is not None:
            print(self._paint(entry.trace, "red"), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines for log collectors."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        doc = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(doc, default=str).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Discards everything."""

    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("log_renderer", default=None)
_default_level: ContextVar[int] = ContextVar("log_level", default=logging.INFO)
_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def configure_logging(
    format: str = "actions",  # noqa: A002 - matches the setting name
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Select the renderer and minimum level. Format: "actions", "console", "json", "none"."""
    renderer: LogRenderer
    if format == "actions":
        renderer = WorkflowCommandRenderer(output=output or sys.stdout)
    elif format == "console":
        renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
    elif format == "json":
        renderer = JsonRenderer(output=output or sys.stdout)
    elif format == "none":
        renderer = NoOpRenderer()
    else:
        raise ValueError(f"Unknown format: {format}. Use 'actions', 'console', 'json', or 'none'")
    _default_level.set(logging.getLevelName(level.upper()) if level.upper() in _LEVELS else logging.INFO)
    _renderer.set(renderer)
    return renderer


def get_logger(name: str | None = None, **initial_context: JsonValue) -> BoundLogger:
    """Logger at the configured level; ``name`` is recorded as ``logger``."""
    if name:
        initial_context["logger"] = name
    return BoundLogger(context=initial_context, _level=_default_level.get())


def _active_renderer() -> LogRenderer:
    if (renderer := _renderer.get()) is None:
        renderer = WorkflowCommandRenderer()
        _renderer.set(renderer)
    return renderer


class log_context:
    """Adds key/value pairs to every entry logged inside the ``with`` block."""

    __slots__ = ("_values", "_token")

    def __init__(self, **kw: JsonValue) -> None:
        self._values: JsonDict = kw
        self._token: Any = None

    def __enter__(self) -> log_context:
        self._token = _scoped.set({**_scoped.get(), **self._values})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _scoped.reset(self._token)
