"""Step outputs and job summary.

The sink is the only place that writes results back to the runner:
named outputs go to ``$GITHUB_OUTPUT`` and markdown to
``$GITHUB_STEP_SUMMARY``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, TextIO, runtime_checkable

from setup_telemetry.runtime.observability.logging import BoundLogger, get_logger

from .commands import file_command_entry, format_command

if TYPE_CHECKING:
    from setup_telemetry.foundation.config import ActionSettings


@runtime_checkable
class OutputSink(Protocol):
    """Where step outputs and the summary are published."""

    def set_output(self, name: str, value: str) -> None: ...
    def add_step_summary(self, markdown: str) -> None: ...


@dataclass(slots=True)
class GitHubActionsSink:
    """Writes outputs and summary through the runner's file commands.

    Without ``GITHUB_OUTPUT`` (old runners, local runs) outputs fall back to
    the ``set-output`` workflow command on stdout. Without
    ``GITHUB_STEP_SUMMARY`` the summary is skipped.
    """

    output_file: str | None = None
    summary_file: str | None = None
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    log: BoundLogger = field(default_factory=lambda: get_logger("setup_telemetry.outputs"))

    @classmethod
    def from_settings(cls, action: ActionSettings) -> GitHubActionsSink:
        return cls(output_file=action.output_file, summary_file=action.summary_file)

    def set_output(self, name: str, value: str) -> None:
        if self.output_file is None:
            print(format_command("set-output", value, name=name), file=self.stdout)
            return
        with open(self.output_file, "a", encoding="utf-8") as f:
            f.write(file_command_entry(name, value))

    def add_step_summary(self, markdown: str) -> None:
        if self.summary_file is None:
            self.log.debug("GITHUB_STEP_SUMMARY not set, skipping job summary")
            return
        with open(self.summary_file, "a", encoding="utf-8") as f:
            f.write(f"{markdown}\n")


def render_summary(action_name: str, trace_id: str, traceparent: str, trace_link: str | None = None) -> str:
    """Markdown block appended to the job summary."""
    lines = [
        f"### 🚦 {action_name}",
        f"trace-id: `{trace_id}`",
        f"traceparent: `{traceparent}`",
    ]
    if trace_link:
        lines += ["", f"🔗 [View trace]({trace_link})"]
    return "\n".join(lines) + "\n"
