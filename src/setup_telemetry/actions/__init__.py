"""Actions runner I/O: workflow commands, step outputs and the job summary."""

from __future__ import annotations

__all__ = [
    # Commands
    "escape_data", "escape_property", "file_command_entry", "format_command",
    # Outputs
    "GitHubActionsSink", "OutputSink", "render_summary",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies with logging."""
    if name in ("escape_data", "escape_property", "file_command_entry", "format_command"):
        from . import commands
        return getattr(commands, name)
    if name in ("GitHubActionsSink", "OutputSink", "render_summary"):
        from . import outputs
        return getattr(outputs, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
