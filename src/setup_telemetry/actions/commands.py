"""GitHub Actions workflow command formatting.

Workflow commands are lines of the form ``::name key=value,...::message``
written to stdout. Messages and property values are percent-escaped so that
newlines and separators cannot end a command early.
"""

from __future__ import annotations

import uuid


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: str) -> str:
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def format_command(command: str, message: str = "", /, **properties: str) -> str:
    """Render one workflow command line.

    Example:
        >>> format_command("error", "boom", title="resolver")
        '::error title=resolver::boom'
    """
    props = ",".join(f"{k}={escape_property(str(v))}" for k, v in properties.items() if v is not None)
    return f"::{command}{' ' + props if props else ''}::{escape_data(message)}"


def file_command_entry(key: str, value: str, delimiter: str | None = None) -> str:
    """Render a ``key<<delimiter`` block for GITHUB_OUTPUT-style files.

    Raises:
        ValueError: the key or value contains the delimiter
    """
    delimiter = delimiter or f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in key or delimiter in value:
        raise ValueError(f"Unexpected input: name or value contains delimiter {delimiter}")
    return f"{key}<<{delimiter}\n{value}\n{delimiter}\n"
