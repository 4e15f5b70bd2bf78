"""Configuration: environment settings and the immutable run context."""

from .context import BuildInfo, RunContext, parse_repository
from .settings import (
    DEFAULT_API_URL,
    ActionSettings,
    BuildSettings,
    HttpSettings,
    LoggingSettings,
    RetrySettings,
    StepSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "DEFAULT_API_URL",
    "ActionSettings",
    "BuildSettings",
    "HttpSettings",
    "LoggingSettings",
    "RetrySettings",
    "StepSettings",
    "clear_settings_cache",
    "get_settings",
    "BuildInfo",
    "RunContext",
    "parse_repository",
]
