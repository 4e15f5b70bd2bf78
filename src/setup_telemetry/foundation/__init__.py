"""Foundation - Core building blocks for setup-telemetry.

Contains: error handling, configuration, testing helpers.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "StepError", "StepException", "classify_exception",
    "ConfigurationError", "GitHubApiError", "JobNotVisibleError", "ResolutionError",
    # Config
    "StepSettings", "get_settings", "clear_settings_cache",
    "ActionSettings", "LoggingSettings", "RetrySettings", "HttpSettings", "BuildSettings",
    "RunContext", "BuildInfo", "parse_repository",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("ErrorCode", "StepError", "StepException", "classify_exception",
                "ConfigurationError", "GitHubApiError", "JobNotVisibleError", "ResolutionError"):
        from . import errors
        return getattr(errors, name)
    if name in __all__:
        from . import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
