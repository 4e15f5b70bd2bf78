"""Environment-based configuration using pydantic-settings.

Every environment read of the step happens here. GitHub Actions passes action
inputs as ``INPUT_<NAME>`` variables (upper-cased, hyphens kept) next to the
``GITHUB_*`` and ``RUNNER_*`` defaults; tuning knobs use the
``SETUP_TELEMETRY_`` prefix.

Example:
    >>> from setup_telemetry.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.max_attempts
    3

    # Or with environment variables:
    # SETUP_TELEMETRY_RETRY_MAX_ATTEMPTS=5
    # SETUP_TELEMETRY_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import (
    Field,
    NonNegativeInt,
    PositiveFloat,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.github.com"


class ActionSettings(BaseSettings):
    """Action inputs and runner-provided environment.

    Values are read verbatim from the environment; validation that needs more
    than one field (the ``owner/repo`` split, the required token) lives in
    ``RunContext.from_settings`` so it raises a ``ConfigurationError``.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
    )

    github_token: SecretStr | None = Field(default=None, validation_alias="INPUT_GITHUB-TOKEN")
    observability_backend_url: str | None = Field(
        default=None,
        validation_alias="INPUT_OBSERVABILITY-BACKEND-URL",
        description="Prefix joined with the trace id to build a trace link",
    )
    fail_on_unresolved_job: bool = Field(
        default=False,
        validation_alias="INPUT_FAIL-ON-UNRESOLVED-JOB",
        description="Exit non-zero when the job record cannot be resolved",
    )

    run_id: NonNegativeInt | None = Field(default=None, validation_alias="GITHUB_RUN_ID")
    run_attempt: NonNegativeInt | None = Field(default=None, validation_alias="GITHUB_RUN_ATTEMPT")
    repository: str | None = Field(default=None, validation_alias="GITHUB_REPOSITORY")
    repository_owner: str | None = Field(default=None, validation_alias="GITHUB_REPOSITORY_OWNER")
    runner_name: str | None = Field(default=None, validation_alias="RUNNER_NAME")
    api_url: str = Field(default=DEFAULT_API_URL, validation_alias="GITHUB_API_URL")

    output_file: str | None = Field(default=None, validation_alias="GITHUB_OUTPUT")
    summary_file: str | None = Field(default=None, validation_alias="GITHUB_STEP_SUMMARY")

    @field_validator(
        "github_token", "observability_backend_url", "run_id", "run_attempt", "repository",
        "repository_owner", "runner_name", "output_file", "summary_file",
        mode="before",
    )
    @classmethod
    def _empty_as_unset(cls, v: object) -> object:
        """Runners export unset inputs as empty strings."""
        return None if isinstance(v, str) and not v.strip() else v

    @field_validator("fail_on_unresolved_job", mode="before")
    @classmethod
    def _empty_as_false(cls, v: object) -> object:
        return False if isinstance(v, str) and not v.strip() else v

    @field_validator("api_url", mode="before")
    @classmethod
    def _default_api_url(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().rstrip("/") or DEFAULT_API_URL
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SETUP_TELEMETRY_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["actions", "console", "json"] = "actions"
    runner_debug: bool = Field(default=False, validation_alias="RUNNER_DEBUG", description="Set by the runner on debug re-runs")

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("runner_debug", mode="before")
    @classmethod
    def _empty_as_false(cls, v: object) -> object:
        return False if isinstance(v, str) and not v.strip() else v

    @property
    def effective_level(self) -> str:
        return "DEBUG" if self.runner_debug else self.level


class RetrySettings(BaseSettings):
    """Job lookup retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SETUP_TELEMETRY_RETRY_",
        extra="ignore",
    )

    max_attempts: Annotated[int, Field(ge=1, le=10)] = 3
    delay: PositiveFloat = Field(default=3.0, description="Delay between attempts in seconds")
    strategy: Literal["constant", "exponential"] = "constant"
    max_delay: PositiveFloat = Field(default=30.0, description="Cap for exponential delays")


class HttpSettings(BaseSettings):
    """GitHub REST client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SETUP_TELEMETRY_HTTP_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=30.0, description="Request timeout in seconds")
    per_page: Annotated[int, Field(ge=1, le=100)] = 100
    user_agent: str = "setup-telemetry"


class BuildSettings(BaseSettings):
    """Build metadata stamped in at packaging time."""

    model_config = SettingsConfigDict(
        env_prefix="SETUP_TELEMETRY_BUILD_",
        extra="ignore",
    )

    date: str = "unknown"
    commit: str = "unknown"


class StepSettings(BaseSettings):
    """Root settings for the telemetry step."""

    model_config = SettingsConfigDict(extra="ignore")

    action: ActionSettings = Field(default_factory=ActionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)


@lru_cache(maxsize=1)
def get_settings() -> StepSettings:
    """Get the settings instance (cached)."""
    return StepSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
