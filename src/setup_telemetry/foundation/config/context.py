"""Immutable values built once at startup from settings.

``RunContext`` carries everything the resolver and the identifier functions
need, so neither touches the environment. ``BuildInfo`` replaces the
package-level build variables of a stamped binary.
"""

from __future__ import annotations

from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, SecretStr

from setup_telemetry.foundation.errors import ConfigurationError, ErrorCode

from .settings import BuildSettings, StepSettings


def parse_repository(slug: str) -> tuple[str, str]:
    """Split an ``owner/repo`` slug. Exactly one separator, both halves non-empty."""
    parts = slug.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError(f"GITHUB_REPOSITORY environment variable is malformed: {slug}")
    return parts[0], parts[1]


class RunContext(BaseModel):
    """The current workflow run as seen by this process.

    Attributes:
        run_id: Numeric workflow run identifier
        run_attempt: Attempt counter within the run
        repository_owner: Owner half of ``owner/repo``
        repository_name: Repository half of ``owner/repo``
        runner_name: Runner executing this job; the resolver's match key
        token: Bearer credential for the REST API
    """

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    run_id: NonNegativeInt
    run_attempt: NonNegativeInt
    repository_owner: Annotated[str, Field(min_length=1)]
    repository_name: Annotated[str, Field(min_length=1)]
    runner_name: str
    token: SecretStr = Field(repr=False)

    @property
    def repository(self) -> str:
        return f"{self.repository_owner}/{self.repository_name}"

    @classmethod
    def from_settings(cls, settings: StepSettings) -> Self:
        """Validate the action settings into a context.

        Raises:
            ConfigurationError: token missing, repository malformed, or a
                required runner variable absent
        """
        action = settings.action
        if action.github_token is None:
            raise ConfigurationError.create("configure", "No GitHub token provided", ErrorCode.API_KEY_MISSING)
        if action.repository is None:
            raise ConfigurationError("GITHUB_REPOSITORY environment variable is not set")
        owner, name = parse_repository(action.repository)

        missing = [env for env, value in (
            ("GITHUB_RUN_ID", action.run_id),
            ("GITHUB_RUN_ATTEMPT", action.run_attempt),
            ("RUNNER_NAME", action.runner_name),
        ) if value is None]
        if missing:
            raise ConfigurationError(f"Required environment variables not set: {', '.join(missing)}")

        return cls(
            run_id=action.run_id,
            run_attempt=action.run_attempt,
            repository_owner=owner,
            repository_name=name,
            runner_name=action.runner_name,
            token=action.github_token,
        )


class BuildInfo(BaseModel):
    """Version and build stamp of the running step."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str
    date: str = "unknown"
    commit: str = "unknown"

    @classmethod
    def from_settings(cls, build: BuildSettings) -> Self:
        from setup_telemetry import __version__
        return cls(version=__version__, date=build.date, commit=build.commit)

    def describe(self) -> str:
        return f"{self.version} ({self.date}) commit: {self.commit}"
