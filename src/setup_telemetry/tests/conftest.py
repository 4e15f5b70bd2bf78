"""Shared fixtures: an isolated environment and silent logging for every test."""

from __future__ import annotations

import os

import pytest
from pydantic import SecretStr

from setup_telemetry.foundation.config import RunContext, clear_settings_cache
from setup_telemetry.runtime.observability.logging import configure_logging

_ENV_PREFIXES = ("GITHUB_", "INPUT_", "RUNNER_", "SETUP_TELEMETRY_")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> object:
    """Drop runner variables (tests may themselves run on Actions) and reset caches."""
    for key in list(os.environ):
        if key.upper().startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    configure_logging(format="none")
    yield
    clear_settings_cache()


@pytest.fixture
def context() -> RunContext:
    return RunContext(
        run_id=1000,
        run_attempt=1,
        repository_owner="octo-org",
        repository_name="octo-repo",
        runner_name="runner-1",
        token=SecretStr("ghp_test"),
    )


@pytest.fixture
def runner_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Environment of a runner executing job attempt 1 of run 1000."""
    monkeypatch.setenv("INPUT_GITHUB-TOKEN", "ghp_test")
    monkeypatch.setenv("GITHUB_RUN_ID", "1000")
    monkeypatch.setenv("GITHUB_RUN_ATTEMPT", "1")
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo-org/octo-repo")
    monkeypatch.setenv("GITHUB_REPOSITORY_OWNER", "octo-org")
    monkeypatch.setenv("RUNNER_NAME", "runner-1")
    return monkeypatch
