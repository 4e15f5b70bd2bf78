"""Entry point of the setup-telemetry step.

``run_step`` sequences the work against already-built collaborators;
``main`` builds them from the environment and maps failures to exit codes.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

from pydantic import ValidationError

from setup_telemetry.actions.outputs import GitHubActionsSink, OutputSink, render_summary
from setup_telemetry.foundation.config import BuildInfo, RunContext, StepSettings, get_settings
from setup_telemetry.foundation.errors import ConfigurationError, ErrorCode, ResolutionError, StepException
from setup_telemetry.github import JobResolution, JobResolver, WorkflowJobsClient
from setup_telemetry.github.resolver import RESOLVER_RETRYABLE
from setup_telemetry.runtime.observability.logging import BoundLogger, configure_logging, get_logger, log_context
from setup_telemetry.runtime.retry import RetryPolicy
from setup_telemetry.runtime.tracing import TraceIdentifiers, derive_span_id, derive_trace_id

ACTION_NAME = "setup-telemetry"


@dataclass(frozen=True, slots=True)
class StepReport:
    """Everything the step published."""

    identifiers: TraceIdentifiers
    resolution: JobResolution
    trace_link: str | None = None


def run_step(
    context: RunContext,
    sink: OutputSink,
    resolver: JobResolver,
    *,
    backend_url: str | None = None,
    strict: bool = False,
    log: BoundLogger | None = None,
) -> StepReport:
    """Derive identifiers for this job and publish them.

    The trace id is published before the job lookup so consumers receive it
    even when resolution fails.

    Raises:
        ResolutionError: ``strict`` is set and no job record matched
    """
    log = log or get_logger("setup_telemetry")

    trace_id = derive_trace_id(context.run_id, context.run_attempt)
    sink.set_output("trace-id", trace_id)
    log.info(f"trace-id: {trace_id}")

    resolution = resolver.resolve(context)
    if not resolution.found:
        reason = str(resolution.error) if resolution.error else "no matching job"
        if strict:
            raise ResolutionError(f"Error getting job info: {reason}")
        log.warning(
            f"Could not resolve job after {resolution.attempts} attempt(s), "
            f"continuing with job name {resolution.job_name!r}",
            error=reason,
        )

    for name, value in (
        ("job-id", resolution.job_id),
        ("job-name", resolution.job_name),
        ("created-at", resolution.created_at),
        ("started-at", resolution.started_at),
    ):
        sink.set_output(name, value)
        log.info(f"{name}: {value}")

    span_id = derive_span_id(context.run_id, context.run_attempt, resolution.job_name)
    identifiers = TraceIdentifiers(trace_id=trace_id, span_id=span_id)
    sink.set_output("job-span-id", span_id)
    log.info(f"job-span-id: {span_id}")
    sink.set_output("traceparent", identifiers.traceparent)
    log.info(f"traceparent: {identifiers.traceparent}")

    trace_link = f"{backend_url}{trace_id}" if backend_url else None
    if trace_link:
        sink.set_output("trace-link", trace_link)
        log.info(f"trace-link: {trace_link}")

    sink.add_step_summary(render_summary(ACTION_NAME, trace_id, identifiers.traceparent, trace_link))
    return StepReport(identifiers=identifiers, resolution=resolution, trace_link=trace_link)


def _load_settings() -> StepSettings:
    try:
        return get_settings()
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][-1]) for err in e.errors() if err["loc"])
        raise ConfigurationError(f"Invalid configuration: {fields or e}") from e


def main() -> int:
    """Run the step from the environment. Returns the process exit code."""
    log = get_logger("setup_telemetry")
    try:
        settings = _load_settings()
        configure_logging(format=settings.logging.format, level=settings.logging.effective_level)
        build = BuildInfo.from_settings(settings.build)
        log = get_logger("setup_telemetry", version=build.version)
        log.info(f"Starting {ACTION_NAME} version: {build.describe()}")
        if settings.action.repository_owner:
            log.debug("repository owner", owner=settings.action.repository_owner)

        context = RunContext.from_settings(settings)
        policy = RetryPolicy.from_settings(settings.retry, retryable_codes=RESOLVER_RETRYABLE)
        sink = GitHubActionsSink.from_settings(settings.action)

        with (
            WorkflowJobsClient.from_settings(context.token, settings.action.api_url, settings.http) as client,
            log_context(run_id=context.run_id, run_attempt=context.run_attempt),
        ):
            run_step(
                context,
                sink,
                JobResolver(client, policy=policy, log=log.bind(component="resolver")),
                backend_url=settings.action.observability_backend_url,
                strict=settings.action.fail_on_unresolved_job,
                log=log,
            )
    except StepException as e:
        log.error(str(e.error), code=e.error.code.value)
        return 1
    except Exception:
        log.exception("Unexpected failure", code=ErrorCode.UNKNOWN.value)
        return 1
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
