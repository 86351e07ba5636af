"""Dataflow template launcher backed by the Dataflow REST API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any

import google.auth
from googleapiclient import discovery
from googleapiclient.errors import HttpError

from .launch_models import JobState, LaunchConfig, LaunchInfo, PipelineLaunchError

logger = logging.getLogger(__name__)

_DEFAULT_LAUNCH_TIMEOUT = timedelta(minutes=10)
_DEFAULT_LAUNCH_POLL_SECONDS = 10


def build_dataflow_service(credentials: Any = None) -> Any:
    """Build a ``dataflow v1b3`` client using application default credentials."""
    if credentials is None:
        credentials, _ = google.auth.default(
            scopes=["https://www.googleapis.com/auth/cloud-platform"]
        )
    return discovery.build("dataflow", "v1b3", credentials=credentials, cache_discovery=False)


class DataflowPipelineLauncher:
    """Submits classic or flex templates and reads job state and metrics.

    ``launch`` returns once the job has left the pending states, bounded by
    ``launch_timeout``. No call is retried; API errors surface as
    ``PipelineLaunchError``.
    ``cleanup_all`` cancels every launched job that is still live.
    """

    def __init__(
        self,
        service: Any,
        *,
        launch_timeout: timedelta = _DEFAULT_LAUNCH_TIMEOUT,
        poll_interval_seconds: float = _DEFAULT_LAUNCH_POLL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        self._launch_timeout = launch_timeout
        self._poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep
        self._monotonic = monotonic
        self._launched_jobs: list[tuple[str, str, str]] = []
        self._cancelled_jobs: set[str] = set()

    def launch(self, project: str, region: str, config: LaunchConfig) -> LaunchInfo:
        """Submit ``config`` and wait for the job to become active or finish."""
        logger.info(
            "Launching %s template %s as %s",
            config.template_type,
            config.spec_path,
            config.job_name,
        )
        try:
            job = self._submit(project, region, config)
        except HttpError as exc:
            raise PipelineLaunchError(f"Failed to launch {config.job_name}: {exc}") from exc
        job_id = job.get("id")
        if not job_id:
            raise PipelineLaunchError(f"Launch of {config.job_name} returned no job id.")
        self._launched_jobs.append((project, region, job_id))

        job = self._wait_until_active(project, region, job_id)
        state = JobState.parse(job.get("currentState"))
        logger.info("Job %s is %s", job_id, state.value)
        return LaunchInfo(
            job_id=job_id,
            project_id=project,
            region=region,
            state=state,
            create_time=job.get("createTime"),
            job_name=config.job_name,
            spec_path=config.spec_path,
            parameters=config.parameters,
        )

    def get_job(self, project: str, region: str, job_id: str) -> Mapping[str, Any]:
        try:
            return (
                self._service.projects()
                .locations()
                .jobs()
                .get(projectId=project, location=region, jobId=job_id)
                .execute()
            )
        except HttpError as exc:
            raise PipelineLaunchError(f"Failed to get job {job_id}: {exc}") from exc

    def get_job_state(self, project: str, region: str, job_id: str) -> JobState:
        return JobState.parse(self.get_job(project, region, job_id).get("currentState"))

    def get_job_metrics(self, project: str, region: str, job_id: str) -> list[Mapping[str, Any]]:
        try:
            response = (
                self._service.projects()
                .locations()
                .jobs()
                .getMetrics(projectId=project, location=region, jobId=job_id)
                .execute()
            )
        except HttpError as exc:
            raise PipelineLaunchError(f"Failed to get metrics of job {job_id}: {exc}") from exc
        return list(response.get("metrics", []))

    def cancel_job(self, project: str, region: str, job_id: str) -> JobState:
        """Request cancellation and return the state reported back."""
        logger.info("Cancelling job %s", job_id)
        try:
            job = (
                self._service.projects()
                .locations()
                .jobs()
                .update(
                    projectId=project,
                    location=region,
                    jobId=job_id,
                    body={"requestedState": JobState.CANCELLED.value},
                )
                .execute()
            )
        except HttpError as exc:
            raise PipelineLaunchError(f"Failed to cancel job {job_id}: {exc}") from exc
        self._cancelled_jobs.add(job_id)
        return JobState.parse(job.get("currentState"))

    def cleanup_all(self) -> None:
        """Cancel launched jobs that are neither terminal nor already cancelled."""
        for project, region, job_id in self._launched_jobs:
            if job_id in self._cancelled_jobs:
                continue
            state = self.get_job_state(project, region, job_id)
            if state.is_terminal or state is JobState.CANCELLING:
                continue
            self.cancel_job(project, region, job_id)

    def _submit(self, project: str, region: str, config: LaunchConfig) -> Mapping[str, Any]:
        locations = self._service.projects().locations()
        if config.template_type == "flex":
            response = (
                locations.flexTemplates()
                .launch(
                    projectId=project,
                    location=region,
                    body={
                        "launchParameter": {
                            "jobName": config.job_name,
                            "containerSpecGcsPath": config.spec_path,
                            "parameters": dict(config.parameters),
                        }
                    },
                )
                .execute()
            )
        else:
            response = (
                locations.templates()
                .launch(
                    projectId=project,
                    location=region,
                    gcsPath=config.spec_path,
                    body={"jobName": config.job_name, "parameters": dict(config.parameters)},
                )
                .execute()
            )
        return response.get("job") or {}

    def _wait_until_active(self, project: str, region: str, job_id: str) -> Mapping[str, Any]:
        deadline = self._monotonic() + self._launch_timeout.total_seconds()
        while True:
            job = self.get_job(project, region, job_id)
            state = JobState.parse(job.get("currentState"))
            if not state.is_pending:
                return job
            if self._monotonic() >= deadline:
                raise PipelineLaunchError(
                    f"Job {job_id} still {state.value} after {self._launch_timeout}."
                )
            self._sleep(self._poll_interval_seconds)


def assert_pipeline_running(info: LaunchInfo) -> None:
    """Raise ``PipelineLaunchError`` unless the launched job is running or already done."""
    if not (info.state.is_active or info.state.is_done):
        raise PipelineLaunchError(
            f"Expected job {info.job_id} to be running but it is {info.state.value}."
        )
