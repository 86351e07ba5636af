"""Pipeline operation entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from avro_bigtable_load_tester.pipeline_launch.launch_models import LaunchInfo

DEFAULT_POLL_INTERVAL = timedelta(seconds=30)


class OperatorResult(str, Enum):
    """How waiting on a launched job ended."""

    LAUNCH_FINISHED = "LAUNCH_FINISHED"
    LAUNCH_FAILED = "LAUNCH_FAILED"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True)
class OperatorConfig:
    """Which job to wait on and for how long."""

    project: str
    region: str
    job_id: str
    timeout: timedelta
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL


class JobNotFinishedError(Exception):
    """Raised when a job did not reach a successful terminal state."""

    def __init__(self, job_id: str, result: OperatorResult) -> None:
        self.job_id = job_id
        self.result = result
        super().__init__(f"Job {job_id} did not finish successfully: {result.value}")


def create_operator_config(
    info: LaunchInfo,
    timeout: timedelta,
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL,
) -> OperatorConfig:
    return OperatorConfig(
        project=info.project_id,
        region=info.region,
        job_id=info.job_id,
        timeout=timeout,
        poll_interval=poll_interval,
    )
