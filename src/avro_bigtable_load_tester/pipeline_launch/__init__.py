"""Pipeline launch exports."""

from .dataflow_launcher import (
    DataflowPipelineLauncher,
    assert_pipeline_running,
    build_dataflow_service,
)
from .launch_models import (
    ACTIVE_STATES,
    DONE_STATES,
    FAILED_STATES,
    PENDING_STATES,
    JobState,
    LaunchConfig,
    LaunchInfo,
    PipelineLaunchError,
    create_job_name,
)

__all__ = [
    "ACTIVE_STATES",
    "DONE_STATES",
    "FAILED_STATES",
    "PENDING_STATES",
    "DataflowPipelineLauncher",
    "JobState",
    "LaunchConfig",
    "LaunchInfo",
    "PipelineLaunchError",
    "assert_pipeline_running",
    "build_dataflow_service",
    "create_job_name",
]
