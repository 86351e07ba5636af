"""Pipeline operation exports."""

from .operator_models import (
    JobNotFinishedError,
    OperatorConfig,
    OperatorResult,
    create_operator_config,
)
from .pipeline_operator import JobStatusSource, PipelineOperator, assert_launch_finished

__all__ = [
    "JobNotFinishedError",
    "JobStatusSource",
    "OperatorConfig",
    "OperatorResult",
    "PipelineOperator",
    "assert_launch_finished",
    "create_operator_config",
]
