"""Load test execution exports."""

from .backlog_load_test import (
    backlog_output_dir_path,
    execute_backlog_load_test,
    run_backlog_load_test,
    upload_schema_artifacts,
)
from .run_contracts import (
    LoadTestAssertionError,
    LoadTestExecutionError,
    LoadTestOutcome,
    LoadTestRequest,
    LoadTestStage,
    SchemaArtifacts,
)

__all__ = [
    "LoadTestAssertionError",
    "LoadTestExecutionError",
    "LoadTestOutcome",
    "LoadTestRequest",
    "LoadTestStage",
    "SchemaArtifacts",
    "backlog_output_dir_path",
    "execute_backlog_load_test",
    "run_backlog_load_test",
    "upload_schema_artifacts",
]
