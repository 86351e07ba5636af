"""Load test run entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from avro_bigtable_load_tester.metrics_export.metrics_models import LoadTestMetrics


class LoadTestStage(str, Enum):
    """Strictly sequential stages of one run; any failure skips to CLEANED_UP."""

    INIT = "INIT"
    RESOURCES_READY = "RESOURCES_READY"
    DATA_GENERATED = "DATA_GENERATED"
    JOB_LAUNCHED = "JOB_LAUNCHED"
    JOB_TERMINAL = "JOB_TERMINAL"
    ASSERTED = "ASSERTED"
    METRICS_EXPORTED = "METRICS_EXPORTED"
    CLEANED_UP = "CLEANED_UP"


@dataclass(frozen=True)
class LoadTestRequest:
    """Input contract for executing one run."""

    config_path: str | None
    output_dir: str | None = None


@dataclass(frozen=True)
class SchemaArtifacts:
    """Fully qualified locations of the uploaded schema descriptors."""

    generator_schema_path: str
    avro_schema_path: str


@dataclass(frozen=True)
class LoadTestOutcome:  # pylint: disable=too-many-instance-attributes
    """Output contract for one completed run."""

    stage: LoadTestStage
    run_id: str
    job_id: str
    table_id: str
    input_file_pattern: str
    sampled_rows: int
    metrics: LoadTestMetrics
    metrics_exported: bool
    report_path: Path | None


class LoadTestExecutionError(Exception):
    """Raised when a run cannot be completed.

    ``stage`` is the last stage the run reached before failing.
    """

    def __init__(self, stage: LoadTestStage, message: str) -> None:
        self.stage = stage
        super().__init__(f"[{stage.value}] {message}")


class LoadTestAssertionError(LoadTestExecutionError):
    """Raised when a post-condition of the run does not hold."""
