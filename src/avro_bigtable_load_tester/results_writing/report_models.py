"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RunMetadata:  # pylint: disable=too-many-instance-attributes
    """Metadata rendered into the RunInfo sheet."""

    run_start: datetime
    run_end: datetime
    test_name: str
    run_id: str
    job_id: str
    spec_path: str
    instance_id: str
    table_id: str
    input_file_pattern: str
    sampled_rows: int
    metrics_exported: bool
