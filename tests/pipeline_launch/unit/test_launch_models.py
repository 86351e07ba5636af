"""Pipeline launch entity tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from avro_bigtable_load_tester.pipeline_launch.launch_models import (
    JobState,
    LaunchConfig,
    create_job_name,
)


@pytest.mark.parametrize(
    ("state", "pending", "active", "done", "failed"),
    [
        (JobState.QUEUED, True, False, False, False),
        (JobState.RUNNING, False, True, False, False),
        (JobState.DONE, False, False, True, False),
        (JobState.DRAINED, False, False, True, False),
        (JobState.FAILED, False, False, False, True),
        (JobState.CANCELLED, False, False, False, True),
        (JobState.CANCELLING, False, False, False, False),
    ],
)
def test_job_state_classification(
    state: JobState, pending: bool, active: bool, done: bool, failed: bool
) -> None:
    assert state.is_pending is pending
    assert state.is_active is active
    assert state.is_done is done
    assert state.is_failed is failed
    assert state.is_terminal is (done or failed)


def test_unknown_state_strings_parse_as_unknown() -> None:
    assert JobState.parse("JOB_STATE_RUNNING") is JobState.RUNNING
    assert JobState.parse("SOMETHING_NEW") is JobState.UNKNOWN
    assert JobState.parse(None) is JobState.UNKNOWN


def test_job_name_is_lower_case_and_timestamped() -> None:
    now = datetime(2024, 3, 5, 7, 8, 9, 1, tzinfo=UTC)

    assert create_job_name("testBacklog10gb", now) == "testbacklog10gb-20240305070809000001"
    assert create_job_name("42_Import", now).startswith("job-42-import-")
    assert len(create_job_name("x" * 100, now)) <= 63


def test_launch_config_parameters_are_immutable_strings() -> None:
    config = LaunchConfig.create(
        "testBacklog10gb",
        "gs://templates/spec",
        parameters={"qps": 1000, "inputFilePattern": "gs://bucket/dir/*"},
    )

    assert config.template_type == "classic"
    assert dict(config.parameters) == {"qps": "1000", "inputFilePattern": "gs://bucket/dir/*"}
    with pytest.raises(TypeError):
        config.parameters["qps"] = "1"  # type: ignore[index]


def test_with_parameter_returns_new_config_and_keeps_original() -> None:
    config = LaunchConfig.create("testBacklog10gb", "gs://templates/spec")

    updated = config.with_parameter("bigtableTableId", "table-1")

    assert "bigtableTableId" not in config.parameters
    assert updated.parameters["bigtableTableId"] == "table-1"
    assert updated.job_name == config.job_name


def test_unsupported_template_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported template type"):
        LaunchConfig(job_name="job", spec_path="gs://templates/spec", template_type="python")
