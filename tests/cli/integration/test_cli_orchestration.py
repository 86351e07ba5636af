"""CLI orchestration tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from avro_bigtable_load_tester.cli import cli
from avro_bigtable_load_tester.load_testing.run_contracts import (
    LoadTestAssertionError,
    LoadTestOutcome,
    LoadTestRequest,
    LoadTestStage,
)
from avro_bigtable_load_tester.metrics_export.metrics_models import LoadTestMetrics
from click.testing import CliRunner


def _outcome(report_path: Path, *, exported: bool = True) -> LoadTestOutcome:
    return LoadTestOutcome(
        stage=LoadTestStage.CLEANED_UP,
        run_id="run-1",
        job_id="import-job",
        table_id="table-1",
        input_file_pattern="gs://bucket/root/run-1/testBacklog10gb/*",
        sampled_rows=5,
        metrics=LoadTestMetrics(job_id="import-job", values={"RunTime": 100.0}),
        metrics_exported=exported,
        report_path=report_path,
    )


def test_generate_config_then_run_passes_paths_to_load_test(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / "loadtest.yaml"
    report_path = tmp_path / "reports" / "report.xlsx"
    requests: list[LoadTestRequest] = []

    def fake_execute(request: LoadTestRequest) -> LoadTestOutcome:
        requests.append(request)
        return _outcome(report_path)

    monkeypatch.setattr("avro_bigtable_load_tester.cli.execute_backlog_load_test", fake_execute)
    runner = CliRunner()

    generated = runner.invoke(cli, ["generate-config", "--output", str(config_path)])
    result = runner.invoke(
        cli,
        ["run", "--config", str(config_path), "--output-dir", str(tmp_path / "reports")],
    )

    assert generated.exit_code == 0
    assert config_path.exists()
    assert result.exit_code == 0
    assert requests == [
        LoadTestRequest(config_path=str(config_path), output_dir=str(tmp_path / "reports"))
    ]
    assert "job import-job finished; sampled 5 row(s)" in result.output
    assert str(report_path) in result.output


def test_run_reports_assertion_failure_with_stage(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_execute(request: LoadTestRequest) -> LoadTestOutcome:
        raise LoadTestAssertionError(LoadTestStage.JOB_TERMINAL, "Job import-job failed")

    monkeypatch.setattr("avro_bigtable_load_tester.cli.execute_backlog_load_test", fake_execute)

    result = CliRunner().invoke(cli, ["run", "--config", str(tmp_path / "loadtest.yaml")])

    assert result.exit_code != 0
    assert isinstance(result.exception, Exception)
    assert "[JOB_TERMINAL] Job import-job failed" in str(result.exception)
