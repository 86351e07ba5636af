"""Scenario-style integration tests for the backlog load test.

Real resource managers run against in-memory cloud clients so every scenario
can check what was left behind.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest
from avro_bigtable_load_tester.configuration.loader import load_configuration
from avro_bigtable_load_tester.load_testing import (
    LoadTestAssertionError,
    LoadTestExecutionError,
    run_backlog_load_test,
)
from avro_bigtable_load_tester.pipeline_launch.launch_models import JobState, LaunchInfo
from avro_bigtable_load_tester.pipeline_operation.operator_models import OperatorResult
from avro_bigtable_load_tester.resource_management import (
    BigtableResourceManager,
    GcsArtifactClient,
)

CONFIG = """
gcp:
  project: my-project
storage:
  artifact_bucket: my-bucket
pipeline:
  input_stage: ReadAvro.out0
  output_stage: WriteBigtable.out0
"""


class InMemoryCloud:
    """Bigtable and GCS state shared by the fake clients of one scenario."""

    def __init__(self) -> None:
        self.instances: dict[str, dict[str, list]] = {}
        self.deleted_instances: list[str] = []
        self.objects: dict[str, bytes] = {}
        self.rows_per_table = 5

    def bigtable_client(self, **kwargs) -> SimpleNamespace:
        return SimpleNamespace(instance=lambda instance_id, **_: _Instance(self, instance_id))

    def storage_client(self, **kwargs) -> SimpleNamespace:
        def list_blobs(bucket: str, prefix: str):
            return [_Blob(self, name) for name in list(self.objects) if name.startswith(prefix)]

        return SimpleNamespace(
            bucket=lambda name: SimpleNamespace(blob=lambda object_name: _Blob(self, object_name)),
            list_blobs=list_blobs,
        )


class _Blob:
    def __init__(self, cloud: InMemoryCloud, name: str) -> None:
        self._cloud = cloud
        self.name = name

    def upload_from_filename(self, filename: str) -> None:
        self._cloud.objects[self.name] = Path(filename).read_bytes()

    def delete(self) -> None:
        self._cloud.objects.pop(self.name)


class _Instance:
    def __init__(self, cloud: InMemoryCloud, instance_id: str) -> None:
        self._cloud = cloud
        self._instance_id = instance_id

    def cluster(self, cluster_id: str, **kwargs) -> str:
        return cluster_id

    def create(self, clusters) -> SimpleNamespace:
        self._cloud.instances[self._instance_id] = {}
        return SimpleNamespace(result=lambda timeout=None: None)

    def delete(self) -> None:
        self._cloud.instances.pop(self._instance_id)
        self._cloud.deleted_instances.append(self._instance_id)

    def table(self, table_id: str) -> SimpleNamespace:
        tables = self._cloud.instances.setdefault(self._instance_id, {})

        def create(column_families) -> None:
            tables[table_id] = [
                SimpleNamespace(row_key=f"row-{i}".encode(), cells={"SystemMetrics": {}})
                for i in range(self._cloud.rows_per_table)
            ]

        return SimpleNamespace(
            exists=lambda: table_id in tables,
            create=create,
            read_rows=lambda limit: tables[table_id][:limit],
            delete=lambda: tables.pop(table_id),
        )


class ScriptedDataflow:
    """Launcher and operator that complete jobs with scripted results."""

    def __init__(self, import_result: OperatorResult = OperatorResult.LAUNCH_FINISHED) -> None:
        self.import_result = import_result
        self.generated_into: str | None = None
        self.import_pattern: str | None = None
        self.cancelled: list[str] = []

    def launch(self, project, region, config) -> LaunchInfo:
        if config.template_type == "flex":
            self.generated_into = config.parameters["outputDirectory"]
            job_id = "generator-job"
        else:
            self.import_pattern = config.parameters["inputFilePattern"]
            job_id = "import-job"
        return LaunchInfo(
            job_id=job_id,
            project_id=project,
            region=region,
            state=JobState.RUNNING,
            create_time=None,
            job_name=config.job_name,
            spec_path=config.spec_path,
            parameters=config.parameters,
        )

    def cancel_job(self, project, region, job_id) -> JobState:
        self.cancelled.append(job_id)
        return JobState.CANCELLING

    def cleanup_all(self) -> None:
        pass

    def wait_until_done(self, config) -> OperatorResult:
        if config.job_id == "import-job":
            return self.import_result
        return OperatorResult.LAUNCH_FINISHED

    def get_job(self, project, region, job_id) -> dict:
        return {"startTime": "2024-03-05T07:00:00Z", "currentStateTime": "2024-03-05T07:10:00Z"}

    def get_job_metrics(self, project, region, job_id) -> list[dict]:
        return [
            {
                "name": {"name": "ElementCount", "context": {"output_user_name": stage}},
                "scalar": 6e5,
            }
            for stage in ("ReadAvro.out0", "WriteBigtable.out0")
        ]


def _run(tmp_path: Path, cloud: InMemoryCloud, dataflow: ScriptedDataflow, config: str = CONFIG):
    config_path = tmp_path / "loadtest.yaml"
    config_path.write_text(config, encoding="utf-8")
    return run_backlog_load_test(
        load_configuration(config_path, environ={}),
        output_dir=str(tmp_path / "reports"),
        bigtable_manager_factory=lambda test_name, project, settings: (
            BigtableResourceManager.create(
                test_name, project, settings, client_factory=cloud.bigtable_client
            )
        ),
        artifact_client_factory=lambda project, bucket, root_dir: GcsArtifactClient.create(
            project, bucket, root_dir, client_factory=cloud.storage_client
        ),
        launcher=dataflow,
        operator=dataflow,
    )


def test_import_reads_exactly_what_the_generator_wrote_and_leaves_nothing_behind(
    tmp_path: Path,
) -> None:
    cloud = InMemoryCloud()
    dataflow = ScriptedDataflow()

    outcome = _run(tmp_path, cloud, dataflow)

    assert dataflow.import_pattern == f"{dataflow.generated_into}/*"
    assert dataflow.generated_into == (
        f"gs://my-bucket/avrotobigtablelt/{outcome.run_id}/testBacklog10gb"
    )
    assert outcome.sampled_rows == 5
    assert outcome.metrics.values["AvgOutputThroughputElementsPerSec"] == pytest.approx(1000.0)
    assert cloud.instances == {}
    assert len(cloud.deleted_instances) == 1
    assert cloud.objects == {}


def test_failed_import_still_deletes_instance_and_artifacts(tmp_path: Path) -> None:
    cloud = InMemoryCloud()

    with pytest.raises(LoadTestAssertionError):
        _run(tmp_path, cloud, ScriptedDataflow(OperatorResult.LAUNCH_FAILED))

    assert cloud.instances == {}
    assert cloud.objects == {}


def test_static_instance_survives_the_run_without_its_test_table(tmp_path: Path) -> None:
    cloud = InMemoryCloud()
    cloud.instances["shared"] = {}

    _run(
        tmp_path,
        cloud,
        ScriptedDataflow(),
        config=f"{CONFIG}bigtable:\n  instance_id: shared\n",
    )

    assert cloud.instances == {"shared": {}}
    assert cloud.deleted_instances == []


def test_empty_table_fails_and_cleans_up(tmp_path: Path) -> None:
    cloud = InMemoryCloud()
    cloud.rows_per_table = 0

    with pytest.raises(LoadTestExecutionError, match="No rows reached table"):
        _run(tmp_path, cloud, ScriptedDataflow())

    assert cloud.instances == {}
    assert cloud.objects == {}


def test_import_timeout_cancels_the_job_and_releases_resources(tmp_path: Path) -> None:
    cloud = InMemoryCloud()
    dataflow = ScriptedDataflow(OperatorResult.TIMEOUT)

    with pytest.raises(LoadTestAssertionError, match="TIMEOUT"):
        _run(tmp_path, cloud, dataflow)

    assert dataflow.cancelled == ["import-job"]
    assert cloud.instances == {}
    assert cloud.objects == {}
