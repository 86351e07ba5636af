"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_TEMPLATE_SPEC_PATH = "gs://dataflow-templates/latest/GCS_Avro_to_Cloud_Bigtable"
DEFAULT_GENERATOR_SPEC_PATH = "gs://dataflow-templates/latest/flex/Streaming_Data_Generator"
DEFAULT_INPUT_STAGE = (
    "Read from Avro/Read/ParDo(BoundedSourceAsSDFWrapper)"
    "/ParMultiDo(BoundedSourceAsSDFWrapper).out0"
)
DEFAULT_OUTPUT_STAGE = "Transform to Bigtable/ParMultiDo(AvroToBigtable).out0"


@dataclass(frozen=True)
class GcpSettings:
    """Project and region every managed resource is scoped to."""

    project: str
    region: str


@dataclass(frozen=True)
class IdentitySettings:
    """Names that scope provisioned resources and uploaded artifacts."""

    test_class: str
    test_name: str

    @property
    def test_root_dir(self) -> str:
        return self.test_class.lower()


@dataclass(frozen=True)
class StorageSettings:
    """Artifact bucket configuration."""

    artifact_bucket: str


@dataclass(frozen=True)
class BigtableSettings:
    """Bigtable instance and destination table configuration."""

    instance_id: str | None
    cluster_zone: str
    cluster_num_nodes: int
    storage_type: str
    column_family: str
    sample_row_limit: int

    @property
    def uses_static_instance(self) -> bool:
        return self.instance_id is not None


@dataclass(frozen=True)
class TemplateSettings:
    """Template under test."""

    spec_path: str
    template_type: str


@dataclass(frozen=True)
class DataGeneratorSettings:  # pylint: disable=too-many-instance-attributes
    """Streaming Data Generator invocation settings."""

    spec_path: str
    qps: int
    messages_limit: int
    output_type: str
    num_shards: int
    num_workers: int
    max_num_workers: int
    timeout_minutes: int


@dataclass(frozen=True)
class PipelineSettings:
    """Launch, wait and metrics settings for the template under test."""

    timeout_minutes: int
    launch_timeout_minutes: int
    poll_interval_seconds: int
    input_stage: str
    output_stage: str


@dataclass(frozen=True)
class MetricsExportSettings:
    """BigQuery destination for exported run metrics."""

    project: str
    dataset: str
    table: str


@dataclass(frozen=True)
class LoadTestConfiguration:  # pylint: disable=too-many-instance-attributes
    """Top-level configuration aggregate."""

    path: Path | None
    gcp: GcpSettings
    identity: IdentitySettings
    storage: StorageSettings
    bigtable: BigtableSettings
    template: TemplateSettings
    generator: DataGeneratorSettings
    pipeline: PipelineSettings
    metrics_export: MetricsExportSettings | None
