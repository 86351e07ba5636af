"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "loadtest.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Load test configuration template for avro-bigtable-load-tester.
# Replace every <REQUIRED> placeholder before running the load test.
# LT_PROJECT, LT_REGION, LT_SPEC_PATH, LT_ARTIFACT_BUCKET, LT_EXPORT_PROJECT,
# LT_EXPORT_DATASET and LT_EXPORT_TABLE override the matching values below.

gcp:
  project: "<REQUIRED>"
  region: "us-central1"

identity:
  # Lower-cased test_class is the artifact root directory.
  test_class: "AvroToBigtableLT"
  test_name: "testBacklog10gb"

storage:
  artifact_bucket: "<REQUIRED>"

bigtable:
  # Set instance_id to reuse an existing instance; only tables are dropped on cleanup.
  # instance_id: "<OPTIONAL>"
  # cluster_zone defaults to "<region>-b".
  cluster_num_nodes: 1
  storage_type: "SSD"
  column_family: "SystemMetrics"
  sample_row_limit: 5

template:
  spec_path: "gs://dataflow-templates/latest/GCS_Avro_to_Cloud_Bigtable"
  template_type: "classic"

generator:
  spec_path: "gs://dataflow-templates/latest/flex/Streaming_Data_Generator"
  qps: 1000000
  # 56,000,000 messages of the bundled schema make up approximately 10GB.
  messages_limit: 56000000
  output_type: "AVRO"
  num_shards: 20
  num_workers: 20
  max_num_workers: 100
  timeout_minutes: 30

pipeline:
  timeout_minutes: 60
  launch_timeout_minutes: 10
  poll_interval_seconds: 30
  # Stage names must match the PCollection names of the deployed template.
  # input_stage: "<OPTIONAL>"
  # output_stage: "<OPTIONAL>"

# metrics_export:
#   project: "<OPTIONAL>"
#   dataset: "<OPTIONAL>"
#   table: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML load test configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
