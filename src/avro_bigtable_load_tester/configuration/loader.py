"""Configuration loader service."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_GENERATOR_SPEC_PATH,
    DEFAULT_INPUT_STAGE,
    DEFAULT_OUTPUT_STAGE,
    DEFAULT_TEMPLATE_SPEC_PATH,
    BigtableSettings,
    DataGeneratorSettings,
    GcpSettings,
    IdentitySettings,
    LoadTestConfiguration,
    MetricsExportSettings,
    PipelineSettings,
    StorageSettings,
    TemplateSettings,
)

# Environment variables take precedence over the configuration file.
ENVIRONMENT_OVERRIDES: Mapping[str, tuple[str, str]] = {
    "LT_PROJECT": ("gcp", "project"),
    "LT_REGION": ("gcp", "region"),
    "LT_SPEC_PATH": ("template", "spec_path"),
    "LT_ARTIFACT_BUCKET": ("storage", "artifact_bucket"),
    "LT_EXPORT_PROJECT": ("metrics_export", "project"),
    "LT_EXPORT_DATASET": ("metrics_export", "dataset"),
    "LT_EXPORT_TABLE": ("metrics_export", "table"),
}

_TEMPLATE_TYPES = ("classic", "flex")
_STORAGE_TYPES = ("SSD", "HDD")


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> LoadTestConfiguration:
    """Load and validate the load test configuration.

    Args:
      config_path: Optional YAML/JSON configuration file.
      environ: Environment used for overrides, defaults to ``os.environ``.

    Returns:
      The validated, immutable configuration.

    Raises:
      ConfigurationError: If the file is missing, unparsable or invalid.
    """
    path = Path(config_path) if config_path is not None else None
    parsed = _read_configuration_file(path) if path is not None else {}
    merged = _apply_environment_overrides(parsed, os.environ if environ is None else environ)

    gcp = _parse_gcp_section(merged.get("gcp"))
    return LoadTestConfiguration(
        path=path,
        gcp=gcp,
        identity=_parse_identity_section(merged.get("identity")),
        storage=_parse_storage_section(merged.get("storage")),
        bigtable=_parse_bigtable_section(merged.get("bigtable"), region=gcp.region),
        template=_parse_template_section(merged.get("template")),
        generator=_parse_generator_section(merged.get("generator")),
        pipeline=_parse_pipeline_section(merged.get("pipeline")),
        metrics_export=_parse_metrics_export_section(merged.get("metrics_export")),
    )


def _read_configuration_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read configuration file {path}: {exc}") from exc
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}
    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")
    return {
        key: dict(value) if isinstance(value, Mapping) else value for key, value in parsed.items()
    }


def _apply_environment_overrides(
    parsed: Mapping[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    merged = dict(parsed)
    for variable, (section_name, key) in ENVIRONMENT_OVERRIDES.items():
        value = environ.get(variable)
        if value is None or not value.strip():
            continue
        section = merged.get(section_name)
        if section is None:
            section = {}
        elif not isinstance(section, Mapping):
            raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
        merged[section_name] = {**section, key: value.strip()}
    return merged


def _parse_gcp_section(value: Any) -> GcpSettings:
    section = _require_mapping(value, "gcp")
    return GcpSettings(
        project=_require_non_empty_string(section.get("project"), "gcp.project"),
        region=_require_non_empty_string(section.get("region", "us-central1"), "gcp.region"),
    )


def _parse_identity_section(value: Any) -> IdentitySettings:
    section = _optional_mapping(value, "identity")
    return IdentitySettings(
        test_class=_require_non_empty_string(
            section.get("test_class", "AvroToBigtableLT"), "identity.test_class"
        ),
        test_name=_require_non_empty_string(
            section.get("test_name", "testBacklog10gb"), "identity.test_name"
        ),
    )


def _parse_storage_section(value: Any) -> StorageSettings:
    section = _require_mapping(value, "storage")
    bucket = _require_non_empty_string(section.get("artifact_bucket"), "storage.artifact_bucket")
    if bucket.startswith("gs://"):
        bucket = bucket[len("gs://") :]
    bucket = bucket.strip("/")
    if not bucket or "/" in bucket:
        raise ConfigurationError("storage.artifact_bucket must be a bare bucket name.")
    return StorageSettings(artifact_bucket=bucket)


def _parse_bigtable_section(value: Any, *, region: str) -> BigtableSettings:
    section = _optional_mapping(value, "bigtable")
    storage_type = _require_non_empty_string(
        section.get("storage_type", "SSD"), "bigtable.storage_type"
    ).upper()
    if storage_type not in _STORAGE_TYPES:
        raise ConfigurationError(
            f"bigtable.storage_type must be one of {', '.join(_STORAGE_TYPES)}."
        )
    return BigtableSettings(
        instance_id=_optional_string(section.get("instance_id"), "bigtable.instance_id"),
        cluster_zone=_require_non_empty_string(
            section.get("cluster_zone", f"{region}-b"), "bigtable.cluster_zone"
        ),
        cluster_num_nodes=_require_positive_int(
            section.get("cluster_num_nodes", 1), "bigtable.cluster_num_nodes"
        ),
        storage_type=storage_type,
        column_family=_require_non_empty_string(
            section.get("column_family", "SystemMetrics"), "bigtable.column_family"
        ),
        sample_row_limit=_require_positive_int(
            section.get("sample_row_limit", 5), "bigtable.sample_row_limit"
        ),
    )


def _parse_template_section(value: Any) -> TemplateSettings:
    section = _optional_mapping(value, "template")
    template_type = _require_non_empty_string(
        section.get("template_type", "classic"), "template.template_type"
    ).lower()
    if template_type not in _TEMPLATE_TYPES:
        raise ConfigurationError(
            f"template.template_type must be one of {', '.join(_TEMPLATE_TYPES)}."
        )
    return TemplateSettings(
        spec_path=_require_gcs_path(
            section.get("spec_path", DEFAULT_TEMPLATE_SPEC_PATH), "template.spec_path"
        ),
        template_type=template_type,
    )


def _parse_generator_section(value: Any) -> DataGeneratorSettings:
    section = _optional_mapping(value, "generator")
    num_workers = _require_positive_int(section.get("num_workers", 20), "generator.num_workers")
    max_num_workers = _require_positive_int(
        section.get("max_num_workers", 100), "generator.max_num_workers"
    )
    if max_num_workers < num_workers:
        raise ConfigurationError("generator.max_num_workers must be >= generator.num_workers.")
    return DataGeneratorSettings(
        spec_path=_require_gcs_path(
            section.get("spec_path", DEFAULT_GENERATOR_SPEC_PATH), "generator.spec_path"
        ),
        qps=_require_positive_int(section.get("qps", 1_000_000), "generator.qps"),
        messages_limit=_require_positive_int(
            section.get("messages_limit", 56_000_000), "generator.messages_limit"
        ),
        output_type=_require_non_empty_string(
            section.get("output_type", "AVRO"), "generator.output_type"
        ).upper(),
        num_shards=_require_positive_int(section.get("num_shards", 20), "generator.num_shards"),
        num_workers=num_workers,
        max_num_workers=max_num_workers,
        timeout_minutes=_require_positive_int(
            section.get("timeout_minutes", 30), "generator.timeout_minutes"
        ),
    )


def _parse_pipeline_section(value: Any) -> PipelineSettings:
    section = _optional_mapping(value, "pipeline")
    return PipelineSettings(
        timeout_minutes=_require_positive_int(
            section.get("timeout_minutes", 60), "pipeline.timeout_minutes"
        ),
        launch_timeout_minutes=_require_positive_int(
            section.get("launch_timeout_minutes", 10), "pipeline.launch_timeout_minutes"
        ),
        poll_interval_seconds=_require_positive_int(
            section.get("poll_interval_seconds", 30), "pipeline.poll_interval_seconds"
        ),
        input_stage=_require_non_empty_string(
            section.get("input_stage", DEFAULT_INPUT_STAGE), "pipeline.input_stage"
        ),
        output_stage=_require_non_empty_string(
            section.get("output_stage", DEFAULT_OUTPUT_STAGE), "pipeline.output_stage"
        ),
    )


def _parse_metrics_export_section(value: Any) -> MetricsExportSettings | None:
    if value is None:
        return None
    section = _require_mapping(value, "metrics_export")
    project = _optional_string(section.get("project"), "metrics_export.project")
    dataset = _optional_string(section.get("dataset"), "metrics_export.dataset")
    table = _optional_string(section.get("table"), "metrics_export.table")
    if project is None and dataset is None and table is None:
        return None
    if project is None or dataset is None or table is None:
        missing = [
            f"metrics_export.{name}"
            for name, field in (("project", project), ("dataset", dataset), ("table", table))
            if field is None
        ]
        raise ConfigurationError(
            f"Metrics export is partly configured; also set {', '.join(missing)}."
        )
    return MetricsExportSettings(project=project, dataset=dataset, table=table)


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_gcs_path(value: Any, field_name: str) -> str:
    path = _require_non_empty_string(value, field_name)
    if not path.startswith("gs://"):
        raise ConfigurationError(f"{field_name} must be a gs:// path.")
    return path


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
