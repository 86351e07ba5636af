"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ENVIRONMENT_OVERRIDES, ConfigurationError, load_configuration
from .runtime_settings import (
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

__all__ = [
    "BigtableSettings",
    "DataGeneratorSettings",
    "GcpSettings",
    "IdentitySettings",
    "LoadTestConfiguration",
    "MetricsExportSettings",
    "PipelineSettings",
    "StorageSettings",
    "TemplateSettings",
    "ConfigurationError",
    "ENVIRONMENT_OVERRIDES",
    "load_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
