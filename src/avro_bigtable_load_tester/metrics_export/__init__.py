"""Metrics collection and export exports."""

from .bigquery_exporter import BigQueryMetricsExporter
from .metrics_collector import JobMetricsSource, collect_metrics
from .metrics_models import RESOURCE_METRIC_NAMES, LoadTestMetrics, MetricsCollectionError

__all__ = [
    "BigQueryMetricsExporter",
    "JobMetricsSource",
    "LoadTestMetrics",
    "MetricsCollectionError",
    "RESOURCE_METRIC_NAMES",
    "collect_metrics",
]
