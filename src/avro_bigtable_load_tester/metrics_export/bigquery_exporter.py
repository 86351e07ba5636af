"""Best-effort export of run metrics to BigQuery."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import bigquery

from avro_bigtable_load_tester.configuration.runtime_settings import MetricsExportSettings
from avro_bigtable_load_tester.pipeline_launch.launch_models import LaunchInfo

from .metrics_models import LoadTestMetrics

logger = logging.getLogger(__name__)


class BigQueryMetricsExporter:
    """Appends one row per run to the configured metrics table.

    Export never fails the run: errors are logged and reported as ``False``.
    """

    def __init__(self, client: Any, settings: MetricsExportSettings) -> None:
        self._client = client
        self._settings = settings

    @classmethod
    def create(
        cls,
        settings: MetricsExportSettings,
        *,
        client_factory: Callable[..., Any] | None = None,
    ) -> BigQueryMetricsExporter:
        factory = client_factory or bigquery.Client
        return cls(factory(project=settings.project), settings)

    @property
    def table_ref(self) -> str:
        return f"{self._settings.project}.{self._settings.dataset}.{self._settings.table}"

    def export(
        self,
        info: LaunchInfo,
        metrics: LoadTestMetrics,
        *,
        test_name: str,
        now: datetime | None = None,
    ) -> bool:
        row = {
            "timestamp": (now or datetime.now(UTC)).isoformat(),
            "job_id": info.job_id,
            "template_name": info.spec_path,
            "test_name": test_name,
            "metrics": metrics.as_rows(),
        }
        try:
            errors = self._client.insert_rows_json(self.table_ref, [row])
        except google_exceptions.GoogleAPIError as exc:
            logger.warning("Metrics export to %s failed: %s", self.table_ref, exc)
            return False
        if errors:
            logger.warning("Metrics export to %s rejected rows: %s", self.table_ref, errors)
            return False
        logger.info("Exported %d metrics to %s", len(metrics.values), self.table_ref)
        return True
