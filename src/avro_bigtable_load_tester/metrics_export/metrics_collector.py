"""Run metrics derived from Dataflow job metrics."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Protocol

from .metrics_models import RESOURCE_METRIC_NAMES, LoadTestMetrics, MetricsCollectionError

logger = logging.getLogger(__name__)

_FRACTION_OVERFLOW = re.compile(r"(\.\d{6})\d+")


class JobMetricsSource(Protocol):
    """Interface for reading job details and metrics."""

    def get_job(self, project: str, region: str, job_id: str) -> Mapping[str, Any]: ...

    def get_job_metrics(
        self, project: str, region: str, job_id: str
    ) -> list[Mapping[str, Any]]: ...


def collect_metrics(
    source: JobMetricsSource,
    *,
    project: str,
    region: str,
    job_id: str,
    input_stage: str,
    output_stage: str,
) -> LoadTestMetrics:
    """Compute resource usage, run time and stage throughput of a finished job.

    ``input_stage`` and ``output_stage`` are PCollection names of the deployed
    template; both must appear in the job's ElementCount metrics.
    """
    job = source.get_job(project, region, job_id)
    job_metrics = list(source.get_job_metrics(project, region, job_id))

    values: dict[str, float] = {}
    for name in RESOURCE_METRIC_NAMES:
        value = _find_scalar(job_metrics, name)
        if value is not None:
            values[name] = value

    run_time = _run_time_seconds(job)
    values["RunTime"] = run_time

    input_count = _element_count(job_metrics, input_stage)
    output_count = _element_count(job_metrics, output_stage)
    values["InputElementCount"] = input_count
    values["OutputElementCount"] = output_count
    if run_time > 0:
        values["AvgInputThroughputElementsPerSec"] = input_count / run_time
        values["AvgOutputThroughputElementsPerSec"] = output_count / run_time

    logger.info("Collected %d metrics for job %s", len(values), job_id)
    return LoadTestMetrics(job_id=job_id, values=values)


def _find_scalar(job_metrics: Iterable[Mapping[str, Any]], name: str) -> float | None:
    for metric in job_metrics:
        metric_name = metric.get("name") or {}
        if metric_name.get("name") != name:
            continue
        if (metric_name.get("context") or {}).get("tentative") == "true":
            continue
        return _as_float(metric.get("scalar"))
    return None


def _element_count(job_metrics: Iterable[Mapping[str, Any]], stage: str) -> float:
    for metric in job_metrics:
        metric_name = metric.get("name") or {}
        if metric_name.get("name") != "ElementCount":
            continue
        context = metric_name.get("context") or {}
        if context.get("tentative") == "true":
            continue
        if stage in (context.get("output_user_name"), context.get("original_name")):
            return _as_float(metric.get("scalar"))
    raise MetricsCollectionError(f"No ElementCount metric found for stage {stage!r}.")


def _run_time_seconds(job: Mapping[str, Any]) -> float:
    start = job.get("startTime") or job.get("createTime")
    end = job.get("currentStateTime")
    if not start or not end:
        raise MetricsCollectionError("Job does not report start and end times.")
    elapsed = (_parse_timestamp(end) - _parse_timestamp(start)).total_seconds()
    return max(elapsed, 0.0)


def _parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(_FRACTION_OVERFLOW.sub(r"\1", value))
    except ValueError as exc:
        raise MetricsCollectionError(f"Invalid job timestamp: {value}") from exc


def _as_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MetricsCollectionError(f"Metric value is not numeric: {value!r}") from exc
