"""Metrics export entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Job-level counters reported by Dataflow and copied into every export.
RESOURCE_METRIC_NAMES = (
    "TotalVcpuTime",
    "TotalMemoryUsage",
    "TotalPdUsage",
    "TotalShuffleDataProcessed",
    "TotalStreamingDataProcessed",
)


class MetricsCollectionError(Exception):
    """Raised when run metrics cannot be derived from the job."""


@dataclass(frozen=True)
class LoadTestMetrics:
    """Named numeric measurements of one job run."""

    job_id: str
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def as_rows(self) -> list[dict[str, object]]:
        return [{"name": name, "value": value} for name, value in sorted(self.values.items())]
