"""Pipeline launch entities."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType

_JOB_NAME_ILLEGAL = re.compile(r"[^a-z0-9-]")
_JOB_NAME_MAX_LENGTH = 63


class JobState(str, Enum):
    """Dataflow job states as reported by the REST API."""

    UNKNOWN = "JOB_STATE_UNKNOWN"
    STOPPED = "JOB_STATE_STOPPED"
    RUNNING = "JOB_STATE_RUNNING"
    DONE = "JOB_STATE_DONE"
    FAILED = "JOB_STATE_FAILED"
    CANCELLED = "JOB_STATE_CANCELLED"
    UPDATED = "JOB_STATE_UPDATED"
    DRAINING = "JOB_STATE_DRAINING"
    DRAINED = "JOB_STATE_DRAINED"
    PENDING = "JOB_STATE_PENDING"
    CANCELLING = "JOB_STATE_CANCELLING"
    QUEUED = "JOB_STATE_QUEUED"
    RESOURCE_CLEANING_UP = "JOB_STATE_RESOURCE_CLEANING_UP"

    @classmethod
    def parse(cls, value: str | None) -> JobState:
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_pending(self) -> bool:
        return self in PENDING_STATES

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATES

    @property
    def is_done(self) -> bool:
        return self in DONE_STATES

    @property
    def is_failed(self) -> bool:
        return self in FAILED_STATES

    @property
    def is_terminal(self) -> bool:
        return self in DONE_STATES or self in FAILED_STATES


PENDING_STATES = frozenset({JobState.UNKNOWN, JobState.PENDING, JobState.QUEUED})
ACTIVE_STATES = frozenset({JobState.RUNNING, JobState.UPDATED})
DONE_STATES = frozenset({JobState.DONE, JobState.DRAINED})
FAILED_STATES = frozenset({JobState.FAILED, JobState.CANCELLED, JobState.STOPPED})


class PipelineLaunchError(Exception):
    """Raised when the execution service rejects or fails a launch."""


def create_job_name(test_name: str, now: datetime | None = None) -> str:
    """Return a Dataflow-legal job name derived from ``test_name``."""
    timestamp = (now or datetime.now(UTC)).strftime("%Y%m%d%H%M%S%f")
    base = _JOB_NAME_ILLEGAL.sub("-", test_name.lower()).strip("-")
    if not base[:1].isalpha():
        base = f"job-{base}".rstrip("-")
    base = base[: _JOB_NAME_MAX_LENGTH - len(timestamp) - 1].rstrip("-")
    return f"{base}-{timestamp}"


@dataclass(frozen=True)
class LaunchConfig:
    """Immutable named template reference plus its launch parameters."""

    job_name: str
    spec_path: str
    template_type: str = "classic"
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.template_type not in {"classic", "flex"}:
            raise ValueError(f"Unsupported template type: {self.template_type}")
        object.__setattr__(
            self,
            "parameters",
            MappingProxyType({key: str(value) for key, value in self.parameters.items()}),
        )

    @classmethod
    def create(
        cls,
        test_name: str,
        spec_path: str,
        *,
        template_type: str = "classic",
        parameters: Mapping[str, object] | None = None,
    ) -> LaunchConfig:
        return cls(
            job_name=create_job_name(test_name),
            spec_path=spec_path,
            template_type=template_type,
            parameters={key: str(value) for key, value in (parameters or {}).items()},
        )

    def with_parameter(self, key: str, value: object) -> LaunchConfig:
        """Return a copy with ``key`` set; the original is left untouched."""
        return LaunchConfig(
            job_name=self.job_name,
            spec_path=self.spec_path,
            template_type=self.template_type,
            parameters={**self.parameters, key: str(value)},
        )


@dataclass(frozen=True)
class LaunchInfo:  # pylint: disable=too-many-instance-attributes
    """Identity and last known state of a submitted job."""

    job_id: str
    project_id: str
    region: str
    state: JobState
    create_time: str | None
    job_name: str
    spec_path: str
    parameters: Mapping[str, str]
