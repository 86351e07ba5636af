"""Blocking wait for launched jobs.

The operator is the only place that suspends the caller while a job runs.
Polling is synchronous with an explicit deadline, so every wait ends in one
of three distinguishable outcomes instead of hanging.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from avro_bigtable_load_tester.pipeline_launch.launch_models import JobState

from .operator_models import JobNotFinishedError, OperatorConfig, OperatorResult

logger = logging.getLogger(__name__)


class JobStatusSource(Protocol):
    """Interface for querying job state."""

    def get_job_state(self, project: str, region: str, job_id: str) -> JobState:
        """Return the current state of a job."""
        ...


class PipelineOperator:
    """Polls job state until it is terminal or the configured timeout elapses."""

    def __init__(
        self,
        status_source: JobStatusSource,
        *,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._status_source = status_source
        self._sleep = sleep
        self._monotonic = monotonic

    def wait_until_done(self, config: OperatorConfig) -> OperatorResult:
        """
        Block until the job reaches a terminal state.

        Args:
            config: Job identity, timeout and poll interval.

        Returns:
            LAUNCH_FINISHED for done/drained jobs, LAUNCH_FAILED for
            failed/cancelled/stopped jobs, TIMEOUT when the deadline passed first.
        """
        deadline = self._monotonic() + config.timeout.total_seconds()
        while True:
            state = self._status_source.get_job_state(config.project, config.region, config.job_id)
            if state.is_done:
                logger.info("Job %s finished: %s", config.job_id, state.value)
                return OperatorResult.LAUNCH_FINISHED
            if state.is_failed:
                logger.warning("Job %s failed: %s", config.job_id, state.value)
                return OperatorResult.LAUNCH_FAILED

            remaining = deadline - self._monotonic()
            if remaining <= 0:
                logger.warning(
                    "Job %s still %s after %s", config.job_id, state.value, config.timeout
                )
                return OperatorResult.TIMEOUT
            logger.debug("Job %s is %s", config.job_id, state.value)
            self._sleep(min(config.poll_interval.total_seconds(), remaining))


def assert_launch_finished(job_id: str, result: OperatorResult) -> None:
    """Raise ``JobNotFinishedError`` unless ``result`` is LAUNCH_FINISHED."""
    if result is not OperatorResult.LAUNCH_FINISHED:
        raise JobNotFinishedError(job_id, result)
