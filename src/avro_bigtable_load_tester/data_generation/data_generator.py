"""Synthetic input generation through the Streaming Data Generator template."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from avro_bigtable_load_tester.pipeline_launch.launch_models import (
    LaunchConfig,
    LaunchInfo,
    PipelineLaunchError,
)
from avro_bigtable_load_tester.pipeline_operation.operator_models import (
    OperatorConfig,
    OperatorResult,
    create_operator_config,
)

logger = logging.getLogger(__name__)


class DataGenerationError(Exception):
    """Raised when the generator job does not finish successfully."""


class DataGenerationTimeoutError(DataGenerationError):
    """Raised when the generator job exceeds its time budget."""


class GeneratorLauncher(Protocol):
    """Subset of the pipeline launcher used by the generator."""

    def launch(self, project: str, region: str, config: LaunchConfig) -> LaunchInfo: ...

    def cancel_job(self, project: str, region: str, job_id: str) -> object: ...


class GeneratorOperator(Protocol):
    """Subset of the pipeline operator used by the generator."""

    def wait_until_done(self, config: OperatorConfig) -> OperatorResult: ...


@dataclass(frozen=True)
class DataGeneratorRequest:  # pylint: disable=too-many-instance-attributes
    """What to generate and where to write it."""

    test_name: str
    schema_location: str
    qps: int
    messages_limit: int
    output_directory: str
    output_type: str
    avro_schema_location: str | None
    num_shards: int
    num_workers: int
    max_num_workers: int
    sink_type: str = "GCS"

    def to_parameters(self) -> dict[str, str]:
        parameters = {
            "schemaLocation": self.schema_location,
            "qps": str(self.qps),
            "messagesLimit": str(self.messages_limit),
            "sinkType": self.sink_type,
            "outputDirectory": self.output_directory,
            "outputType": self.output_type,
            "numShards": str(self.num_shards),
            "numWorkers": str(self.num_workers),
            "maxNumWorkers": str(self.max_num_workers),
        }
        if self.avro_schema_location:
            parameters["avroSchemaLocation"] = self.avro_schema_location
        return parameters


class DataGenerator:
    """Runs the generator template to completion as a blocking call."""

    def __init__(
        self,
        launcher: GeneratorLauncher,
        operator: GeneratorOperator,
        *,
        project: str,
        region: str,
        spec_path: str,
    ) -> None:
        self._launcher = launcher
        self._operator = operator
        self._project = project
        self._region = region
        self._spec_path = spec_path

    def execute(self, request: DataGeneratorRequest, timeout: timedelta) -> LaunchInfo:
        """Generate ``request.messages_limit`` records, failing hard past ``timeout``."""
        config = LaunchConfig.create(
            f"{request.test_name}-data-generator",
            self._spec_path,
            template_type="flex",
            parameters=request.to_parameters(),
        )
        logger.info(
            "Generating %d %s messages into %s",
            request.messages_limit,
            request.output_type,
            request.output_directory,
        )
        try:
            info = self._launcher.launch(self._project, self._region, config)
        except PipelineLaunchError as exc:
            raise DataGenerationError(f"Data generator failed to launch: {exc}") from exc

        result = self._operator.wait_until_done(create_operator_config(info, timeout))
        if result is OperatorResult.TIMEOUT:
            try:
                self._launcher.cancel_job(self._project, self._region, info.job_id)
            except PipelineLaunchError as exc:
                logger.warning("Could not cancel data generator job %s: %s", info.job_id, exc)
            raise DataGenerationTimeoutError(
                f"Data generator job {info.job_id} did not finish within {timeout}."
            )
        if result is not OperatorResult.LAUNCH_FINISHED:
            raise DataGenerationError(
                f"Data generator job {info.job_id} ended with {result.value}."
            )
        return info
