"""Ephemeral Bigtable instance and table management."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent import futures
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import bigtable
from google.cloud.bigtable import column_family, enums

from avro_bigtable_load_tester.configuration.runtime_settings import BigtableSettings

from .resource_ids import generate_cluster_id, generate_instance_id

logger = logging.getLogger(__name__)

_DEFAULT_GC_MAX_AGE = timedelta(hours=1)
_INSTANCE_CREATE_TIMEOUT_SECONDS = 600
_STORAGE_TYPES = {
    "SSD": enums.StorageType.SSD,
    "HDD": enums.StorageType.HDD,
}


class BigtableResourceError(Exception):
    """Raised when a Bigtable instance or table cannot be managed."""


@dataclass(frozen=True)
class SampledRow:
    """One row read back from the destination table."""

    row_key: bytes
    cell_count: int


class BigtableResourceManager:
    """Owns one Bigtable instance (or the tables created in a static one) for a test run.

    The instance is created on the first ``create_table`` call. ``cleanup_all``
    deletes the instance, or only the created tables when a static instance is
    configured.
    """

    def __init__(
        self,
        client: Any,
        settings: BigtableSettings,
        *,
        instance_id: str,
        labels: dict[str, str] | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._instance_id = instance_id
        self._labels = dict(labels or {})
        self._instance = client.instance(instance_id)
        self._instance_created = settings.uses_static_instance
        self._instance_requested = False
        self._created_tables: list[str] = []
        self._cleaned_up = False

    @classmethod
    def create(
        cls,
        test_name: str,
        project: str,
        settings: BigtableSettings,
        *,
        client_factory: Callable[..., Any] | None = None,
    ) -> BigtableResourceManager:
        """Build a manager scoped to ``test_name`` in ``project``."""
        factory = client_factory or bigtable.Client
        client = factory(project=project, admin=True)
        instance_id = settings.instance_id or generate_instance_id(test_name)
        labels = {"test-name": test_name.lower()[:63]}
        return cls(client, settings, instance_id=instance_id, labels=labels)

    @property
    def instance_id(self) -> str:
        return self._instance_id

    @property
    def created_tables(self) -> tuple[str, ...]:
        return tuple(self._created_tables)

    def create_table(self, table_id: str, column_families: Sequence[str]) -> None:
        """Create ``table_id`` with one column family per name."""
        if not column_families:
            raise BigtableResourceError("There must be at least one column family.")
        self._ensure_instance()
        table = self._instance.table(table_id)
        try:
            if table.exists():
                raise BigtableResourceError(
                    f"Table {table_id} already exists in instance {self._instance_id}."
                )
            table.create(
                column_families={
                    name: column_family.MaxAgeGCRule(_DEFAULT_GC_MAX_AGE)
                    for name in column_families
                }
            )
        except google_exceptions.GoogleAPICallError as exc:
            raise BigtableResourceError(f"Failed to create table {table_id}: {exc}") from exc
        self._created_tables.append(table_id)
        logger.info("Created table %s in instance %s", table_id, self._instance_id)

    def read_table(self, table_id: str, limit: int) -> list[SampledRow]:
        """Read at most ``limit`` rows from ``table_id``."""
        if limit <= 0:
            raise ValueError("limit must be > 0")
        table = self._instance.table(table_id)
        try:
            return [
                SampledRow(
                    row_key=row.row_key,
                    cell_count=sum(
                        len(cells)
                        for family in row.cells.values()
                        for cells in family.values()
                    ),
                )
                for row in table.read_rows(limit=limit)
            ]
        except google_exceptions.GoogleAPICallError as exc:
            raise BigtableResourceError(f"Failed to read table {table_id}: {exc}") from exc

    def cleanup_all(self) -> None:
        """Release everything this manager created. Safe to call more than once."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        if self._settings.uses_static_instance:
            for table_id in self._created_tables:
                logger.info(
                    "Deleting table %s from static instance %s", table_id, self._instance_id
                )
                self._instance.table(table_id).delete()
            return
        if not self._instance_requested:
            return
        logger.info("Deleting instance %s", self._instance_id)
        try:
            self._instance.delete()
        except google_exceptions.NotFound:
            logger.info("Instance %s was never created; nothing to delete", self._instance_id)

    def _ensure_instance(self) -> None:
        if self._instance_created:
            return
        instance = self._client.instance(
            self._instance_id,
            instance_type=enums.Instance.Type.PRODUCTION,
            labels=self._labels,
        )
        cluster = instance.cluster(
            generate_cluster_id(self._instance_id),
            location_id=self._settings.cluster_zone,
            serve_nodes=self._settings.cluster_num_nodes,
            default_storage_type=_STORAGE_TYPES[self._settings.storage_type],
        )
        logger.info(
            "Creating instance %s in %s", self._instance_id, self._settings.cluster_zone
        )
        # A create that fails or times out may still leave an instance behind.
        self._instance = instance
        self._instance_requested = True
        try:
            operation = instance.create(clusters=[cluster])
            operation.result(timeout=_INSTANCE_CREATE_TIMEOUT_SECONDS)
        except futures.TimeoutError as exc:
            raise BigtableResourceError(
                f"Instance {self._instance_id} was not ready after "
                f"{_INSTANCE_CREATE_TIMEOUT_SECONDS}s."
            ) from exc
        except google_exceptions.GoogleAPICallError as exc:
            raise BigtableResourceError(
                f"Failed to create instance {self._instance_id}: {exc}"
            ) from exc
        self._instance_created = True
