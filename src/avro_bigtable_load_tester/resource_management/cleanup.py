"""Unconditional release of run-scoped resources."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class ResourceManager(Protocol):
    """Anything that owns cloud resources for the duration of a run."""

    def cleanup_all(self) -> None: ...


class ResourceCleanupError(Exception):
    """Raised after cleanup when one or more managers failed to release resources."""

    def __init__(self, failures: list[tuple[ResourceManager, Exception]]) -> None:
        self.failures = failures
        details = "; ".join(f"{type(manager).__name__}: {exc}" for manager, exc in failures)
        super().__init__(f"Failed to clean up {len(failures)} resource manager(s): {details}")


def clean_resources(*managers: ResourceManager | None) -> None:
    """Call ``cleanup_all`` on every manager, then raise if any of them failed."""
    failures: list[tuple[ResourceManager, Exception]] = []
    for manager in managers:
        if manager is None:
            continue
        try:
            manager.cleanup_all()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error("Cleanup of %s failed: %s", type(manager).__name__, exc)
            failures.append((manager, exc))
    if failures:
        raise ResourceCleanupError(failures)


@dataclass
class ProvisionedResources:
    """Managers acquired for one run; filled in as setup progresses."""

    managers: list[ResourceManager]

    def track(self, manager: ResourceManager) -> ResourceManager:
        self.managers.append(manager)
        return manager


@contextmanager
def provisioned_resources() -> Iterator[ProvisionedResources]:
    """Scope resource managers so they are released exactly once on every exit path.

    Managers registered with ``track`` inside the block are cleaned in
    registration order. When the block raised, cleanup failures are logged
    and the original exception propagates; otherwise they are raised.
    """
    resources = ProvisionedResources(managers=[])
    try:
        yield resources
    except BaseException:
        try:
            clean_resources(*resources.managers)
        except ResourceCleanupError:
            logger.exception("Cleanup failed after an aborted run")
        raise
    clean_resources(*resources.managers)
