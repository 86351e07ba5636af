"""Collision-free identifiers for run-scoped resources."""

from __future__ import annotations

import re
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]

_INSTANCE_ID_ILLEGAL = re.compile(r"[^a-z0-9-]")
_TABLE_ID_ILLEGAL = re.compile(r"[^a-zA-Z0-9_.-]")
_INSTANCE_ID_MAX_LENGTH = 30
_TABLE_ID_MAX_LENGTH = 40
_CLUSTER_SUFFIX = "-c1"


def _utc_now() -> datetime:
    return datetime.now(UTC)


def generate_resource_id(
    base: str,
    *,
    illegal_chars: re.Pattern[str],
    replace_char: str,
    max_length: int,
    time_format: str,
    clock: Clock | None = None,
) -> str:
    """Return ``<base>-<timestamp>`` sanitized and truncated to ``max_length``.

    The timestamp suffix is always kept whole; the base is truncated instead.
    """
    timestamp = (clock or _utc_now)().strftime(time_format)
    sanitized = illegal_chars.sub(replace_char, base).strip(replace_char)
    available = max_length - len(timestamp) - 1
    if available <= 0:
        raise ValueError(f"max_length {max_length} leaves no room for the id base")
    sanitized = sanitized[:available].rstrip(replace_char)
    if not sanitized:
        raise ValueError(f"Cannot derive a resource id from {base!r}")
    return f"{sanitized}-{timestamp}"


def generate_instance_id(test_name: str, clock: Clock | None = None) -> str:
    """Bigtable instance id: lower-case, starts with a letter, leaves room for a cluster suffix."""
    base = test_name.lower()
    if not base[:1].isalpha():
        base = f"lt-{base}"
    return generate_resource_id(
        base,
        illegal_chars=_INSTANCE_ID_ILLEGAL,
        replace_char="-",
        max_length=_INSTANCE_ID_MAX_LENGTH - len(_CLUSTER_SUFFIX),
        time_format="%Y%m%d-%H%M%S",
        clock=clock,
    )


def generate_cluster_id(instance_id: str) -> str:
    return f"{instance_id}{_CLUSTER_SUFFIX}"


def generate_table_id(test_name: str, clock: Clock | None = None) -> str:
    return generate_resource_id(
        test_name,
        illegal_chars=_TABLE_ID_ILLEGAL,
        replace_char="-",
        max_length=_TABLE_ID_MAX_LENGTH,
        time_format="%Y%m%d-%H%M%S-%f",
        clock=clock,
    )


def generate_run_id(clock: Clock | None = None) -> str:
    """Unique per execution so parallel runs never share an artifact prefix."""
    timestamp = (clock or _utc_now)().strftime("%Y%m%d-%H%M%S")
    return f"{timestamp}-{uuid.uuid4().hex[:8]}"
