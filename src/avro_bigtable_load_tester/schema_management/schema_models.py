"""Schema management entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class SchemaDocument:
    """Parsed Avro schema definition."""

    source_path: Path
    root: Any
