"""Schema loading and validation service."""

from __future__ import annotations

import json
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

from .schema_models import SchemaDocument

BIGTABLE_AVRO_SCHEMA = "bigtable.avsc"
GENERATOR_SCHEMA = "generator_schema.json"

# Fields the Avro-to-Bigtable import reads from every row and cell record.
_BIGTABLE_ROW_FIELDS = ("key", "cells")
_BIGTABLE_CELL_FIELDS = ("family", "qualifier", "timestamp", "value")


class SchemaError(Exception):
    """Raised for schema parsing or validation failures."""


def bundled_schema_path(name: str) -> Path:
    """Return the filesystem path of a descriptor shipped with the package."""
    resource = resources.files(__package__).joinpath("descriptors", name)
    path = Path(str(resource))
    if not path.is_file():
        raise SchemaError(f"Bundled schema descriptor not found: {name}")
    return path


def load_schema_document(path: Path | str) -> SchemaDocument:
    """Parse an Avro schema file into a structured document."""
    source = Path(path)
    try:
        root = json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SchemaError(f"Cannot read schema {source}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SchemaError(f"Invalid avsc schema {source.name}: {exc}") from exc
    return SchemaDocument(source_path=source, root=root)


def require_bigtable_row_fields(document: SchemaDocument) -> dict[str, Any]:
    """Fail unless the schema declares the record shape Bigtable import expects.

    Returns the top-level field types keyed by field name.
    """
    name = document.source_path.name
    fields = _record_fields(document.root, name)
    missing = [field for field in _BIGTABLE_ROW_FIELDS if field not in fields]
    if missing:
        raise SchemaError(f"{name} is missing Bigtable row fields: {', '.join(missing)}")

    cells = fields["cells"]
    if not isinstance(cells, Mapping) or cells.get("type") != "array":
        raise SchemaError(f"{name}: 'cells' must be an array of cell records.")
    cell_fields = _record_fields(cells.get("items"), f"{name} cells")
    missing = [field for field in _BIGTABLE_CELL_FIELDS if field not in cell_fields]
    if missing:
        raise SchemaError(f"{name} is missing Bigtable cell fields: {', '.join(missing)}")
    return fields


def _record_fields(node: Any, label: str) -> dict[str, Any]:
    if not isinstance(node, Mapping) or node.get("type") != "record":
        raise SchemaError(f"{label}: expected an Avro record.")
    record_fields = node.get("fields")
    if not isinstance(record_fields, list):
        raise SchemaError(f"{label}: Avro record requires fields.")
    fields: dict[str, Any] = {}
    for field in record_fields:
        if not isinstance(field, Mapping) or "name" not in field:
            raise SchemaError(f"{label}: Avro field definitions must include a name.")
        fields[field["name"]] = field.get("type")
    return fields
