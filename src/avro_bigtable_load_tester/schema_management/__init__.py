"""Schema management exports."""

from .schema_models import SchemaDocument
from .schema_projection import (
    BIGTABLE_AVRO_SCHEMA,
    GENERATOR_SCHEMA,
    SchemaError,
    bundled_schema_path,
    load_schema_document,
    require_bigtable_row_fields,
)

__all__ = [
    "BIGTABLE_AVRO_SCHEMA",
    "GENERATOR_SCHEMA",
    "SchemaDocument",
    "SchemaError",
    "bundled_schema_path",
    "load_schema_document",
    "require_bigtable_row_fields",
]
