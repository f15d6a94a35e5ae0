"""Hosby schema layer — data model, sanitizer/filter, local store."""

from hosby.schema.models import (
    COLUMN_TYPES,
    DEFAULT_VERSION,
    ProjectIdentity,
    SchemaDocument,
    SyncRecord,
)
from hosby.schema.sanitize import SchemaFilter, process_schema, sanitize_schema
from hosby.schema.store import SCHEMA_FILENAME, SchemaStore

__all__ = [
    "COLUMN_TYPES",
    "DEFAULT_VERSION",
    "ProjectIdentity",
    "SCHEMA_FILENAME",
    "SchemaDocument",
    "SchemaFilter",
    "SchemaStore",
    "SyncRecord",
    "process_schema",
    "sanitize_schema",
]
