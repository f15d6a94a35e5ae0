"""Schema sanitizer and UI-artifact filter.

``sanitize_schema`` coerces every column definition into the column type
vocabulary; ``SchemaFilter.filter`` drops empty tables, ignored components and
UI component tables. Both return new documents and leave their input intact.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import Any

from hosby.logging_config import LogConfig, null_config
from hosby.scan.patterns import (
    IGNORED_COMPONENTS,
    is_ui_component_table,
    matches_ignored_component,
)
from hosby.schema.models import COLUMN_TYPES, DEFAULT_VERSION, SchemaDocument, empty_schema


def _is_enum(value: str) -> bool:
    lower = value.lower()
    return lower.startswith("enum[") or lower.startswith("enum:[")


def _is_vocabulary_type(value: str) -> bool:
    lower = value.lower()
    return any(
        lower == t or lower.startswith(t + ":") or lower.startswith(t + "[")
        for t in COLUMN_TYPES
    )


def sanitize_column(value: Any) -> Any:
    """Return *value* coerced into the column type vocabulary.

    Descriptor objects keep their other fields; only ``type`` is corrected.
    """
    if isinstance(value, dict):
        declared = value.get("type")
        if isinstance(declared, str) and (declared in COLUMN_TYPES or _is_enum(declared)):
            return dict(value)
        return {**value, "type": "string"}
    if isinstance(value, str):
        if _is_enum(value) or _is_vocabulary_type(value):
            return value
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    # Remaining scalars (numbers, booleans, null) render as their JSON-ish text.
    text = _js_string(value)
    return text if _is_vocabulary_type(text) else "string"


def _js_string(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def sanitize_schema(schema: Any) -> SchemaDocument:
    """Coerce all column types of *schema* into the vocabulary.

    A non-mapping input yields ``{"tables": {}}``; a table whose value is not a
    mapping becomes an empty table (dropped later by the filter).
    """
    if not isinstance(schema, dict):
        return empty_schema()

    result = copy.deepcopy(schema)
    tables = result.get("tables")
    if not isinstance(tables, dict):
        result["tables"] = {}
        return result

    for name in list(tables):
        columns = tables[name]
        if not isinstance(columns, dict):
            tables[name] = {}
            continue
        tables[name] = {col: sanitize_column(defn) for col, defn in columns.items()}

    return result


class SchemaFilter:
    """Removes tables that are empty, explicitly ignored, or UI artifacts.

    Args:
        ignored_components: Extra names/wildcards on top of the built-in list.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        ignored_components: Iterable[str] = (),
        log_config: LogConfig | None = None,
    ) -> None:
        self._ignored = tuple(IGNORED_COMPONENTS) + tuple(ignored_components)
        self._log = (log_config or null_config()).logger("filter")

    def is_excluded(self, table: str, columns: Any) -> bool:
        if not isinstance(columns, dict) or not columns:
            return True
        return matches_ignored_component(table, self._ignored) or is_ui_component_table(table)

    def filter(self, schema: Any) -> SchemaDocument:
        if not isinstance(schema, dict) or not isinstance(schema.get("tables"), dict):
            self._log.warning("Schema has no tables or invalid tables property")
            return empty_schema()

        filtered: SchemaDocument = {
            "tables": {},
            "version": schema.get("version") or DEFAULT_VERSION,
            "metadata": copy.deepcopy(schema.get("metadata") or {}),
        }

        for table, columns in schema["tables"].items():
            if self.is_excluded(table, columns):
                self._log.debug("Dropping table %s", table)
                continue
            filtered["tables"][table] = copy.deepcopy(columns)

        removed = len(schema["tables"]) - len(filtered["tables"])
        if removed > 0:
            self._log.info("Filtered out %d UI component tables from schema", removed)
        return filtered


def process_schema(raw: Any, schema_filter: SchemaFilter) -> tuple[SchemaDocument, int]:
    """Sanitize then filter *raw*; return ``(filtered, removed_table_count)``."""
    sanitized = sanitize_schema(raw)
    filtered = schema_filter.filter(sanitized)
    before = len(sanitized.get("tables") or {})
    return filtered, before - len(filtered["tables"])
