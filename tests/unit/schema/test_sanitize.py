"""Tests for schema sanitizing and UI-table filtering."""

from __future__ import annotations

import copy

import pytest

from hosby.schema.models import COLUMN_TYPES
from hosby.schema.sanitize import (
    SchemaFilter,
    process_schema,
    sanitize_column,
    sanitize_schema,
)


# ------------------------------------------------------------------
# sanitize_column / sanitize_schema
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        ("string", "string"),
        ("date", "date"),
        ("enum:[a,b]", "enum:[a,b]"),
        ("enum[a,b]", "enum[a,b]"),
        ("varchar", "string"),
        (["a", "b"], "array"),
        (42, "string"),
        (None, "string"),
    ],
)
def test_sanitize_column(value, expected) -> None:
    assert sanitize_column(value) == expected


def test_sanitize_descriptor_keeps_other_fields() -> None:
    assert sanitize_column({"type": "uuid", "required": True}) == {"type": "string", "required": True}
    assert sanitize_column({"required": True}) == {"type": "string", "required": True}
    assert sanitize_column({"type": "number", "min": 0}) == {"type": "number", "min": 0}


def test_sanitize_non_mapping_document() -> None:
    assert sanitize_schema(["not", "a", "schema"]) == {"tables": {}}
    assert sanitize_schema(None) == {"tables": {}}


def test_sanitize_non_mapping_table_becomes_empty() -> None:
    result = sanitize_schema({"tables": {"users": "oops"}})
    assert result["tables"]["users"] == {}


def test_sanitize_closure() -> None:
    raw = {
        "tables": {
            "orders": {"id": "uuid", "tags": ["x"], "total": "number", "meta": {"type": 3}},
            "users": {"id": "string", "status": "enum:[active,blocked]"},
        }
    }
    result = sanitize_schema(raw)
    for columns in result["tables"].values():
        for definition in columns.values():
            declared = definition["type"] if isinstance(definition, dict) else definition
            assert declared in COLUMN_TYPES or declared.startswith("enum")


def test_sanitize_does_not_mutate_input() -> None:
    raw = {"tables": {"orders": {"id": "uuid"}}}
    snapshot = copy.deepcopy(raw)
    sanitize_schema(raw)
    assert raw == snapshot


# ------------------------------------------------------------------
# SchemaFilter / process_schema
# ------------------------------------------------------------------


def test_filter_drops_ui_tables() -> None:
    raw = {
        "tables": {
            "buttonprops": {"x": "string"},
            "orders": {"id": "string"},
            "users": {"id": "string"},
        }
    }
    result = SchemaFilter().filter(raw)
    assert set(result["tables"]) == {"orders", "users"}
    assert result["version"] == "1.0.0"
    assert result["metadata"] == {}


def test_filter_drops_empty_tables_and_keeps_metadata() -> None:
    raw = {
        "tables": {"orders": {}, "users": {"id": "string"}},
        "version": "2.0.0",
        "metadata": {"project": {"id": "p1", "name": "Demo"}},
    }
    result = SchemaFilter().filter(raw)
    assert result["tables"] == {"users": {"id": "string"}}
    assert result["version"] == "2.0.0"
    assert result["metadata"] == {"project": {"id": "p1", "name": "Demo"}}


def test_filter_extra_ignored_components() -> None:
    raw = {"tables": {"auditlogs": {"id": "string"}, "users": {"id": "string"}}}
    result = SchemaFilter(ignored_components=["audit*"]).filter(raw)
    assert list(result["tables"]) == ["users"]


def test_filter_without_tables_returns_empty_schema() -> None:
    assert SchemaFilter().filter({"version": "1.0.0"}) == {"tables": {}}


def test_filter_is_pure() -> None:
    raw = {"tables": {"buttonprops": {"x": "string"}, "orders": {"id": "string"}}}
    snapshot = copy.deepcopy(raw)
    first = SchemaFilter().filter(raw)
    second = SchemaFilter().filter(raw)
    assert first == second
    assert raw == snapshot
    first["tables"]["orders"]["id"] = "number"
    assert raw["tables"]["orders"]["id"] == "string"


def test_process_schema_counts_removed_tables() -> None:
    raw = {
        "tables": {
            "buttonprops": {"x": "string"},
            "modalstate": {"open": "boolean"},
            "orders": {"id": "uuid"},
        }
    }
    filtered, removed = process_schema(raw, SchemaFilter())
    assert removed == 2
    assert filtered["tables"] == {"orders": {"id": "string"}}
