"""TypeScript CRUD service templates and the AI service prompt.

The generated service talks to the backend through ``hosbyQuery`` from the
project's ``src/api/hosbyClient``; one file per table, one class per file,
plus a singleton export.
"""

from __future__ import annotations

import json
import re

from hosby.schema.models import Table

# Columns the template declares itself
_MANAGED_COLUMNS = ("id", "createdAt", "updatedAt")

_ENUM_RE = re.compile(r"^enum:?\[(.*)\]$", re.IGNORECASE | re.DOTALL)

_TS_TYPES: dict[str, str] = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "date": "Date",
    "array": "any[]",
    "object": "Record<string, any>",
}


def pascal_case(table_name: str) -> str:
    """``order_items`` -> ``OrderItems``; ``users`` -> ``Users``."""
    parts = [p for p in re.split(r"[^0-9A-Za-z]+", table_name) if p]
    return "".join(p[0].upper() + p[1:] for p in parts) or "Entity"


def ts_type(column_type: object) -> str:
    """TypeScript type for a column of the schema vocabulary.

    Enums become a union of string literals; anything unknown is ``any``.
    """
    if not isinstance(column_type, str):
        return "any"
    match = _ENUM_RE.match(column_type.strip())
    if match:
        values = [v.strip().strip("'\"") for v in match.group(1).split(",")]
        values = [v for v in values if v]
        return " | ".join(f"'{v}'" for v in values) if values else "string"
    return _TS_TYPES.get(column_type.strip().lower(), "any")


def _property_key(column: str) -> str:
    if re.fullmatch(r"[A-Za-z_$][0-9A-Za-z_$]*", column):
        return column
    return json.dumps(column)


# ------------------------------------------------------------------
# Template
# ------------------------------------------------------------------

_SERVICE_TEMPLATE = """\
import {{ hosbyQuery }} from '../api/hosbyClient';

/**
 * Interface for {model} model
 */
export interface {model} {{
  id: string;
{properties}  createdAt?: Date;
  updatedAt?: Date;
}}

/**
 * Service for managing {table} data
 */
export class {cls} {{
  private tableName = '{table}';

  /**
   * Create a new {table} record
   * @param data - The data to create
   * @returns The created record
   */
  async create(data: Omit<{model}, 'id' | 'createdAt' | 'updatedAt'>): Promise<{model}> {{
    const result = await hosbyQuery.insertOne(this.tableName, data);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to create {table}');
    }}
    return result.data as {model};
  }}

  /**
   * Get a {table} record by ID
   * @param id - The ID of the record to retrieve
   * @returns The found record
   */
  async getById(id: string): Promise<{model} | null> {{
    const result = await hosbyQuery.findById(this.tableName, [{{ field: 'id', value: id }}]);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to get {table}');
    }}
    return result.data as {model};
  }}

  /**
   * Get all {table} records
   * @param options - Query options like limit and skip
   * @returns Array of records
   */
  async getAll(options?: {{ limit?: number; skip?: number }}): Promise<{model}[]> {{
    const result = await hosbyQuery.find(this.tableName, [], options);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to get {table} records');
    }}
    return result.data as {model}[];
  }}

  /**
   * Update a {table} record
   * @param id - The ID of the record to update
   * @param data - The fields to update
   * @returns The updated record
   */
  async update(id: string, data: Partial<{model}>): Promise<{model}> {{
    const result = await hosbyQuery.updateOne(this.tableName, data, [{{ field: 'id', value: id }}]);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to update {table}');
    }}
    return result.data as {model};
  }}

  /**
   * Delete a {table} record
   * @param id - The ID of the record to delete
   * @returns The deleted record
   */
  async delete(id: string): Promise<{model}> {{
    const result = await hosbyQuery.deleteById(this.tableName, [{{ field: 'id', value: id }}]);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to delete {table}');
    }}
    return result.data as {model};
  }}

  /**
   * Find {table} records by field values
   * @param filter - Field/value pairs that must match
   * @param options - Query options
   * @returns Array of matching records
   */
  async find(filter: Partial<{model}>, options?: {{ limit?: number; skip?: number; populate?: string[] }}): Promise<{model}[]> {{
    const queryFilters = Object.entries(filter).map(([field, value]) => ({{ field, value }}));
    const result = await hosbyQuery.find(this.tableName, queryFilters, options);
    if (!result.success) {{
      throw new Error(result.message || 'Failed to find {table} records');
    }}
    return result.data as {model}[];
  }}
}}

// Export singleton instance
export const {instance} = new {cls}();
"""


def render_service(table_name: str, table: Table) -> str:
    """Render the TypeScript CRUD service for *table_name*."""
    model = pascal_case(table_name)
    lines = [
        f"  {_property_key(column)}: {ts_type(column_type)};"
        for column, column_type in table.items()
        if column not in _MANAGED_COLUMNS
    ]
    instance = model[0].lower() + model[1:] + "Service"
    return _SERVICE_TEMPLATE.format(
        model=model,
        cls=f"{model}Service",
        table=table_name,
        instance=instance,
        properties="".join(line + "\n" for line in lines),
    )


# ------------------------------------------------------------------
# AI prompt
# ------------------------------------------------------------------

SERVICE_SYSTEM_PROMPT = """\
You are Hosby AI Assistant, a senior TypeScript engineer.
You write CRUD service modules on top of the Hosby client.
Return only TypeScript source code: no explanations and no Markdown."""

CRUD_METHODS_DOC = """\
# Hosby CRUD methods (hosbyQuery)

All methods return Promise<QueryResult> = { success: boolean; message?: string; data?: unknown }.
QueryFilter = { field: string; value: unknown }.
QueryOptions = { limit?: number; skip?: number; sort?: Record<string, 1 | -1>; populate?: string[] }.

## Find
- find(tableName, filters?: QueryFilter[], options?: QueryOptions)
- findById(tableName, idFilter: QueryFilter[])
- findByField(tableName, field: string, value: unknown)
- findFirst(tableName, filters: QueryFilter[], options?: QueryOptions)
- count(tableName, filters?: QueryFilter[])

## Insert
- insertOne(tableName, data: Record<string, any>)
- insertMany(tableName, data: Record<string, any>[], options?: QueryOptions)

## Update
- updateOne(tableName, data: Record<string, any>, filters: QueryFilter[])
- updateMany(tableName, data: Record<string, any>, filters: QueryFilter[])
- upsert(tableName, data: Record<string, any>, filters: QueryFilter[], options?: QueryOptions)

## Delete
- deleteOne(tableName, filters: QueryFilter[])
- deleteById(tableName, idFilter: QueryFilter[])
- deleteMany(tableName, filters: QueryFilter[])"""

_SERVICE_PROMPT = """\
Generate a TypeScript CRUD service for a table named "{table}" with the following schema:
{schema}

Use the following Hosby client methods documentation to implement the service correctly:
{docs}

The service should:
1. Import {{ hosbyQuery }} from "../api/hosbyClient"
2. Define a TypeScript interface named "{model}" that reflects the schema
3. Implement a class with CRUD methods using the Hosby client methods documented above
4. Include error handling with specific error messages
5. Add JSDoc documentation for all methods
6. Use proper TypeScript typings throughout
7. Export a singleton instance of the service

Return only the TypeScript code for the service, nothing else."""


def build_service_prompt(table_name: str, table: Table) -> str:
    return _SERVICE_PROMPT.format(
        table=table_name,
        schema=json.dumps(table, indent=2, ensure_ascii=False),
        docs=CRUD_METHODS_DOC,
        model=pascal_case(table_name),
    )
