"""hosby scan — infer hosby.schema.json from a project's source code.

Pipeline: select files → reduce content → infer (structural or AI)
→ sanitize/filter → write. Nothing is written when inference fails.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from hosby.auth.store import FileCredentialStore
from hosby.cli.common import console, fail, load_context, spinner
from hosby.exceptions import HosbyError, ValidationError
from hosby.infer.base import make_inferencer
from hosby.schema.sanitize import SchemaFilter, process_schema
from hosby.schema.store import SchemaStore


def scan_cmd(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(help="Project directory to scan."),
    ] = Path("."),
    ai: Annotated[
        bool,
        typer.Option("--ai", help="Infer the schema with an AI provider instead of type declarations."),
    ] = False,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="AI provider for this run: openai | claude."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", min=1.0, help="AI request timeout in seconds (default 60)."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the schema instead of writing it."),
    ] = False,
) -> None:
    """Scan a project and generate hosby.schema.json."""
    root = path.resolve()
    cfg, log_config = load_context(ctx, root if root.is_dir() else Path.cwd())

    try:
        if not root.is_dir():
            raise ValidationError(f"Scan path does not exist or is not a directory: {path}")

        inferencer = make_inferencer(
            ai,
            cfg,
            FileCredentialStore(log_config=log_config),
            provider=provider,
            timeout=timeout,
            log_config=log_config,
        )
        label = "Analyzing project with AI…" if ai else "Scanning type declarations…"
        with spinner() as prog:
            prog.add_task(label, total=None)
            raw = inferencer.infer(root)

        schema_filter = SchemaFilter(cfg.scan.ignored_components, log_config=log_config)
        schema, removed = process_schema(raw, schema_filter)
    except HosbyError as exc:
        fail(exc, log_config)

    if not schema["tables"]:
        console.print("[yellow]⚠[/] No tables found. The generated schema is empty.")

    if dry_run:
        console.print_json(json.dumps(schema, ensure_ascii=False))
        return

    store = SchemaStore(root, log_config=log_config)
    try:
        written = store.save(schema)
    except HosbyError as exc:
        fail(exc, log_config)

    console.print(f"[green]✓[/] Schema generated: {store.path}")
    if removed:
        console.print(f"  Filtered out {removed} UI component tables")
    _print_stats(written)


def _print_stats(schema: dict) -> None:
    tables, columns = SchemaStore.stats(schema)
    if tables == 0:
        return
    table = Table(title=f"{tables} tables, {columns} fields", show_header=True, header_style="bold")
    table.add_column("Table", style="bold")
    table.add_column("Fields", justify="right")
    for name, cols in schema["tables"].items():
        table.add_row(name, str(len(cols)))
    console.print(table)
