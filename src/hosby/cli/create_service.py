"""hosby create-service — generate a TypeScript CRUD service for a schema table.

Usage:
  hosby create-service [TABLE] [--ai | --template] [--provider P] [--timeout S] [--yes]

Without TABLE the tables of hosby.schema.json are listed and one is picked.
Without --ai/--template the user is asked. The file goes to
src/services/<table>.service.ts; an existing file is only replaced after
confirmation (or --yes).
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from hosby.auth.store import FileCredentialStore
from hosby.cli.common import console, fail, load_context, spinner
from hosby.codegen.service import SERVICE_AI_TIMEOUT, ServiceAI, ServiceGenerator
from hosby.codegen.writer import check_overwrite
from hosby.exceptions import HosbyError, ValidationError
from hosby.infer.ai import resolve_api_key, resolve_provider
from hosby.schema.store import SchemaStore


def _pick_table(names: list[str]) -> str:
    console.print("Select a table to generate a service for:")
    for number, name in enumerate(names, start=1):
        console.print(f"  {number}) {escape(name)}")
    choice = typer.prompt("Table", type=int)
    if not 1 <= choice <= len(names):
        raise ValidationError(f"Invalid choice {choice}; pick a number between 1 and {len(names)}.")
    return names[choice - 1]


def create_service_cmd(
    ctx: typer.Context,
    table: Annotated[
        str | None,
        typer.Argument(help="Table to generate a service for (prompted if omitted)."),
    ] = None,
    use_ai: Annotated[
        bool | None,
        typer.Option("--ai/--template", help="Generate with the AI provider or from the template."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="AI provider for this run: openai | claude."),
    ] = None,
    timeout: Annotated[
        float,
        typer.Option("--timeout", min=1.0, help="AI request timeout in seconds; on timeout the template is used."),
    ] = SERVICE_AI_TIMEOUT,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Overwrite an existing service file without asking."),
    ] = False,
    project_dir: Annotated[
        Path,
        typer.Option("--dir", hidden=True, help="Override the project directory (for testing)."),
    ] = Path("."),
) -> None:
    """Generate a CRUD service for a table of hosby.schema.json."""
    cfg, log_config = load_context(ctx, project_dir)
    generator = ServiceGenerator(SchemaStore(project_dir, log_config=log_config), log_config=log_config)

    try:
        name = table if table is not None else _pick_table(generator.tables())
        generator.table(name)
        target = generator.target(name)
    except HosbyError as exc:
        fail(exc, log_config)

    if not check_overwrite(target, yes=yes):
        console.print("  [dim]Cancelled.[/]")
        raise typer.Exit(0)

    if use_ai is None:
        use_ai = typer.confirm("Would you like to use AI to generate this service?", default=False)

    try:
        ai = None
        if use_ai:
            store = FileCredentialStore(log_config=log_config)
            spec = resolve_provider(provider, store, cfg.ai.provider)
            ai = ServiceAI(
                provider=spec,
                api_key=resolve_api_key(spec, None, store),
                model=cfg.ai.model,
                timeout=timeout,
                max_tokens=cfg.ai.max_tokens,
            )
        with spinner() as prog:
            prog.add_task(f"Generating service for {escape(name)}…", total=None)
            service = generator.generate(name, ai)
    except HosbyError as exc:
        fail(exc, log_config)

    how = "with AI" if service.source == "ai" else "using template"
    console.print(f"[green]✓[/] Service for {escape(name)} generated successfully {how}: {service.path}")
    if service.fell_back:
        console.print(
            "  [yellow]AI generation timed out; the template was used instead.[/]\n"
            "  You can edit the generated file to customize it further."
        )
