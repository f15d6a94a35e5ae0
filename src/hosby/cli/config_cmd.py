"""hosby config CLI commands.

Commands:
  hosby config project --id ID --name NAME   — link the local schema to a project
  hosby config ai --provider P [--api-key K] — select the AI provider and store its key
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from hosby.auth.store import FileCredentialStore
from hosby.cli.common import console, fail, load_context
from hosby.cli.errors import err_invalid_api_key
from hosby.config import ensure_global_config
from hosby.exceptions import HosbyError
from hosby.infer.providers import AI_PROVIDERS, PROVIDER_CREDENTIAL_KEY, get_provider
from hosby.schema.store import SchemaStore

config_app = typer.Typer(
    name="config",
    help="Configure the project link and the AI provider.",
    add_completion=False,
)


@config_app.command("project")
def config_project_cmd(
    ctx: typer.Context,
    project_id: Annotated[
        str,
        typer.Option("--id", prompt="Project ID", help="Hosby project ID."),
    ],
    name: Annotated[
        str,
        typer.Option("--name", prompt="Project name", help="Hosby project name."),
    ],
    project_dir: Annotated[
        Path,
        typer.Option("--dir", hidden=True, help="Override the project directory (for testing)."),
    ] = Path("."),
) -> None:
    """Link hosby.schema.json to a Hosby project."""
    _, log_config = load_context(ctx, project_dir)
    project_id = project_id.strip()
    if not project_id:
        console.print("[red]Error:[/] Project ID must not be empty.\n  Run:  hosby config project --id <id> --name <name>")
        raise typer.Exit(1)

    store = SchemaStore(project_dir, log_config=log_config)
    try:
        store.set_project_identity(project_id, name.strip())
    except HosbyError as exc:
        fail(exc, log_config)
    console.print(f"[green]✓[/] Project configured: {escape(name)} ({escape(project_id)})")


@config_app.command("ai")
def config_ai_cmd(
    ctx: typer.Context,
    provider: Annotated[
        str,
        typer.Option("--provider", help=f"AI provider: {' | '.join(AI_PROVIDERS)}."),
    ],
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="Provider API key (stored in ~/.hosby/credentials.json)."),
    ] = None,
) -> None:
    """Select the AI provider used by  hosby scan --ai."""
    _, log_config = load_context(ctx, Path.cwd())
    try:
        spec = get_provider(provider)
    except ValueError as exc:
        console.print(f"[red]Error:[/] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    store = FileCredentialStore(log_config=log_config)
    if api_key is not None:
        problem = spec.validate_key(api_key.strip())
        if problem:
            console.print(err_invalid_api_key(spec.id, problem))
            raise typer.Exit(1)

    try:
        ensure_global_config()
        if api_key is not None:
            store.set(spec.credential_key, api_key.strip())
        store.set(PROVIDER_CREDENTIAL_KEY, spec.id)
    except HosbyError as exc:
        fail(exc, log_config)
    console.print(f"[green]✓[/] AI provider set to {spec.name}")
    if api_key is None and not store.get(spec.credential_key):
        console.print(
            f"  [yellow]No API key stored.[/] Set {spec.env_var} or run:\n"
            f"    hosby config ai --provider {spec.id} --api-key <key>"
        )
