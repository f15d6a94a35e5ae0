"""Hosby CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from hosby.cli.config_cmd import config_app
from hosby.cli.create_service import create_service_cmd
from hosby.cli.login import login_cmd, logout_cmd
from hosby.cli.pull import pull_cmd
from hosby.cli.push import push_cmd
from hosby.cli.scan import scan_cmd


def _version_callback(value: bool) -> None:
    if value:
        try:
            ver = importlib.metadata.version("hosby-cli")
        except importlib.metadata.PackageNotFoundError:
            ver = "dev"
        typer.echo(f"hosby {ver}")
        raise typer.Exit()


app = typer.Typer(
    name="hosby",
    help=(
        "Hosby — schema generation and sync CLI.\n\n"
        "  hosby scan   Infer hosby.schema.json from your source code.\n"
        "  hosby push   Send the schema to your Hosby project.\n"
        "  hosby pull   Fetch the project schema and reconcile local changes.\n"
        "  hosby create-service   Generate a CRUD service for a schema table."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="debug | info | warn | error | none (default: HOSBY_LOG_LEVEL or config).",
        ),
    ] = None,
) -> None:
    """Hosby — schema generation and sync CLI."""
    ctx.ensure_object(dict)["log_level"] = log_level


app.command("scan")(scan_cmd)
app.command("push")(push_cmd)
app.command("pull")(pull_cmd)
app.command("login")(login_cmd)
app.command("logout")(logout_cmd)
app.command("create-service")(create_service_cmd)
app.add_typer(config_app, name="config")


@app.command("version")
def version_cmd() -> None:
    """Show the installed Hosby version."""
    try:
        ver = importlib.metadata.version("hosby-cli")
    except importlib.metadata.PackageNotFoundError:
        ver = "dev"
    typer.echo(f"hosby {ver}")


if __name__ == "__main__":
    app()
