"""hosby login / hosby logout — manage the backend session."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from hosby.auth.session import logout, save_credentials
from hosby.auth.store import FileCredentialStore
from hosby.cli.common import console, fail, load_context, spinner
from hosby.config import ensure_global_config
from hosby.exceptions import HosbyError
from hosby.sync.client import BackendClient


def login_cmd(
    ctx: typer.Context,
    email: Annotated[
        str,
        typer.Option("--email", prompt="Email Hosby", help="Account email."),
    ],
    token: Annotated[
        str,
        typer.Option("--token", prompt="Hosby CLI Token", hide_input=True, help="CLI token from the Hosby dashboard."),
    ],
) -> None:
    """Log in with your email and CLI token."""
    cfg, log_config = load_context(ctx, Path.cwd())
    client = BackendClient(cfg.sync.api_url, timeout=cfg.sync.timeout, log_config=log_config)

    try:
        with spinner() as prog:
            prog.add_task("Authenticating…", total=None)
            credentials = client.login(email.strip(), token.strip())
        ensure_global_config()
        save_credentials(FileCredentialStore(log_config=log_config), credentials)
    except HosbyError as exc:
        fail(exc, log_config)

    console.print("[green]✓[/] Successfully logged in! Your credentials are stored in ~/.hosby.")


def logout_cmd(ctx: typer.Context) -> None:
    """Remove the stored session."""
    _, log_config = load_context(ctx, Path.cwd())
    try:
        logout(FileCredentialStore(log_config=log_config))
    except HosbyError as exc:
        fail(exc, log_config)
    console.print("[green]✓[/] Logged out.")
