"""Helpers shared by the hosby commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from hosby.auth.store import FileCredentialStore
from hosby.cli.errors import format_error
from hosby.config import HosbyConfig, load_config
from hosby.exceptions import HosbyError
from hosby.logging_config import LogConfig
from hosby.schema.store import SchemaStore
from hosby.sync.engine import SyncEngine, SyncState
from hosby.sync.state import SyncStateStore

console = Console()


def spinner() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
        console=console,
    )


def fail(exc: HosbyError, log_config: LogConfig | None = None) -> NoReturn:
    """Print a one-line diagnostic for *exc* and exit 1.

    Must be called from inside the ``except`` block so the traceback is
    available when debug logging is on.
    """
    console.print(format_error(exc))
    if log_config is not None and log_config.debug_enabled:
        console.print_exception()
    raise typer.Exit(1)


def load_context(ctx: typer.Context, project_dir: Path) -> tuple[HosbyConfig, LogConfig]:
    """Load config for *project_dir* and build the run's LogConfig.

    Level precedence: --log-level, HOSBY_LOG_LEVEL, config, info.
    """
    flag_level = ctx.obj.get("log_level") if isinstance(ctx.obj, dict) else None
    try:
        cfg = load_config(project_dir)
    except HosbyError as exc:
        fail(exc, LogConfig.from_level(flag_level))
    return cfg, LogConfig.from_level(flag_level or cfg.logging.level)


def build_engine(
    project_dir: Path,
    cfg: HosbyConfig,
    log_config: LogConfig,
    on_state=None,
) -> SyncEngine:
    return SyncEngine(
        SchemaStore(project_dir, log_config=log_config),
        SyncStateStore(project_dir, log_config=log_config),
        FileCredentialStore(log_config=log_config),
        api_url=cfg.sync.api_url,
        timeout=cfg.sync.timeout,
        on_state=on_state,
        log_config=log_config,
    )


STATE_LABELS: dict[SyncState, str] = {
    SyncState.HASHING: "Computing schema hash…",
    SyncState.SENDING: "Sending schema to Hosby…",
    SyncState.FETCHING: "Fetching schema from Hosby…",
    SyncState.RESOLVING: "Applying resolution…",
}
