"""hosby pull — fetch the remote schema and reconcile it with the local one.

When both sides changed since the last pull, the user picks one of:
server version, keep local, shallow merge, or view a diff first.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from hosby.cli.common import STATE_LABELS, build_engine, console, fail, load_context, spinner
from hosby.exceptions import HosbyError
from hosby.sync.engine import ConflictAction, ConflictContext, ConflictResolver, PullOutcome

_LABELS: dict[ConflictAction, str] = {
    ConflictAction.SERVER: "Use server version (overwrite local changes)",
    ConflictAction.LOCAL: "Keep local version (reject server changes)",
    ConflictAction.MERGE: "Merge changes (server has priority for conflicts)",
    ConflictAction.DIFF: "View differences before deciding",
}

_MESSAGES: dict[PullOutcome, str] = {
    PullOutcome.NO_UPDATES: "[green]✓[/] Pull completed. No schema updates available.",
    PullOutcome.UP_TO_DATE: "[green]✓[/] Pull completed. Schema is already up to date.",
    PullOutcome.UPDATED: "[green]✓[/] Pull completed successfully! Schema updated.",
    PullOutcome.KEPT_LOCAL: "[green]✓[/] Pull completed. Local schema preserved.",
    PullOutcome.MERGED: "[green]✓[/] Pull completed with merge. Schema updated.",
    PullOutcome.REPLACED: "[green]✓[/] Pull completed. Local schema replaced with server version.",
}


def prompt_resolver(before_prompt: Callable[[], None] | None = None) -> ConflictResolver:
    """Resolver that asks on the terminal. Invalid numbers resolve to nothing."""

    def resolve(context: ConflictContext) -> ConflictAction | None:
        if before_prompt is not None:
            before_prompt()
        if context.diff is None:
            console.print(
                "\n[yellow]Conflict:[/] both local and server schemas have changed. "
                "How would you like to proceed?"
            )
            options = [ConflictAction.SERVER, ConflictAction.LOCAL, ConflictAction.MERGE, ConflictAction.DIFF]
        else:
            console.print(f"\n{escape(context.diff)}\n")
            console.print("How would you like to proceed?")
            options = [ConflictAction.SERVER, ConflictAction.LOCAL, ConflictAction.MERGE]

        for number, action in enumerate(options, start=1):
            console.print(f"  {number}) {_LABELS[action]}")
        choice = typer.prompt("Choice", type=int)
        if not 1 <= choice <= len(options):
            return None
        return options[choice - 1]

    return resolve


def pull_cmd(
    ctx: typer.Context,
    project_dir: Annotated[
        Path,
        typer.Option("--dir", hidden=True, help="Override the project directory (for testing)."),
    ] = Path("."),
) -> None:
    """Pull the schema from the Hosby backend."""
    cfg, log_config = load_context(ctx, project_dir)

    with spinner() as prog:
        task = prog.add_task("Loading schema…", total=None)

        def on_state(state):
            if state in STATE_LABELS:
                prog.update(task, description=STATE_LABELS[state])

        engine = build_engine(project_dir, cfg, log_config, on_state=on_state)
        try:
            result = engine.pull(prompt_resolver(before_prompt=prog.stop))
        except HosbyError as exc:
            prog.stop()
            fail(exc, log_config)

    console.print(_MESSAGES[result.outcome])
    if result.message:
        console.print(f"  [dim]{escape(result.message)}[/]")
