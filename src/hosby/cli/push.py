"""hosby push — send the local schema to the linked Hosby project."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from hosby.cli.common import STATE_LABELS, build_engine, console, fail, load_context, spinner
from hosby.exceptions import HosbyError
from hosby.sync.engine import PushOutcome


def push_cmd(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Push even if the schema is unchanged since the last push."),
    ] = False,
    project_dir: Annotated[
        Path,
        typer.Option("--dir", hidden=True, help="Override the project directory (for testing)."),
    ] = Path("."),
) -> None:
    """Push hosby.schema.json to the Hosby backend."""
    cfg, log_config = load_context(ctx, project_dir)

    with spinner() as prog:
        task = prog.add_task("Loading schema…", total=None)

        def on_state(state):
            if state in STATE_LABELS:
                prog.update(task, description=STATE_LABELS[state])

        engine = build_engine(project_dir, cfg, log_config, on_state=on_state)
        try:
            result = engine.push(force=force)
        except HosbyError as exc:
            prog.stop()
            fail(exc, log_config)

    if result.outcome is PushOutcome.UNCHANGED:
        console.print(
            "[green]✓[/] Schema unchanged since last push. Nothing to do.\n"
            "  Use  hosby push --force  to push anyway."
        )
        return
    console.print(f"[green]✓[/] Schema pushed successfully [dim](hash {result.hash})[/]")
