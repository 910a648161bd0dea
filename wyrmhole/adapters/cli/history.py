"""
History CLI command
"""
from pathlib import Path
from typing import Optional

import typer

from ...core.constants import DEFAULT_HISTORY_DIR
from ...core.exceptions import HistoryError
from ...core.logging import get_stdout_console, get_stderr_console
from ...domain.transfer import Direction, OrchestratorConfig
from ...infrastructure.state import JsonHistoryStore
from .render import history_table

stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


def register_history_command(app: typer.Typer) -> None:
    """Register history command on the main app"""
    app.command(name="history")(history_run)


def history_run(
    ctx: typer.Context,
    direction: Direction = typer.Option(
        Direction.RECEIVE, "--direction", "-d", help="Which history to show"
    ),
    export: Optional[Path] = typer.Option(
        None, "--export", help="Write the history as JSON to this path instead of printing it"
    ),
):
    """
    Show or export completed transfers.
    """
    config: OrchestratorConfig = ctx.obj or OrchestratorConfig()
    store = JsonHistoryStore(Path(config.history_dir or DEFAULT_HISTORY_DIR))
    
    try:
        if export is not None:
            count = store.export(direction.value, export)
            stdout_console.print(f"[green]✓[/green] Exported {count} record(s) to {export}")
            return
        records = store.list(direction.value)
    except HistoryError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    
    if not records:
        stdout_console.print("[dim]No transfers recorded[/dim]")
        return
    stdout_console.print(history_table(direction.value, records))
