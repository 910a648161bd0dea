"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.exceptions import ConfigError
from ...core.logging import setup_logging, get_logger, get_stderr_console
from ..config import load_orchestrator_config
from .history import register_history_command
from .replay import register_replay_command

logger = get_logger(__name__)
stderr_console = get_stderr_console()

app = typer.Typer(
    name="wyrmhole",
    add_completion=False,
    help="Transfer session orchestrator tools",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_replay_command(app)
register_history_command(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    history_dir: Optional[Path] = typer.Option(
        None,
        "--history-dir",
        help="Directory holding the transfer history",
    ),
):
    """
    wyrmhole - transfer session orchestrator tools
    
    Use subcommands to perform different operations:
    - replay: Feed recorded engine events through the orchestrator
    - history: Show or export completed transfers
    """
    setup_logging(level=log_level, log_file=log_file)
    
    overrides = {"history_dir": str(history_dir)} if history_dir else None
    try:
        ctx.obj = load_orchestrator_config(config_file, overrides)
    except ConfigError as e:
        stderr_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
