"""
Replay CLI command - feed recorded engine events through the orchestrator
"""
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Group
from rich.live import Live

from ...core.exceptions import WyrmholeError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.transfer import OrchestratorConfig, TransferOrchestrator
from ...infrastructure.events import EventHub
from ...infrastructure.state import JsonHistoryStore
from .render import notification_lines, offer_table, session_table

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()


def load_script(path: Path) -> List[Dict[str, Any]]:
    """
    Read a JSON-lines event script.
    
    Each non-empty line is ``{"channel": ..., "payload": {...}, "delay": 0.1}``;
    ``delay`` (seconds to wait before publishing) is optional.
    
    Raises:
        WyrmholeError: If a line is not a valid step
    """
    steps = []
    for lineno, line in enumerate(path.read_text(encoding='utf-8').splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            step = json.loads(line)
        except json.JSONDecodeError as e:
            raise WyrmholeError(f"{path}:{lineno}: invalid JSON: {e}") from e
        if not isinstance(step, dict) or "channel" not in step:
            raise WyrmholeError(f"{path}:{lineno}: step needs a 'channel'")
        steps.append(step)
    return steps


async def replay_events(
    steps: List[Dict[str, Any]],
    config: OrchestratorConfig,
    delay_scale: float = 1.0,
    live: Optional[Live] = None,
) -> TransferOrchestrator:
    """
    Publish ``steps`` on an in-process hub observed by an orchestrator.
    
    Returns the orchestrator after its subscriptions were released, so the
    final registry state can still be inspected.
    """
    hub = EventHub()
    history_store = None
    if config.record_history and config.history_dir:
        history_store = JsonHistoryStore(Path(config.history_dir))
    orchestrator = TransferOrchestrator(None, hub, config, history_store=history_store)
    
    async with orchestrator:
        for step in steps:
            delay = float(step.get("delay", 0)) * delay_scale
            if delay > 0:
                await asyncio.sleep(delay)
            hub.publish(step["channel"], step.get("payload", {}))
            if live is not None:
                live.update(_render(orchestrator))
        # Let pending completion removals fire before shutting down
        if orchestrator.scheduler.pending:
            await asyncio.sleep(config.completion_delay)
            if live is not None:
                live.update(_render(orchestrator))
    return orchestrator


def _render(orchestrator: TransferOrchestrator) -> Group:
    return Group(session_table(orchestrator.sessions()), offer_table(orchestrator.offers()))


def register_replay_command(app: typer.Typer) -> None:
    """Register replay command on the main app"""
    app.command(name="replay")(replay_run)


def replay_run(
    ctx: typer.Context,
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON-lines event script"),
    delay_scale: float = typer.Option(
        1.0, "--delay-scale", help="Multiply every step delay (0 replays instantly)"
    ),
    live: bool = typer.Option(
        False, "--live/--no-live", help="Redraw the session table after each event"
    ),
):
    """
    Replay recorded engine events and show the resulting transfers.
    
    Examples:
        wyrmhole replay events.jsonl
        wyrmhole replay --delay-scale 0 events.jsonl
    """
    config: OrchestratorConfig = ctx.obj or OrchestratorConfig()
    
    try:
        steps = load_script(script)
        if live and stdout_console.is_terminal:
            with Live(console=stdout_console, refresh_per_second=8) as display:
                orchestrator = asyncio.run(replay_events(steps, config, delay_scale, display))
        else:
            orchestrator = asyncio.run(replay_events(steps, config, delay_scale))
    except WyrmholeError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    
    if not live:
        stdout_console.print(session_table(orchestrator.sessions()))
        if orchestrator.offers():
            stdout_console.print(offer_table(orchestrator.offers()))
    for line in notification_lines(orchestrator.drain_notifications()):
        stdout_console.print(line)
    stdout_console.print(f"[green]✓[/green] Replayed {len(steps)} event(s)")
