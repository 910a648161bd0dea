"""
Rich renderables for sessions, offers and history
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ...core.utils import format_bytes
from ...domain.transfer.models import Notification, PendingOffer, Phase, Session

_PHASE_STYLES = {
    Phase.PREPARING: "dim",
    Phase.WAITING: "yellow",
    Phase.PACKAGING: "yellow",
    Phase.SENDING: "cyan",
    Phase.RECEIVING: "cyan",
    Phase.COMPLETED: "green",
    Phase.FAILED: "red",
}


def _progress_text(session: Session) -> str:
    if session.total_bytes == 0:
        return f"{session.percentage}%"
    return (
        f"{session.percentage}% ({format_bytes(session.transferred_bytes)}"
        f" / {format_bytes(session.total_bytes)})"
    )


def session_table(sessions: Iterable[Session]) -> Table:
    """Table of active sessions, one row each"""
    table = Table(title="Transfers", expand=False)
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Dir")
    table.add_column("Name")
    table.add_column("Phase")
    table.add_column("Progress", justify="right")
    table.add_column("Code")
    table.add_column("Error", style="red")

    for session in sessions:
        phase = Phase.FAILED if session.is_failed else session.phase
        table.add_row(
            session.id[:8],
            "↑" if session.direction.value == "send" else "↓",
            session.display_name,
            Text(phase.value, style=_PHASE_STYLES[phase]),
            _progress_text(session),
            session.connection_code or "",
            session.error or "",
        )
    return table


def offer_table(offers: Iterable[PendingOffer]) -> Table:
    """Table of offers waiting for accept or deny"""
    table = Table(title="Pending offers")
    table.add_column("Id", style="dim")
    table.add_column("File")
    table.add_column("Size", justify="right")
    for offer in offers:
        size = format_bytes(offer.file_size) if offer.file_size is not None else "unknown"
        table.add_row(offer.id, offer.file_name, size)
    return table


def notification_lines(notifications: Iterable[Notification]) -> List[str]:
    """Markup lines for queued notifications"""
    lines = []
    for note in notifications:
        if note.is_error:
            lines.append(f"[red]✗[/red] {escape(note.message)}")
        else:
            lines.append(f"[cyan]ℹ[/cyan] {escape(note.message)}")
    return lines


def history_table(direction: str, records: Iterable[Dict[str, Any]]) -> Table:
    """Table of completed transfers, newest first"""
    table = Table(title=f"{'Sent' if direction == 'send' else 'Received'} files")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Code")
    table.add_column("Completed")
    for record in reversed(list(records)):
        completed = record.get("completed_at")
        when = datetime.fromtimestamp(completed).strftime("%Y-%m-%d %H:%M") if completed else ""
        table.add_row(
            str(record.get("file_name", "")),
            format_bytes(int(record.get("file_size") or 0)),
            record.get("connection_code") or "",
            when,
        )
    return table
