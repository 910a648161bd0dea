"""
wyrmhole - transfer session orchestrator

Tracks in-flight sends and receives reported by an external transfer
engine and reconciles them with user actions:
- Session registry with structural merge updates
- Pure event reducer for progress, error, offer and code events
- Command dispatcher with optimistic session inserts
- Scoped event subscriptions and delayed removal of finished transfers
"""

__version__ = "0.1.0"

from .domain.transfer import (
    Direction,
    Phase,
    Session,
    PendingOffer,
    Notification,
    OrchestratorConfig,
    TransferOrchestrator,
)
from .infrastructure.events import EventHub
from .infrastructure.state import JsonHistoryStore

__all__ = [
    "__version__",
    "Direction",
    "Phase",
    "Session",
    "PendingOffer",
    "Notification",
    "OrchestratorConfig",
    "TransferOrchestrator",
    "EventHub",
    "JsonHistoryStore",
]
