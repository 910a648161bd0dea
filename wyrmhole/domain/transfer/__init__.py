"""
Transfer session domain module
"""
from .models import (
    Direction,
    Phase,
    Session,
    PendingOffer,
    PendingConnection,
    Notification,
    NotificationKind,
    TransferRecord,
    OrchestratorConfig,
)
from .events import CodeAssigned, Progress, TransferFailed, OfferReceived, parse_event
from .registry import RegistryState, SessionRegistry
from .reducer import reduce, Transition
from .scheduler import CompletionScheduler
from .subscriptions import SubscriptionManager
from .dispatcher import CommandDispatcher
from .service import TransferOrchestrator

__all__ = [
    "Direction",
    "Phase",
    "Session",
    "PendingOffer",
    "PendingConnection",
    "Notification",
    "NotificationKind",
    "TransferRecord",
    "OrchestratorConfig",
    "CodeAssigned",
    "Progress",
    "TransferFailed",
    "OfferReceived",
    "parse_event",
    "RegistryState",
    "SessionRegistry",
    "reduce",
    "Transition",
    "CompletionScheduler",
    "SubscriptionManager",
    "CommandDispatcher",
    "TransferOrchestrator",
]
