"""
Transfer orchestrator - owns the registry and its lifecycle
"""
from collections import deque
from typing import Callable, Deque, List, Optional

from ...core.exceptions import HistoryError
from ...core.interfaces import EventSource, HistoryStore, TransferEngine
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from .dispatcher import CommandDispatcher
from .events import TransferEvent
from .models import Notification, OrchestratorConfig, PendingConnection, PendingOffer, Session, TransferRecord
from .reducer import Notify, ScheduleRemoval, TransferCompleted, TransferFailedEffect, reduce
from .registry import RegistryState, SessionRegistry
from .scheduler import CompletionScheduler
from .subscriptions import SubscriptionManager

logger = get_logger(__name__)


class TransferOrchestrator:
    """
    Tracks every in-flight send and receive.

    Engine events flow through the reducer into the registry; user actions
    go out through ``commands``. The presentation layer reads immutable
    snapshots via ``sessions()``/``offers()`` and drains
    ``notifications``.

    Use as an async context manager so subscriptions and removal timers are
    released on every exit path::

        async with TransferOrchestrator(engine, hub) as orchestrator:
            session_id = await orchestrator.commands.initiate_send(["report.pdf"])
    """

    def __init__(
        self,
        engine: Optional[TransferEngine],
        source: EventSource,
        config: Optional[OrchestratorConfig] = None,
        history_store: Optional[HistoryStore] = None,
        telemetry: Optional[Telemetry] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        """
        Initialize transfer orchestrator.

        Args:
            engine: Transfer engine (None for observe-only use)
            source: Engine event channels
            config: Orchestrator configuration
            history_store: Where completed transfers are recorded (optional)
            telemetry: Telemetry collector (defaults to the global one)
            id_factory: Session id generator override
        """
        self.config = config or OrchestratorConfig()
        self.config.validate()
        self.telemetry = telemetry or get_telemetry()
        self.history_store = history_store

        self.registry = SessionRegistry()
        self.scheduler = CompletionScheduler(self.registry.remove, self.config.completion_delay)
        self.subscriptions = SubscriptionManager(source, self.apply, telemetry=self.telemetry)

        dispatcher_kwargs = {}
        if id_factory is not None:
            dispatcher_kwargs["id_factory"] = id_factory
        self.commands = CommandDispatcher(
            self.registry,
            engine,
            telemetry=self.telemetry,
            **dispatcher_kwargs,
        )
        self.notifications: Deque[Notification] = deque(maxlen=self.config.notification_limit)

    # ============================================================
    # Lifecycle
    # ============================================================

    @property
    def running(self) -> bool:
        return self.subscriptions.active

    async def start(self) -> None:
        """Subscribe to the engine's event channels (idempotent)"""
        self.subscriptions.start()
        logger.info("Transfer orchestrator started")

    async def close(self) -> None:
        """Release subscriptions and pending removal timers"""
        try:
            self.subscriptions.close()
        finally:
            self.scheduler.cancel_all()
        logger.info("Transfer orchestrator stopped")

    async def __aenter__(self) -> "TransferOrchestrator":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ============================================================
    # Event application
    # ============================================================

    def apply(self, event: TransferEvent) -> None:
        """Reduce one event into the registry and run its effects"""
        logger.debug(f"Applying {event!r}")
        transition = reduce(self.registry.state, event)
        self.registry.commit(transition.state)

        for effect in transition.effects:
            if isinstance(effect, ScheduleRemoval):
                self.scheduler.schedule(effect.session_id)
            elif isinstance(effect, Notify):
                self.notifications.append(effect.notification)
            elif isinstance(effect, TransferCompleted):
                self._on_completed(effect.session)
            elif isinstance(effect, TransferFailedEffect):
                self.telemetry.record_event("session.failed", {
                    "session_id": effect.session.id,
                    "error": effect.session.error,
                })

    def _on_completed(self, session: Session) -> None:
        self.telemetry.record_event("session.completed", {
            "session_id": session.id,
            "direction": session.direction.value,
            "bytes": session.total_bytes,
        })
        if self.history_store is None or not self.config.record_history:
            return
        record = TransferRecord.from_session(session)
        try:
            self.history_store.append(record.direction.value, record.to_dict())
        except HistoryError as e:
            logger.warning(f"Could not record history for {session.id}: {e}")

    # ============================================================
    # Read-only projections
    # ============================================================

    def snapshot(self) -> RegistryState:
        """Current immutable registry state"""
        return self.registry.state

    def get(self, session_id: str) -> Optional[Session]:
        return self.registry.get(session_id)

    def sessions(self, newest_first: bool = True) -> List[Session]:
        return self.registry.values(newest_first)

    def offers(self) -> List[PendingOffer]:
        return list(self.registry.state.offers.values())

    def connections(self) -> List[PendingConnection]:
        return list(self.registry.state.connections.values())

    def drain_notifications(self) -> List[Notification]:
        """Return and clear queued notifications, oldest first"""
        drained = list(self.notifications)
        self.notifications.clear()
        return drained

    def on_change(self, listener: Callable[[RegistryState], None]) -> Callable[[], None]:
        """Register a listener for committed state changes"""
        return self.registry.add_listener(listener)
