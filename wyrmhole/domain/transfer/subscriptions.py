"""
Event subscription manager
"""
from typing import Any, Callable, Dict, Iterable, List, Optional

from ...core.constants import ALL_CHANNELS
from ...core.exceptions import EventPayloadError, SubscriptionError
from ...core.interfaces import EventSource, Unsubscribe
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from .events import TransferEvent, parse_event

logger = get_logger(__name__)


class SubscriptionManager:
    """
    Holds exactly one subscription per engine channel.

    ``start`` is idempotent and ``close`` releases every subscription once,
    even when an individual unsubscribe fails. A payload that cannot be
    decoded, or whose handling raises, is logged and dropped without
    touching the other subscriptions.
    """

    def __init__(
        self,
        source: EventSource,
        on_event: Callable[[TransferEvent], None],
        channels: Iterable[str] = ALL_CHANNELS,
        telemetry: Optional[Telemetry] = None,
    ):
        """
        Initialize subscription manager.

        Args:
            source: Engine event source
            on_event: Receives each decoded event, in arrival order per channel
            channels: Channels to subscribe to
            telemetry: Telemetry collector (defaults to the global one)
        """
        self.source = source
        self.on_event = on_event
        self.channels = tuple(channels)
        self.telemetry = telemetry or get_telemetry()
        self._unsubscribers: Dict[str, Unsubscribe] = {}

    @property
    def active(self) -> bool:
        return bool(self._unsubscribers)

    @property
    def active_channels(self) -> List[str]:
        return list(self._unsubscribers)

    def start(self) -> None:
        """
        Subscribe to every channel.

        Raises:
            SubscriptionError: If a channel cannot be subscribed; channels
                already subscribed are released before raising
        """
        if self._unsubscribers:
            logger.debug("Subscriptions already active")
            return

        for channel in self.channels:
            try:
                self._unsubscribers[channel] = self.source.subscribe(
                    channel, self._handler_for(channel)
                )
            except Exception as e:
                self.close()
                raise SubscriptionError(f"Failed to subscribe to {channel}: {e}") from e
        logger.debug(f"Subscribed to {len(self._unsubscribers)} channels")

    def close(self) -> None:
        """Release all subscriptions"""
        unsubscribers, self._unsubscribers = self._unsubscribers, {}
        for channel, unsubscribe in unsubscribers.items():
            try:
                unsubscribe()
            except Exception:
                logger.exception(f"Failed to unsubscribe from {channel}")

    def __enter__(self) -> "SubscriptionManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _handler_for(self, channel: str) -> Callable[[Any], None]:
        def handle(payload: Any) -> None:
            try:
                event = parse_event(channel, payload)
            except EventPayloadError as e:
                logger.warning(f"Dropping malformed event: {e}")
                self.telemetry.record_event("event.dropped", {"channel": channel, "reason": str(e)})
                return
            try:
                self.on_event(event)
            except Exception:
                logger.exception(f"Failed to apply {channel} event")
                self.telemetry.record_event("event.dropped", {"channel": channel})

        return handle
