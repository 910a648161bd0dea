"""
In-process event hub
"""
import asyncio
from typing import Any, Dict, List

from ...core.interfaces import EventHandler, EventSource, Unsubscribe
from ...core.logging import get_logger

logger = get_logger(__name__)


class EventHub(EventSource):
    """
    Channel fan-out for engine events.

    ``publish`` delivers synchronously to the listeners of one channel in
    registration order, so events published on a channel are handled in the
    order they were published. Engines running on other threads use
    ``publish_threadsafe``, which queues delivery onto the loop.
    """
    
    def __init__(self):
        self._listeners: Dict[str, List[EventHandler]] = {}
    
    def subscribe(self, channel: str, handler: EventHandler) -> Unsubscribe:
        """
        Register a handler for a channel.
        
        Args:
            channel: Channel name
            handler: Called with each payload published on the channel
        
        Returns:
            Callable removing this registration; calling it twice is harmless
        """
        self._listeners.setdefault(channel, []).append(handler)
        
        def unsubscribe() -> None:
            handlers = self._listeners.get(channel, [])
            if handler in handlers:
                handlers.remove(handler)
        
        return unsubscribe
    
    def listener_count(self, channel: str) -> int:
        """Number of handlers registered on a channel"""
        return len(self._listeners.get(channel, []))
    
    def publish(self, channel: str, payload: Dict[str, Any]) -> int:
        """
        Deliver a payload to the channel's handlers.
        
        Returns:
            Number of handlers the payload was delivered to
        """
        handlers = list(self._listeners.get(channel, []))
        if not handlers:
            logger.debug(f"No listeners on {channel}, event discarded")
        for handler in handlers:
            handler(payload)
        return len(handlers)
    
    def publish_threadsafe(
        self,
        loop: asyncio.AbstractEventLoop,
        channel: str,
        payload: Dict[str, Any],
    ) -> None:
        """Schedule ``publish`` on ``loop`` from any thread"""
        loop.call_soon_threadsafe(self.publish, channel, payload)
