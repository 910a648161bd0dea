"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional


EventHandler = Callable[[Dict[str, Any]], None]
Unsubscribe = Callable[[], None]


class TransferEngine(ABC):
    """
    Boundary to the external transfer engine.

    Commands acknowledge quickly; progress is reported later through the
    engine's event channels. Failures are raised as exceptions.
    """
    
    @abstractmethod
    async def send_file(self, path: str, session_id: str) -> None:
        """Start sending a single file under ``session_id``"""
        pass
    
    @abstractmethod
    async def send_files(
        self,
        paths: List[str],
        session_id: str,
        folder_name: Optional[str] = None,
    ) -> None:
        """Start sending several files packaged as one transfer"""
        pass
    
    @abstractmethod
    async def accept_offer(self, offer_id: str) -> None:
        """Accept a pending file offer"""
        pass
    
    @abstractmethod
    async def deny_offer(self, offer_id: str) -> None:
        """Reject a pending file offer"""
        pass
    
    @abstractmethod
    async def cancel_send(self, session_id: str) -> None:
        """Abort an outbound transfer"""
        pass
    
    @abstractmethod
    async def cancel_download(self, session_id: str) -> None:
        """Abort an inbound transfer"""
        pass
    
    @abstractmethod
    async def lookup_offer(self, code: str, connection_id: str) -> Dict[str, Any]:
        """
        Connect with a receive code and wait for the sender's offer.

        Returns a dict with ``id``, ``file_name`` and optionally ``file_size``.
        """
        pass
    
    @abstractmethod
    async def cancel_connection(self, connection_id: str) -> None:
        """Abort an in-flight ``lookup_offer``"""
        pass


class EventSource(ABC):
    """Asynchronous engine event channels"""
    
    @abstractmethod
    def subscribe(self, channel: str, handler: EventHandler) -> Unsubscribe:
        """Register ``handler`` on ``channel``; returns a callable that removes it"""
        pass


class HistoryStore(ABC):
    """Completed transfer history storage interface"""
    
    @abstractmethod
    def append(self, direction: str, record: Dict[str, Any]) -> None:
        """Append a record to the history of one direction"""
        pass
    
    @abstractmethod
    def list(self, direction: str) -> List[Dict[str, Any]]:
        """List records for one direction, oldest first"""
        pass
    
    @abstractmethod
    def clear(self, direction: str) -> None:
        """Drop all records for one direction"""
        pass
