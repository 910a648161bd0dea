"""
Telemetry and metrics collection
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
import time


@dataclass
class Event:
    """Event record"""
    name: str
    timestamp: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)


class Telemetry:
    """Telemetry collector"""
    
    def __init__(self):
        self._events: list[Event] = []
        self._counters: Dict[str, int] = {}
    
    def record_event(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Record an event and bump its counter"""
        self._events.append(Event(name=name, metadata=metadata or {}))
        self._counters[name] = self._counters.get(name, 0) + 1
    
    def count(self, name: str) -> int:
        """Number of times ``name`` was recorded"""
        return self._counters.get(name, 0)
    
    def get_events(self, name: Optional[str] = None) -> list[Event]:
        """Get recorded events, optionally filtered by name"""
        if name is None:
            return self._events.copy()
        return [e for e in self._events if e.name == name]
    
    def clear(self) -> None:
        """Clear all events and counters"""
        self._events.clear()
        self._counters.clear()


# Global telemetry instance
_telemetry = Telemetry()


def get_telemetry() -> Telemetry:
    """Get global telemetry instance"""
    return _telemetry
