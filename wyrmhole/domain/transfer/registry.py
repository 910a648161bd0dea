"""
Session registry

``RegistryState`` is an immutable value: every operation returns a new
state and leaves the old one untouched, so snapshots handed to the
presentation layer never change underneath it. ``SessionRegistry`` owns
the current state and is the only place it is replaced.
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ...core.constants import RETIRED_ID_LIMIT
from ...core.logging import get_logger
from .models import PendingConnection, PendingOffer, Session

logger = get_logger(__name__)


def _frozen(mapping: Dict[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(mapping)


@dataclass(frozen=True)
class RegistryState:
    """Sessions, pending offers and pending connections at one point in time"""
    sessions: Mapping[str, Session] = field(default_factory=lambda: _frozen({}))
    offers: Mapping[str, PendingOffer] = field(default_factory=lambda: _frozen({}))
    connections: Mapping[str, PendingConnection] = field(default_factory=lambda: _frozen({}))
    retired: Tuple[str, ...] = ()

    # ---- sessions ----

    def get(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def upsert(self, session_id: str, patch: Dict[str, Any]) -> "RegistryState":
        """
        Structural merge of ``patch`` into the session ``session_id``.

        Fields absent from the patch keep their current value. A missing
        session is created from the patch on top of the model defaults.
        """
        existing = self.sessions.get(session_id)
        if existing is None:
            session = Session(id=session_id).merged(patch)
        else:
            session = existing.merged(patch)
        sessions = dict(self.sessions)
        sessions[session_id] = session
        return replace(self, sessions=_frozen(sessions))

    def remove(self, session_id: str) -> "RegistryState":
        if session_id not in self.sessions:
            return self
        sessions = dict(self.sessions)
        del sessions[session_id]
        return replace(self, sessions=_frozen(sessions))

    def values(self, newest_first: bool = True) -> List[Session]:
        """Sessions ordered by creation time"""
        return sorted(
            self.sessions.values(),
            key=lambda s: s.created_at,
            reverse=newest_first,
        )

    # ---- cancellation tombstones ----

    def retire(self, session_id: str) -> "RegistryState":
        """
        Mark an id as cancelled so later engine events for it are ignored.

        Only the most recent ``RETIRED_ID_LIMIT`` ids are kept.
        """
        if session_id in self.retired:
            return self
        retired = (self.retired + (session_id,))[-RETIRED_ID_LIMIT:]
        return replace(self, retired=retired)

    def is_retired(self, session_id: str) -> bool:
        return session_id in self.retired

    # ---- offers ----

    def add_offer(self, offer: PendingOffer) -> "RegistryState":
        offers = dict(self.offers)
        offers[offer.id] = offer
        return replace(self, offers=_frozen(offers))

    def remove_offer(self, offer_id: str) -> "RegistryState":
        if offer_id not in self.offers:
            return self
        offers = dict(self.offers)
        del offers[offer_id]
        return replace(self, offers=_frozen(offers))

    # ---- connections ----

    def add_connection(self, connection: PendingConnection) -> "RegistryState":
        connections = dict(self.connections)
        connections[connection.id] = connection
        return replace(self, connections=_frozen(connections))

    def remove_connection(self, connection_id: str) -> "RegistryState":
        if connection_id not in self.connections:
            return self
        connections = dict(self.connections)
        del connections[connection_id]
        return replace(self, connections=_frozen(connections))


Listener = Callable[[RegistryState], None]


class SessionRegistry:
    """
    Mutable owner of the current ``RegistryState``.

    Every mutation goes through ``commit`` so change listeners observe each
    committed state exactly once.
    """

    def __init__(self, state: Optional[RegistryState] = None):
        self._state = state or RegistryState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> RegistryState:
        """Current immutable snapshot"""
        return self._state

    def commit(self, state: RegistryState) -> None:
        """Replace the current state and notify listeners if it changed"""
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Registry listener failed")

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it"""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # Convenience wrappers over the current state

    def get(self, session_id: str) -> Optional[Session]:
        return self._state.get(session_id)

    def upsert(self, session_id: str, patch: Dict[str, Any]) -> Session:
        self.commit(self._state.upsert(session_id, patch))
        return self._state.sessions[session_id]

    def remove(self, session_id: str) -> None:
        self.commit(self._state.remove(session_id))

    def values(self, newest_first: bool = True) -> List[Session]:
        return self._state.values(newest_first)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._state.sessions

    def __len__(self) -> int:
        return len(self._state.sessions)
