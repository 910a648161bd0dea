"""
Completion scheduler - delayed removal of finished sessions
"""
import asyncio
import itertools
from typing import Callable, Dict, Optional

from ...core.logging import get_logger

logger = get_logger(__name__)


class CompletionScheduler:
    """
    Removes finished sessions after a fixed delay.

    Timers are never cancelled by later events for the same id; if the
    session was already dismissed or cancelled, the removal is a no-op.
    Pending timers are cancelled by ``cancel_all`` on shutdown.
    """

    def __init__(
        self,
        remove: Callable[[str], None],
        delay: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        """
        Initialize completion scheduler.

        Args:
            remove: Callback that removes a session by id
            delay: Seconds between completion and removal
            loop: Event loop (defaults to the running loop at schedule time)
        """
        self._remove = remove
        self.delay = delay
        self._loop = loop
        self._handles: Dict[int, asyncio.TimerHandle] = {}
        self._tokens = itertools.count()

    @property
    def pending(self) -> int:
        """Number of removals not yet fired"""
        return len(self._handles)

    def schedule(self, session_id: str) -> None:
        """Schedule removal of ``session_id`` after the delay"""
        loop = self._loop or asyncio.get_running_loop()
        token = next(self._tokens)
        self._handles[token] = loop.call_later(self.delay, self._fire, token, session_id)
        logger.debug(f"Removal of {session_id} scheduled in {self.delay}s")

    def _fire(self, token: int, session_id: str) -> None:
        self._handles.pop(token, None)
        logger.debug(f"Removing completed session {session_id}")
        self._remove(session_id)

    def cancel_all(self) -> None:
        """Cancel every pending removal"""
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
