"""
Command dispatcher - user actions against the transfer engine
"""
import uuid
from typing import Callable, List, Optional

from ...core.constants import DEFAULT_OFFER_NAME
from ...core.exceptions import CommandError, EngineUnavailableError
from ...core.interfaces import TransferEngine
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from ...core.utils import display_name_for_paths, normalize_receive_code
from .models import Direction, PendingConnection, PendingOffer, Phase, Session
from .registry import SessionRegistry

logger = get_logger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class CommandDispatcher:
    """
    Translates user actions into engine calls plus local registry updates.

    Sends and accepts insert an optimistic session before the engine is
    called so a failing call has a record to land on. The registry is only
    read or written between awaits, never across one.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        engine: Optional[TransferEngine] = None,
        id_factory: Callable[[], str] = _new_id,
        telemetry: Optional[Telemetry] = None,
    ):
        """
        Initialize command dispatcher.

        Args:
            registry: Session registry to update
            engine: Transfer engine; None runs observe-only and every
                engine command raises EngineUnavailableError
            id_factory: Generates session and connection ids
            telemetry: Telemetry collector (defaults to the global one)
        """
        self.registry = registry
        self.engine = engine
        self.id_factory = id_factory
        self.telemetry = telemetry or get_telemetry()

    def _require_engine(self, session_id: Optional[str] = None) -> TransferEngine:
        if self.engine is None:
            raise EngineUnavailableError("No transfer engine is bound", session_id)
        return self.engine

    def _fail_session(self, session_id: str, command: str, error: Exception) -> CommandError:
        """Patch a command failure onto the optimistic record"""
        message = str(error) or type(error).__name__
        logger.warning(f"{command} failed for {session_id}: {message}")
        # A record dismissed or cancelled while the command was in flight stays gone
        if session_id in self.registry and not self.registry.state.is_retired(session_id):
            self.registry.upsert(session_id, {"error": message, "phase": Phase.FAILED})
        self.telemetry.record_event("command.failed", {"command": command, "session_id": session_id})
        return CommandError(f"{command} failed: {message}", session_id)

    # ============================================================
    # Sending
    # ============================================================

    async def initiate_send(
        self,
        paths: List[str],
        display_name: Optional[str] = None,
        folder_name: Optional[str] = None,
    ) -> str:
        """
        Start an outbound transfer.

        Args:
            paths: Files to send; more than one path is sent as a bundle
            display_name: Label hint for the session
            folder_name: Bundle folder name override (multi-file only)

        Returns:
            The new session id

        Raises:
            CommandError: If no paths were given, or the engine rejected the
                send (the session is then left in the failed state)
        """
        if not paths:
            raise CommandError("No files selected to send")

        session_id = self.id_factory()
        self.registry.upsert(session_id, {
            "direction": Direction.SEND,
            "display_name": display_name_for_paths(paths, display_name, folder_name),
            "phase": Phase.PREPARING,
        })
        logger.info(f"Sending {len(paths)} file(s) as {session_id}")

        try:
            engine = self._require_engine(session_id)
            if len(paths) == 1:
                await engine.send_file(paths[0], session_id)
            else:
                await engine.send_files(list(paths), session_id, folder_name)
        except Exception as e:
            raise self._fail_session(session_id, "send", e) from e
        return session_id

    async def cancel_send(self, session_id: str) -> None:
        """
        Cancel an outbound transfer.

        The local record is removed and its id retired whether or not the
        engine confirms; an engine failure still propagates.
        """
        await self._cancel(session_id, "cancel_send")

    # ============================================================
    # Receiving
    # ============================================================

    async def request_receive(self, code: str, connection_id: Optional[str] = None) -> PendingOffer:
        """
        Look up the offer behind a receive code.

        The lookup is tracked as a pending connection until it resolves, so
        ``cancel_connection`` can abort it.

        Args:
            code: Receive code, optionally prefixed with ``wormhole receive``
            connection_id: Id for the pending connection (generated if None)

        Returns:
            The pending offer, also stored in the registry

        Raises:
            CommandError: Empty code, lookup failure, cancelled lookup or
                invalid offer
        """
        normalized = normalize_receive_code(code)
        if not normalized:
            raise CommandError("No code provided for receiving file")

        engine = self._require_engine()
        connection_id = connection_id or self.id_factory()
        self.registry.commit(
            self.registry.state.add_connection(PendingConnection(id=connection_id, code=normalized))
        )
        try:
            response = await engine.lookup_offer(normalized, connection_id)
        except Exception as e:
            logger.warning(f"Lookup for {normalized} failed: {e}")
            self.telemetry.record_event("command.failed", {"command": "request_receive"})
            raise CommandError(f"Failed to request file: {e}") from e
        finally:
            cancelled = connection_id not in self.registry.state.connections
            self.registry.commit(self.registry.state.remove_connection(connection_id))

        if cancelled:
            logger.info(f"Lookup for {normalized} was cancelled, discarding offer")
            raise CommandError("Receive was cancelled")

        if not isinstance(response, dict) or not response.get("id") or not response.get("file_name"):
            raise CommandError("Invalid file offer from engine")

        offer = PendingOffer(
            id=str(response["id"]),
            file_name=str(response["file_name"]),
            file_size=response.get("file_size"),
            connection_code=normalized,
        )
        self.registry.commit(self.registry.state.add_offer(offer))
        logger.info(f"Offer {offer.id}: {offer.file_name} ({offer.file_size} bytes)")
        return offer

    async def cancel_connection(self, connection_id: str) -> None:
        """Abort a pending receive code lookup"""
        self.registry.commit(self.registry.state.remove_connection(connection_id))
        await self._require_engine().cancel_connection(connection_id)
        logger.info(f"Cancelled connection {connection_id}")

    async def accept_offer(self, offer_id: str, file_name: Optional[str] = None) -> Optional[Session]:
        """
        Accept a pending offer.

        A receive session is inserted before the engine call; progress
        events then arrive under the same id.

        Raises:
            CommandError: The engine rejected the accept (the session is
                left in the failed state)
        """
        offer = self.registry.state.offers.get(offer_id)
        name = file_name or (offer.file_name if offer else None) or DEFAULT_OFFER_NAME

        state = self.registry.state.remove_offer(offer_id)
        state = state.upsert(offer_id, {
            "direction": Direction.RECEIVE,
            "display_name": name,
            "total_bytes": (offer.file_size or 0) if offer else 0,
            "phase": Phase.PREPARING,
        })
        self.registry.commit(state)

        try:
            await self._require_engine(offer_id).accept_offer(offer_id)
        except Exception as e:
            raise self._fail_session(offer_id, "accept", e) from e
        logger.info(f"Accepted offer {offer_id}")
        return self.registry.get(offer_id)

    async def deny_offer(self, offer_id: str) -> None:
        """Reject a pending offer; no session is created"""
        self.registry.commit(self.registry.state.remove_offer(offer_id))
        await self._require_engine().deny_offer(offer_id)
        logger.info(f"Denied offer {offer_id}")

    async def cancel_download(self, session_id: str) -> None:
        """Cancel an inbound transfer, same semantics as ``cancel_send``"""
        await self._cancel(session_id, "cancel_download")

    # ============================================================
    # Local actions
    # ============================================================

    def dismiss(self, session_id: str) -> None:
        """Remove a session locally without contacting the engine"""
        self.registry.remove(session_id)

    async def _cancel(self, session_id: str, command: str) -> None:
        self.registry.commit(self.registry.state.retire(session_id))
        try:
            engine = self._require_engine(session_id)
            await getattr(engine, command)(session_id)
        finally:
            self.registry.remove(session_id)
            logger.info(f"{command}: removed {session_id}")
