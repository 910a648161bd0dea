"""
Event reducer - pure state transitions

``reduce(state, event)`` returns the next ``RegistryState`` plus the side
effects the orchestrator must carry out (scheduling a removal, surfacing
a notification, recording history). Nothing here touches the event loop,
the engine or the file system.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Union

from ...core.constants import COMPLETE_PERCENTAGE
from .events import CodeAssigned, OfferReceived, Progress, TransferEvent, TransferFailed
from .models import Direction, Notification, NotificationKind, PendingOffer, Phase, Session
from .registry import RegistryState


@dataclass(frozen=True)
class ScheduleRemoval:
    """Remove ``session_id`` after the completion delay"""
    session_id: str


@dataclass(frozen=True)
class Notify:
    """Surface a transient notification"""
    notification: Notification


@dataclass(frozen=True)
class TransferCompleted:
    """A session just crossed 100%"""
    session: Session


@dataclass(frozen=True)
class TransferFailedEffect:
    """A session entered the failed state"""
    session: Session


Effect = Union[ScheduleRemoval, Notify, TransferCompleted, TransferFailedEffect]


@dataclass(frozen=True)
class Transition:
    """Result of applying one event"""
    state: RegistryState
    effects: Tuple[Effect, ...] = ()


def _active_phase(direction: Direction) -> Phase:
    return Phase.SENDING if direction == Direction.SEND else Phase.RECEIVING


def reduce_code_assigned(state: RegistryState, event: CodeAssigned) -> Transition:
    """
    Patch the connection code onto an existing send session.

    Failures are mailbox-level and never touch a session. A success for an
    unknown id still surfaces the code but creates nothing.
    """
    if not event.succeeded:
        note = Notification(
            kind=NotificationKind.MAILBOX_FAILURE,
            message=event.failure_message or "",
            session_id=event.session_id,
            is_error=True,
        )
        return Transition(state, (Notify(note),))

    note = Notification(
        kind=NotificationKind.CONNECTION_CODE,
        message=f"Connection code: {event.code}",
        session_id=event.session_id,
        code=event.code,
    )
    session_id = event.session_id
    if session_id is None or state.get(session_id) is None or state.is_retired(session_id):
        return Transition(state, (Notify(note),))
    return Transition(
        state.upsert(session_id, {"connection_code": event.code}),
        (Notify(note),),
    )


def reduce_progress(state: RegistryState, event: Progress) -> Transition:
    """Full patch of the progress fields; signal completion at 100%"""
    if state.is_retired(event.id):
        return Transition(state)

    complete = event.percentage >= COMPLETE_PERCENTAGE
    if complete:
        phase = Phase.COMPLETED
    else:
        phase = event.phase or _active_phase(event.direction)

    patch: Dict[str, Any] = {
        "direction": event.direction,
        "display_name": event.display_name,
        "transferred_bytes": event.transferred,
        "total_bytes": event.total,
        "percentage": event.percentage,
        "phase": phase,
    }
    if event.code:
        patch["connection_code"] = event.code

    previous = state.get(event.id)
    next_state = state.upsert(event.id, patch)
    if not complete:
        return Transition(next_state)
    if previous is not None and previous.is_complete:
        # Already recorded; only the removal is scheduled again
        return Transition(next_state, (ScheduleRemoval(event.id),))
    return Transition(
        next_state,
        (
            ScheduleRemoval(event.id),
            TransferCompleted(next_state.sessions[event.id]),
        ),
    )


def reduce_transfer_failed(state: RegistryState, event: TransferFailed) -> Transition:
    """
    Mark a session failed, creating it with zeroed progress if needed.

    An existing session keeps its display name; the error event's name is
    only used when the record is created here.
    """
    if state.is_retired(event.id):
        return Transition(state)

    patch: Dict[str, Any] = {"error": event.message, "phase": Phase.FAILED}
    if state.get(event.id) is None:
        patch.update(
            direction=event.direction,
            transferred_bytes=0,
            total_bytes=0,
            percentage=0,
        )
        if event.display_name:
            patch["display_name"] = event.display_name

    next_state = state.upsert(event.id, patch)
    return Transition(next_state, (TransferFailedEffect(next_state.sessions[event.id]),))


def reduce_offer_received(state: RegistryState, event: OfferReceived) -> Transition:
    """Record a pending offer; the session registry is not touched"""
    offer = PendingOffer(id=event.id, file_name=event.file_name, file_size=event.file_size)
    note = Notification(
        kind=NotificationKind.OFFER_RECEIVED,
        message=f"File offer received: {event.file_name}",
        session_id=event.id,
    )
    return Transition(state.add_offer(offer), (Notify(note),))


_REDUCERS: Dict[type, Callable[[RegistryState, Any], Transition]] = {
    CodeAssigned: reduce_code_assigned,
    Progress: reduce_progress,
    TransferFailed: reduce_transfer_failed,
    OfferReceived: reduce_offer_received,
}


def reduce(state: RegistryState, event: TransferEvent) -> Transition:
    """Apply one event to ``state``"""
    reducer = _REDUCERS.get(type(event))
    if reducer is None:
        raise TypeError(f"Unsupported event type: {type(event).__name__}")
    return reducer(state, event)
