"""Pure event reducer transitions."""
from __future__ import annotations

from wyrmhole.domain.transfer import (
    CodeAssigned,
    Direction,
    NotificationKind,
    OfferReceived,
    Phase,
    Progress,
    RegistryState,
    TransferFailed,
    reduce,
)
from wyrmhole.domain.transfer.reducer import (
    Notify,
    ScheduleRemoval,
    TransferCompleted,
    TransferFailedEffect,
)


def _progress(session_id: str, percentage: int, direction=Direction.SEND, **kw) -> Progress:
    return Progress(
        id=session_id,
        direction=direction,
        display_name=kw.pop("display_name", "report.pdf"),
        transferred=kw.pop("transferred", percentage * 10),
        total=kw.pop("total", 1000),
        percentage=percentage,
        **kw,
    )


def test_increasing_progress_ends_with_last_values() -> None:
    state = RegistryState()
    for pct in (5, 20, 55, 80, 99):
        state = reduce(state, _progress("s1", pct)).state

    session = state.get("s1")
    assert session.percentage == 99
    assert session.transferred_bytes == 990
    assert session.total_bytes == 1000
    assert session.phase == Phase.SENDING


def test_progress_is_last_received_wins() -> None:
    state = reduce(RegistryState(), _progress("s1", 60)).state
    state = reduce(state, _progress("s1", 30)).state

    assert state.get("s1").percentage == 30


def test_progress_status_sets_phase_and_code() -> None:
    event = _progress("s1", 0, phase=Phase.WAITING, code="7-wizard-castle")
    state = reduce(RegistryState(), event).state

    session = state.get("s1")
    assert session.phase == Phase.WAITING
    assert session.connection_code == "7-wizard-castle"


def test_receive_progress_phase_is_receiving() -> None:
    state = reduce(RegistryState(), _progress("r1", 10, direction=Direction.RECEIVE)).state

    assert state.get("r1").phase == Phase.RECEIVING
    assert state.get("r1").direction == Direction.RECEIVE


def test_completion_signals_scheduler_without_removing() -> None:
    transition = reduce(RegistryState(), _progress("s1", 100))

    session = transition.state.get("s1")
    assert session is not None
    assert session.phase == Phase.COMPLETED
    assert ScheduleRemoval("s1") in transition.effects
    assert any(isinstance(e, TransferCompleted) for e in transition.effects)


def test_repeated_completion_is_signalled_once() -> None:
    state = reduce(RegistryState(), _progress("s1", 100)).state

    repeat = reduce(state, _progress("s1", 100))

    assert repeat.effects == (ScheduleRemoval("s1"),)
    assert repeat.state.get("s1").phase == Phase.COMPLETED


def test_below_hundred_has_no_effects() -> None:
    assert reduce(RegistryState(), _progress("s1", 99)).effects == ()


def test_error_without_record_creates_failed_zeroed_session() -> None:
    event = TransferFailed(id="s1", direction=Direction.SEND, display_name="report.pdf", message="peer left")
    transition = reduce(RegistryState(), event)

    assert len(transition.state.sessions) == 1
    session = transition.state.get("s1")
    assert session.phase == Phase.FAILED
    assert session.error == "peer left"
    assert (session.transferred_bytes, session.total_bytes, session.percentage) == (0, 0, 0)
    assert session.display_name == "report.pdf"
    assert isinstance(transition.effects[0], TransferFailedEffect)


def test_error_keeps_existing_progress_and_name() -> None:
    state = reduce(RegistryState(), _progress("s1", 40, display_name="report.pdf")).state
    event = TransferFailed(id="s1", direction=Direction.SEND, display_name="Transfer cancelled", message="x")
    session = reduce(state, event).state.get("s1")

    assert session.percentage == 40
    assert session.display_name == "report.pdf"
    assert session.is_failed


def test_progress_after_error_keeps_error() -> None:
    state = reduce(RegistryState(), TransferFailed("s1", Direction.SEND, "a", "boom")).state
    state = reduce(state, _progress("s1", 50)).state

    assert state.get("s1").error == "boom"
    assert state.get("s1").is_failed


def test_code_assigned_patches_existing_session_only() -> None:
    state = reduce(RegistryState(), _progress("s1", 0, phase=Phase.PREPARING)).state

    transition = reduce(state, CodeAssigned(session_id="s1", code="3-a-b"))
    assert transition.state.get("s1").connection_code == "3-a-b"
    assert transition.state.get("s1").percentage == 0

    note = transition.effects[0]
    assert isinstance(note, Notify)
    assert note.notification.kind == NotificationKind.CONNECTION_CODE
    assert note.notification.code == "3-a-b"


def test_code_assigned_never_creates_session() -> None:
    state = RegistryState()
    transition = reduce(state, CodeAssigned(session_id="ghost", code="3-a-b"))

    assert transition.state.sessions == {}
    assert isinstance(transition.effects[0], Notify)


def test_code_failure_is_notification_only() -> None:
    state = reduce(RegistryState(), _progress("s1", 0)).state
    transition = reduce(state, CodeAssigned(session_id="s1", failure_message="relay down"))

    assert transition.state is state
    note = transition.effects[0].notification
    assert note.kind == NotificationKind.MAILBOX_FAILURE
    assert note.is_error
    assert note.message == "relay down"


def test_offer_does_not_touch_sessions() -> None:
    transition = reduce(RegistryState(), OfferReceived(id="x1", file_name="photo.png", file_size=204800))

    assert transition.state.sessions == {}
    assert transition.state.offers["x1"].file_size == 204800


def test_events_for_retired_ids_are_ignored() -> None:
    state = RegistryState().retire("s1")

    after_progress = reduce(state, _progress("s1", 50))
    after_error = reduce(state, TransferFailed("s1", Direction.SEND, "a", "Transfer cancelled by user"))

    assert after_progress.state is state
    assert after_error.state is state
    assert after_progress.effects == () and after_error.effects == ()


def test_sessions_do_not_interfere() -> None:
    state = reduce(RegistryState(), _progress("a", 10, display_name="a.bin")).state
    state = reduce(state, _progress("b", 20, display_name="b.bin")).state
    b_before = state.get("b")

    state = reduce(state, _progress("a", 70, display_name="a.bin")).state
    state = reduce(state, TransferFailed("a", Direction.SEND, "a.bin", "boom")).state

    assert state.get("b") == b_before
