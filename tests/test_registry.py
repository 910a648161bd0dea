"""Session registry: structural merge, removal, snapshots."""
from __future__ import annotations

import pytest

from wyrmhole.core.constants import RETIRED_ID_LIMIT
from wyrmhole.core.exceptions import RegistryError
from wyrmhole.domain.transfer import Direction, Phase, RegistryState, SessionRegistry


def test_upsert_creates_missing_session_with_defaults() -> None:
    registry = SessionRegistry()
    session = registry.upsert("a", {"display_name": "report.pdf"})

    assert session.id == "a"
    assert session.display_name == "report.pdf"
    assert session.percentage == 0
    assert session.total_bytes == 0
    assert session.phase == Phase.PREPARING
    assert registry.get("a") == session


def test_upsert_preserves_fields_not_in_patch() -> None:
    registry = SessionRegistry()
    registry.upsert("a", {"percentage": 40, "transferred_bytes": 400, "total_bytes": 1000})

    registry.upsert("a", {"connection_code": "7-wizard-castle"})

    session = registry.get("a")
    assert session.percentage == 40
    assert session.transferred_bytes == 400
    assert session.connection_code == "7-wizard-castle"


def test_patch_cannot_change_session_id() -> None:
    registry = SessionRegistry()
    registry.upsert("a", {})

    with pytest.raises(RegistryError):
        registry.upsert("a", {"id": "b"})
    assert "b" not in registry


def test_patch_with_unknown_field_is_rejected() -> None:
    with pytest.raises(RegistryError):
        RegistryState().upsert("a", {"progress": 10})


def test_remove_missing_session_is_noop() -> None:
    registry = SessionRegistry()
    registry.upsert("a", {})
    before = registry.state

    registry.remove("missing")

    assert registry.state is before
    assert len(registry) == 1


def test_snapshots_are_not_affected_by_later_updates() -> None:
    registry = SessionRegistry()
    registry.upsert("a", {"percentage": 10})
    snapshot = registry.state

    registry.upsert("a", {"percentage": 90})
    registry.remove("a")

    assert snapshot.get("a").percentage == 10
    with pytest.raises(TypeError):
        snapshot.sessions["b"] = snapshot.get("a")  # type: ignore[index]


def test_values_are_newest_first_by_default() -> None:
    state = RegistryState()
    state = state.upsert("old", {"created_at": 1.0})
    state = state.upsert("new", {"created_at": 2.0})

    assert [s.id for s in state.values()] == ["new", "old"]
    assert [s.id for s in state.values(newest_first=False)] == ["old", "new"]


def test_listeners_see_each_commit_and_can_unsubscribe() -> None:
    registry = SessionRegistry()
    seen = []
    remove = registry.add_listener(lambda state: seen.append(len(state.sessions)))

    registry.upsert("a", {})
    registry.upsert("b", {"direction": Direction.RECEIVE})
    registry.remove("missing")
    remove()
    registry.remove("a")

    assert seen == [1, 2]


def test_failing_listener_does_not_block_commit() -> None:
    registry = SessionRegistry()

    def broken(state):
        raise RuntimeError("boom")

    registry.add_listener(broken)
    registry.upsert("a", {})

    assert "a" in registry


def test_retired_ids_are_tracked() -> None:
    state = RegistryState().retire("a")

    assert state.is_retired("a")
    assert state.retire("a") is state
    assert not state.is_retired("b")


def test_retired_ids_are_bounded_oldest_first() -> None:
    state = RegistryState()
    for n in range(RETIRED_ID_LIMIT + 10):
        state = state.retire(f"c{n}")

    assert len(state.retired) == RETIRED_ID_LIMIT
    assert not state.is_retired("c0")
    assert not state.is_retired("c9")
    assert state.is_retired("c10")
    assert state.is_retired(f"c{RETIRED_ID_LIMIT + 9}")
