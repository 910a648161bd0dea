"""Shared fixtures for the orchestrator tests."""
from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from wyrmhole.core.interfaces import TransferEngine
from wyrmhole.core.telemetry import Telemetry
from wyrmhole.domain.transfer import OrchestratorConfig, TransferOrchestrator
from wyrmhole.infrastructure.events import EventHub


class FakeEngine(TransferEngine):
    """Records every command; can fail or run a hook while a command is in flight."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, tuple]] = []
        self.failures: Dict[str, Exception] = {}
        self.hooks: Dict[str, Callable[..., None]] = {}
        self.lookup_response: Dict[str, Any] = {
            "id": "x1",
            "file_name": "photo.png",
            "file_size": 204800,
        }

    async def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        # Yield so other work can interleave with the command, as a real engine would.
        await asyncio.sleep(0)
        hook = self.hooks.get(name)
        if hook is not None:
            hook(*args)
        if name in self.failures:
            raise self.failures[name]

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def send_file(self, path: str, session_id: str) -> None:
        await self._call("send_file", path, session_id)

    async def send_files(self, paths, session_id, folder_name=None) -> None:
        await self._call("send_files", paths, session_id, folder_name)

    async def accept_offer(self, offer_id: str) -> None:
        await self._call("accept_offer", offer_id)

    async def deny_offer(self, offer_id: str) -> None:
        await self._call("deny_offer", offer_id)

    async def cancel_send(self, session_id: str) -> None:
        await self._call("cancel_send", session_id)

    async def cancel_download(self, session_id: str) -> None:
        await self._call("cancel_download", session_id)

    async def lookup_offer(self, code: str, connection_id: str) -> Dict[str, Any]:
        await self._call("lookup_offer", code, connection_id)
        return self.lookup_response

    async def cancel_connection(self, connection_id: str) -> None:
        await self._call("cancel_connection", connection_id)


def sequential_ids(prefix: str = "s") -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def send_progress(session_id: str, percentage: int, **extra: Any) -> Dict[str, Any]:
    payload = {
        "id": session_id,
        "file_name": extra.pop("file_name", "report.pdf"),
        "sent": percentage * 10,
        "total": 1000,
        "percentage": percentage,
    }
    payload.update(extra)
    return payload


def receive_progress(session_id: str, percentage: int, **extra: Any) -> Dict[str, Any]:
    payload = {
        "id": session_id,
        "file_name": extra.pop("file_name", "photo.png"),
        "transferred": percentage * 2048,
        "total": 204800,
        "percentage": percentage,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def hub() -> EventHub:
    return EventHub()


@pytest.fixture
def telemetry() -> Telemetry:
    return Telemetry()


@pytest.fixture
def make_orchestrator(engine: FakeEngine, hub: EventHub, telemetry: Telemetry):
    def factory(
        completion_delay: float = 0.01,
        history_store=None,
        engine_override: Optional[TransferEngine] = None,
        use_engine: bool = True,
    ) -> TransferOrchestrator:
        config = OrchestratorConfig(completion_delay=completion_delay)
        return TransferOrchestrator(
            (engine_override or engine) if use_engine else None,
            hub,
            config,
            history_store=history_store,
            telemetry=telemetry,
            id_factory=sequential_ids(),
        )

    return factory
