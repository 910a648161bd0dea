"""
Engine event types and payload decoding

Each engine channel carries plain dict payloads. ``parse_event`` turns a
payload into one of the frozen event types below, or raises
``EventPayloadError``.
"""
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from ...core.constants import (
    CHANNEL_CONNECTION_CODE,
    CHANNEL_SEND_PROGRESS,
    CHANNEL_SEND_ERROR,
    CHANNEL_RECEIVE_PROGRESS,
    CHANNEL_RECEIVE_ERROR,
    CHANNEL_OFFER_RECEIVED,
)
from ...core.exceptions import EventPayloadError
from .models import Direction, Phase


@dataclass(frozen=True)
class CodeAssigned:
    """Mailbox allocation result for an outbound transfer"""
    session_id: Optional[str]
    code: Optional[str] = None
    failure_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.failure_message is None


@dataclass(frozen=True)
class Progress:
    """Progress report for either direction"""
    id: str
    direction: Direction
    display_name: str
    transferred: int
    total: int
    percentage: int
    phase: Optional[Phase] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class TransferFailed:
    """Transfer-level error for either direction"""
    id: str
    direction: Direction
    display_name: str
    message: str


@dataclass(frozen=True)
class OfferReceived:
    """Incoming file offer"""
    id: str
    file_name: str
    file_size: Optional[int] = None


TransferEvent = Union[CodeAssigned, Progress, TransferFailed, OfferReceived]


# Phases an engine may report through a send-progress ``status`` field
_SEND_STATUSES = {
    "preparing": Phase.PREPARING,
    "waiting": Phase.WAITING,
    "packaging": Phase.PACKAGING,
    "sending": Phase.SENDING,
}


def _require_str(channel: str, payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise EventPayloadError(channel, f"missing or empty '{key}'")
    return value


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _require_count(channel: str, payload: Dict[str, Any], key: str) -> int:
    value = payload.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EventPayloadError(channel, f"'{key}' must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise EventPayloadError(channel, f"'{key}' must be finite, got {value!r}")
    if value < 0:
        raise EventPayloadError(channel, f"'{key}' must not be negative")
    return int(value)


def _clamp_percentage(channel: str, payload: Dict[str, Any]) -> int:
    value = payload.get("percentage", 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EventPayloadError(channel, f"'percentage' must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise EventPayloadError(channel, f"'percentage' must be finite, got {value!r}")
    return max(0, min(100, int(value)))


def _parse_connection_code(channel: str, payload: Dict[str, Any]) -> CodeAssigned:
    status = payload.get("status")
    session_id = _optional_str(payload, "send_id") or _optional_str(payload, "session_id")
    if status == "success":
        return CodeAssigned(session_id=session_id, code=_require_str(channel, payload, "code"))
    if status == "error":
        message = _optional_str(payload, "message") or "Unknown error in mailbox creation"
        return CodeAssigned(session_id=session_id, failure_message=message)
    raise EventPayloadError(channel, f"unknown status {status!r}")


def _parse_send_progress(channel: str, payload: Dict[str, Any]) -> Progress:
    status = payload.get("status")
    phase = None
    if status is not None:
        if status not in _SEND_STATUSES:
            raise EventPayloadError(channel, f"unknown status {status!r}")
        phase = _SEND_STATUSES[status]
    return Progress(
        id=_require_str(channel, payload, "id"),
        direction=Direction.SEND,
        display_name=_require_str(channel, payload, "file_name"),
        transferred=_require_count(channel, payload, "sent"),
        total=_require_count(channel, payload, "total"),
        percentage=_clamp_percentage(channel, payload),
        phase=phase,
        code=_optional_str(payload, "code"),
    )


def _parse_receive_progress(channel: str, payload: Dict[str, Any]) -> Progress:
    return Progress(
        id=_require_str(channel, payload, "id"),
        direction=Direction.RECEIVE,
        display_name=_require_str(channel, payload, "file_name"),
        transferred=_require_count(channel, payload, "transferred"),
        total=_require_count(channel, payload, "total"),
        percentage=_clamp_percentage(channel, payload),
    )


def _error_parser(direction: Direction) -> Callable[[str, Dict[str, Any]], TransferFailed]:
    def parse(channel: str, payload: Dict[str, Any]) -> TransferFailed:
        return TransferFailed(
            id=_require_str(channel, payload, "id"),
            direction=direction,
            display_name=_optional_str(payload, "file_name") or "",
            message=_optional_str(payload, "error") or "Unknown transfer error",
        )
    return parse


def _parse_offer(channel: str, payload: Dict[str, Any]) -> OfferReceived:
    file_size = payload.get("file_size")
    if file_size is not None:
        file_size = _require_count(channel, payload, "file_size")
    return OfferReceived(
        id=_require_str(channel, payload, "id"),
        file_name=_require_str(channel, payload, "file_name"),
        file_size=file_size,
    )


_PARSERS: Dict[str, Callable[[str, Dict[str, Any]], TransferEvent]] = {
    CHANNEL_CONNECTION_CODE: _parse_connection_code,
    CHANNEL_SEND_PROGRESS: _parse_send_progress,
    CHANNEL_SEND_ERROR: _error_parser(Direction.SEND),
    CHANNEL_RECEIVE_PROGRESS: _parse_receive_progress,
    CHANNEL_RECEIVE_ERROR: _error_parser(Direction.RECEIVE),
    CHANNEL_OFFER_RECEIVED: _parse_offer,
}


def parse_event(channel: str, payload: Any) -> TransferEvent:
    """
    Decode an engine payload received on ``channel``.

    Args:
        channel: Event channel name
        payload: Payload dict as emitted by the engine

    Returns:
        Typed event

    Raises:
        EventPayloadError: Unknown channel or malformed payload
    """
    parser = _PARSERS.get(channel)
    if parser is None:
        raise EventPayloadError(channel, "unknown channel")
    if not isinstance(payload, dict):
        raise EventPayloadError(channel, f"payload must be an object, got {type(payload).__name__}")
    return parser(channel, payload)
