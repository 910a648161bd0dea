"""
Transfer session data models
"""
import time
from dataclasses import dataclass, field, fields, replace
from typing import Optional, Dict, Any
from enum import Enum

from ...core.constants import (
    COMPLETE_PERCENTAGE,
    DEFAULT_COMPLETION_DELAY,
    DEFAULT_NOTIFICATION_LIMIT,
    DEFAULT_PLACEHOLDER_NAME,
)
from ...core.exceptions import RegistryError


class Direction(str, Enum):
    """Transfer direction"""
    SEND = "send"
    RECEIVE = "receive"


class Phase(str, Enum):
    """Session phase as reported by the engine"""
    PREPARING = "preparing"
    WAITING = "waiting"
    PACKAGING = "packaging"
    SENDING = "sending"
    RECEIVING = "receiving"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationKind(str, Enum):
    """Transient, session-less messages for the presentation layer"""
    CONNECTION_CODE = "connection-code"
    MAILBOX_FAILURE = "mailbox-failure"
    OFFER_RECEIVED = "offer-received"


@dataclass(frozen=True)
class Session:
    """
    One tracked transfer.

    Instances are immutable; the registry replaces them with merged copies.
    ``error`` is tracked independently of ``phase`` because an error can
    arrive before or after a phase update for the same id.
    """
    id: str
    direction: Direction = Direction.SEND
    display_name: str = DEFAULT_PLACEHOLDER_NAME
    transferred_bytes: int = 0
    total_bytes: int = 0  # 0 means not yet known
    percentage: int = 0
    phase: Phase = Phase.PREPARING
    connection_code: Optional[str] = None
    error: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    def merged(self, patch: Dict[str, Any]) -> "Session":
        """Return a copy with the fields named in ``patch`` overwritten"""
        if "id" in patch and patch["id"] != self.id:
            raise RegistryError(
                f"Session id is immutable: {self.id!r} -> {patch['id']!r}"
            )
        unknown = set(patch) - _SESSION_FIELDS
        if unknown:
            raise RegistryError(f"Unknown session fields: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in patch.items() if k != "id"})

    @property
    def is_complete(self) -> bool:
        """Whether the transfer reached 100%"""
        return self.percentage >= COMPLETE_PERCENTAGE

    @property
    def is_failed(self) -> bool:
        """Failed for display purposes: either an error or the failed phase"""
        return self.error is not None or self.phase == Phase.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "direction": self.direction.value,
            "display_name": self.display_name,
            "transferred_bytes": self.transferred_bytes,
            "total_bytes": self.total_bytes,
            "percentage": self.percentage,
            "phase": self.phase.value,
            "connection_code": self.connection_code,
            "error": self.error,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        """Create from dictionary"""
        return cls(
            id=data["id"],
            direction=Direction(data.get("direction", "send")),
            display_name=data.get("display_name", DEFAULT_PLACEHOLDER_NAME),
            transferred_bytes=data.get("transferred_bytes", 0),
            total_bytes=data.get("total_bytes", 0),
            percentage=data.get("percentage", 0),
            phase=Phase(data.get("phase", "preparing")),
            connection_code=data.get("connection_code"),
            error=data.get("error"),
            created_at=data.get("created_at", time.time()),
        )


_SESSION_FIELDS = {f.name for f in fields(Session)}


@dataclass(frozen=True)
class PendingOffer:
    """A receive-side offer awaiting accept or deny"""
    id: str
    file_name: str
    file_size: Optional[int] = None
    connection_code: Optional[str] = None
    received_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "connection_code": self.connection_code,
            "received_at": self.received_at,
        }


@dataclass(frozen=True)
class PendingConnection:
    """A receive code lookup still waiting for the sender's offer"""
    id: str
    code: str
    started_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class Notification:
    """Transient message surfaced to the user"""
    kind: NotificationKind
    message: str
    session_id: Optional[str] = None
    code: Optional[str] = None
    is_error: bool = False
    created_at: float = field(default_factory=time.time)


@dataclass
class TransferRecord:
    """Completed transfer entry kept in the history store"""
    file_name: str
    direction: Direction
    file_size: int = 0
    connection_code: Optional[str] = None
    completed_at: float = field(default_factory=time.time)

    @classmethod
    def from_session(cls, session: Session) -> "TransferRecord":
        """Build a history entry from a finished session"""
        return cls(
            file_name=session.display_name,
            direction=session.direction,
            file_size=session.total_bytes,
            connection_code=session.connection_code,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "file_name": self.file_name,
            "direction": self.direction.value,
            "file_size": self.file_size,
            "connection_code": self.connection_code,
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferRecord":
        """Create from dictionary"""
        return cls(
            file_name=data["file_name"],
            direction=Direction(data["direction"]),
            file_size=data.get("file_size", 0),
            connection_code=data.get("connection_code"),
            completed_at=data.get("completed_at", time.time()),
        )


@dataclass
class OrchestratorConfig:
    """Orchestrator configuration"""
    completion_delay: float = DEFAULT_COMPLETION_DELAY
    notification_limit: int = DEFAULT_NOTIFICATION_LIMIT
    history_dir: Optional[str] = None
    record_history: bool = True

    def validate(self) -> None:
        """Validate configuration"""
        from ...core.exceptions import ConfigError

        if self.completion_delay < 0:
            raise ConfigError(f"Invalid completion_delay: {self.completion_delay}")
        if self.notification_limit < 1:
            raise ConfigError(f"Invalid notification_limit: {self.notification_limit}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "completion_delay": self.completion_delay,
            "notification_limit": self.notification_limit,
            "history_dir": self.history_dir,
            "record_history": self.record_history,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrchestratorConfig":
        """Create from dictionary"""
        # Only keep keys that exist on the dataclass
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)
