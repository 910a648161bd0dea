"""
Unified exception definitions
"""
from typing import Optional


class WyrmholeError(Exception):
    """Base exception class"""
    pass


class ConfigError(WyrmholeError):
    """Configuration error"""
    pass


class RegistryError(WyrmholeError):
    """Session registry misuse (e.g. a patch that tries to change an id)"""
    pass


class EventPayloadError(WyrmholeError):
    """Engine event payload could not be decoded"""

    def __init__(self, channel: str, message: str):
        super().__init__(f"{channel}: {message}")
        self.channel = channel


class SubscriptionError(WyrmholeError):
    """Event subscription could not be established"""
    pass


class CommandError(WyrmholeError):
    """
    A user command failed.

    ``session_id`` names the optimistic record the failure was patched onto,
    or is None when no session was involved.
    """

    def __init__(self, message: str, session_id: Optional[str] = None):
        super().__init__(message)
        self.session_id = session_id


class EngineUnavailableError(CommandError):
    """No transfer engine is bound to the orchestrator"""
    pass


class HistoryError(WyrmholeError):
    """Transfer history storage error"""
    pass
