"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import TransferEngine, EventSource, HistoryStore, EventHandler, Unsubscribe
from .telemetry import Telemetry, get_telemetry
from .utils import format_bytes, display_name_for_paths, normalize_receive_code

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "TransferEngine",
    "EventSource",
    "HistoryStore",
    "EventHandler",
    "Unsubscribe",
    "Telemetry",
    "get_telemetry",
    "format_bytes",
    "display_name_for_paths",
    "normalize_receive_code",
]
