from .history_store import JsonHistoryStore

__all__ = ["JsonHistoryStore"]
