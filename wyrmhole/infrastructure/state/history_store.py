"""
Transfer history storage implementation
"""
import json
from pathlib import Path
from typing import Optional, Dict, Any, List

from ...core.constants import DEFAULT_HISTORY_DIR, SENT_HISTORY_FILE, RECEIVED_HISTORY_FILE
from ...core.exceptions import HistoryError
from ...core.interfaces import HistoryStore


class JsonHistoryStore(HistoryStore):
    """
    File-based transfer history.
    
    Keeps one JSON array per direction:
    - {history_dir}/sent_files.json
    - {history_dir}/received_files.json
    """
    
    _FILES = {
        "send": SENT_HISTORY_FILE,
        "receive": RECEIVED_HISTORY_FILE,
    }
    
    def __init__(self, history_dir: Optional[Path] = None):
        """
        Initialize history store.
        
        Args:
            history_dir: Directory for the history files
        """
        if history_dir is None:
            history_dir = Path(DEFAULT_HISTORY_DIR)
        
        self.history_dir = Path(history_dir).expanduser()
        self.history_dir.mkdir(parents=True, exist_ok=True)
    
    def _get_history_file(self, direction: str) -> Path:
        """Get history file path for a direction"""
        if direction not in self._FILES:
            raise HistoryError(f"Unknown direction: {direction}")
        return self.history_dir / self._FILES[direction]
    
    def _write(self, path: Path, records: List[Dict[str, Any]]) -> None:
        path.write_text(json.dumps(records, indent=2), encoding='utf-8')
    
    def append(self, direction: str, record: Dict[str, Any]) -> None:
        """Append a record to the history of one direction"""
        history_file = self._get_history_file(direction)
        records = self.list(direction)
        records.append(record)
        try:
            self._write(history_file, records)
        except OSError as e:
            raise HistoryError(f"Failed to save history: {e}") from e
    
    def list(self, direction: str) -> List[Dict[str, Any]]:
        """
        Load records for one direction.
        
        A missing file is an empty history.
        
        Raises:
            HistoryError: If the file exists but cannot be parsed
        """
        history_file = self._get_history_file(direction)
        if not history_file.exists():
            return []
        
        try:
            data = json.loads(history_file.read_text(encoding='utf-8'))
        except Exception as e:
            raise HistoryError(f"Failed to load history: {e}") from e
        if not isinstance(data, list):
            raise HistoryError(f"History file is not a JSON array: {history_file}")
        return data
    
    def clear(self, direction: str) -> None:
        """Drop all records for one direction"""
        history_file = self._get_history_file(direction)
        if history_file.exists():
            history_file.unlink()
    
    def export(self, direction: str, destination: Path) -> int:
        """
        Write the history of one direction to ``destination``.
        
        Returns:
            Number of records exported
        """
        records = self.list(direction)
        destination = Path(destination).expanduser()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            self._write(destination, records)
        except OSError as e:
            raise HistoryError(f"Failed to export history: {e}") from e
        return len(records)
