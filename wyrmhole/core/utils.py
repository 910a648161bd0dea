"""
Core utility functions
"""
from pathlib import PurePath
from typing import List, Optional

from .constants import RECEIVE_CODE_PREFIX


# ============================================================
# Display Helpers
# ============================================================

def format_bytes(size: int) -> str:
    """Format a byte count as a short human readable string (e.g. 1.5 KB)"""
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def display_name_for_paths(
    paths: List[str],
    hint: Optional[str] = None,
    folder_name: Optional[str] = None,
) -> str:
    """
    Choose the label shown for an outbound transfer.
    
    Priority: explicit hint, folder name override, single file base name,
    then a file count.
    """
    if hint:
        return hint
    if folder_name:
        return folder_name
    if len(paths) == 1:
        # Accept both separators, paths may come from another platform
        return PurePath(paths[0].replace("\\", "/")).name or paths[0]
    return f"{len(paths)} files"


# ============================================================
# Receive Codes
# ============================================================

def normalize_receive_code(code: str) -> str:
    """
    Strip whitespace and a pasted ``wormhole receive`` prefix from a code.
    
    Returns an empty string when nothing usable remains.
    """
    value = code.strip()
    words = value.split(None, len(RECEIVE_CODE_PREFIX.split()))
    if words[:-1] == RECEIVE_CODE_PREFIX.split():
        return words[-1]
    if words == RECEIVE_CODE_PREFIX.split():
        return ""
    return value
