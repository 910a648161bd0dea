"""
Project constants definitions
"""

# ============================================================
# Engine Event Channels
# ============================================================

CHANNEL_CONNECTION_CODE = "connection-code"
CHANNEL_SEND_PROGRESS = "send-progress"
CHANNEL_SEND_ERROR = "send-error"
CHANNEL_RECEIVE_PROGRESS = "receive-progress"
CHANNEL_RECEIVE_ERROR = "receive-error"
CHANNEL_OFFER_RECEIVED = "offer-received"

ALL_CHANNELS = (
    CHANNEL_CONNECTION_CODE,
    CHANNEL_SEND_PROGRESS,
    CHANNEL_SEND_ERROR,
    CHANNEL_RECEIVE_PROGRESS,
    CHANNEL_RECEIVE_ERROR,
    CHANNEL_OFFER_RECEIVED,
)

# ============================================================
# Session Defaults
# ============================================================

COMPLETE_PERCENTAGE = 100
DEFAULT_COMPLETION_DELAY = 0.5  # seconds between 100% and removal
DEFAULT_NOTIFICATION_LIMIT = 50
DEFAULT_PLACEHOLDER_NAME = "Preparing..."
DEFAULT_OFFER_NAME = "File"
RETIRED_ID_LIMIT = 256  # cancelled ids remembered, oldest forgotten first

RECEIVE_CODE_PREFIX = "wormhole receive "

# ============================================================
# State Storage
# ============================================================

DEFAULT_HISTORY_DIR = "~/.wyrmhole/history"
SENT_HISTORY_FILE = "sent_files.json"
RECEIVED_HISTORY_FILE = "received_files.json"

# ============================================================
# Configuration
# ============================================================

ENV_PREFIX = "WYRMHOLE_"
