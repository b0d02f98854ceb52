"""Common configuration constants used across the application."""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

REGISTRATION_TIMEOUT = 120.0
"""Timeout for registration calls, which wait for a transaction receipt"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of retry attempts"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

PERSIST_RETRIES = 3
"""Attempts at writing the status file before a cycle gives up"""

PERSIST_RETRY_DELAY = 0.5
"""Base delay between status file write attempts in seconds"""

# Beacon Chain Timing
SLOTS_PER_EPOCH = 32
"""Number of slots in one beacon epoch"""

SECONDS_PER_SLOT = 12
"""Duration of one beacon slot in seconds"""

EPOCH_SECONDS = SLOTS_PER_EPOCH * SECONDS_PER_SLOT
"""Duration of one beacon epoch (384 seconds), the default poll interval"""

# Beacon API
BEACON_API_VERSION = "eth/v1"
"""Beacon node REST API version prefix"""

BEACON_STATE_ID = "head"
"""State identifier used for validator queries"""

# Defaults
DEFAULT_STATUS_FILE = "validators.json"
"""Default path of the persisted validator status file"""

DEFAULT_CHAIN = "mainnet"
"""Default chain network selector"""


__all__ = [
    "BEACON_API_VERSION",
    "BEACON_STATE_ID",
    "DEFAULT_CHAIN",
    "DEFAULT_STATUS_FILE",
    "DEFAULT_TIMEOUT",
    "EPOCH_SECONDS",
    "MAX_RETRIES",
    "PERSIST_RETRIES",
    "PERSIST_RETRY_DELAY",
    "REGISTRATION_TIMEOUT",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "SECONDS_PER_SLOT",
    "SLOTS_PER_EPOCH",
]
