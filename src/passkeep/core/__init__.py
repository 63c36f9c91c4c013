# Core Module - Shared Utilities
#
# Core module provides shared functionality across passkeep modules:
# - Error hierarchy
# - Structured event logging
# - SQLite connection helper

from .errors import (
    CryptoError,
    StorageError,
    ValidationError,
    VaultError,
)
from .event_log import (
    EventLogger,
    EventSeverity,
    EventType,
    get_event_logger,
    set_event_logger,
)

__all__ = [
    # Errors
    "VaultError",
    "ValidationError",
    "CryptoError",
    "StorageError",
    # Event Logging
    "EventLogger",
    "EventType",
    "EventSeverity",
    "get_event_logger",
    "set_event_logger",
]
