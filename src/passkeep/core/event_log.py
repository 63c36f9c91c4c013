# Core - Structured Event Logging
#
# Operational log of credential store activity (create, replace, delete,
# fetch failures). One JSON line per event via structlog.
#
# Never pass passwords, keys or ciphertext in event details.

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog

EVENTS_LOGGER_NAME = "passkeep.events"


class EventType(str, Enum):
    """Types of credential store events that can be logged."""

    STORE_OPENED = "store.opened"
    STORE_REFRESHED = "store.refreshed"

    CREDENTIAL_CREATED = "credential.created"
    CREDENTIAL_REPLACED = "credential.replaced"
    CREDENTIAL_DELETED = "credential.deleted"
    CREDENTIAL_REJECTED = "credential.rejected"
    CREDENTIAL_REVEALED = "credential.revealed"

    CRYPTO_ERROR = "crypto.error"
    STORAGE_ERROR = "storage.error"


class EventSeverity(str, Enum):
    """Severity levels, mapped onto stdlib logging levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def to_level(self) -> int:
        level_map = {
            EventSeverity.DEBUG: logging.DEBUG,
            EventSeverity.INFO: logging.INFO,
            EventSeverity.WARNING: logging.WARNING,
            EventSeverity.ERROR: logging.ERROR,
        }
        return level_map[self]


def configure_structlog() -> None:
    """Install the JSON processor chain used by every passkeep logger."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class EventLogger:
    """
    Structured logger for credential store events.

    Features:
    - JSON lines through structlog
    - Automatic timestamp and event ID
    - Optional daily log file under ``log_dir``
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize event logger.

        Args:
            log_dir: Directory for daily log files. If None, events only go
                     to whatever handlers the root logger already has.
                     Loggers sharing a directory share one file handler.
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_file: Optional[Path] = None
        self._file_handler: Optional[logging.Handler] = None
        self._owns_handler = False

        configure_structlog()

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._setup_file_handler()

        self.logger = structlog.get_logger(EVENTS_LOGGER_NAME)

    def _setup_file_handler(self):
        """Attach a file handler for today's log file to the events logger."""
        today = datetime.now().strftime("%Y-%m-%d")
        self.log_file = self.log_dir / f"passkeep_{today}.log"

        events_logger = logging.getLogger(EVENTS_LOGGER_NAME)
        events_logger.setLevel(logging.INFO)

        target = str(self.log_file.resolve())
        for handler in events_logger.handlers:
            if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
                self._file_handler = handler
                return

        file_handler = logging.FileHandler(self.log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        formatter = logging.Formatter('%(message)s')  # structlog handles formatting
        file_handler.setFormatter(formatter)

        events_logger.addHandler(file_handler)
        self._file_handler = file_handler
        self._owns_handler = True

    def close(self):
        """Detach and close the daily file handler if this logger attached it."""
        if self._file_handler is not None and self._owns_handler:
            logging.getLogger(EVENTS_LOGGER_NAME).removeHandler(self._file_handler)
            self._file_handler.close()
        self._file_handler = None
        self._owns_handler = False

    def log_event(
        self,
        event_type: EventType,
        message: str,
        severity: EventSeverity = EventSeverity.INFO,
        details: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Log a credential store event.

        Args:
            event_type: Type of event (from EventType enum)
            message: Human-readable event description
            severity: Severity level (from EventSeverity enum)
            details: Additional event details (ids and labels only)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        self.logger.log(
            severity.to_level(),
            "vault_event",
            event_id=event_id,
            event_type=event_type.value,
            severity=severity.value,
            message=message,
            details=details or {},
        )

        return event_id


# Global logger instance
_event_logger: Optional[EventLogger] = None


def get_event_logger() -> EventLogger:
    """Get global event logger (singleton pattern)."""
    global _event_logger
    if _event_logger is None:
        _event_logger = EventLogger()
    return _event_logger


def set_event_logger(event_logger: Optional[EventLogger]) -> None:
    """Replace the global event logger (used at startup and in tests)."""
    global _event_logger
    if _event_logger is not None and _event_logger is not event_logger:
        _event_logger.close()
    _event_logger = event_logger
