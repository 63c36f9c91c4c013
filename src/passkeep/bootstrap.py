# Application wiring
#
# Build the one CredentialStore for this process at startup and hand it to
# the presentation layer. Callers keep the returned handle; no module-level
# store instance exists.

import logging
from typing import Optional

from .config import VaultSettings, load_settings
from .core.event_log import EventLogger, set_event_logger
from .vault.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def open_store(settings: Optional[VaultSettings] = None) -> CredentialStore:
    """
    Configure logging and open the credential store.

    Args:
        settings: Explicit settings. If None, load_settings() reads the
                  environment and any .env file.

    Returns:
        A ready CredentialStore with its cache loaded.

    Raises:
        StorageError: If the database cannot be opened or read.
    """
    settings = settings or load_settings()

    event_logger = EventLogger(log_dir=settings.log_dir)
    set_event_logger(event_logger)

    logger.info("Opening credential store at %s", settings.db_path)
    return CredentialStore(
        db_path=settings.db_path,
        min_password_length=settings.min_password_length,
        mask_glyph=settings.mask_glyph,
        event_logger=event_logger,
    )
