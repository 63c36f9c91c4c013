# passkeep - Main Package
#
# Local encrypted credential store for a password manager screen.
# Version: 0.1.0

__version__ = "0.1.0"
__description__ = "Local encrypted credential store"

from .core import (
    CryptoError,
    StorageError,
    ValidationError,
    VaultError,
)
from .vault import Credential, CredentialDetail, CredentialStore, CryptoBox

__all__ = [
    "__version__",
    "Credential",
    "CredentialDetail",
    "CredentialStore",
    "CryptoBox",
    "VaultError",
    "ValidationError",
    "CryptoError",
    "StorageError",
]
