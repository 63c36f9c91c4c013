# Vault Module - Encrypted Credential Store
#
# Per-record AES-256-GCM keys, SQLite persistence, cached record list

from .credential_store import CredentialStore
from .encryption import CryptoBox, check_credential_fields, mask_password, password_length
from .models import Credential, CredentialDetail

__all__ = [
    "CredentialStore",
    "CryptoBox",
    "Credential",
    "CredentialDetail",
    "check_credential_fields",
    "mask_password",
    "password_length",
]
