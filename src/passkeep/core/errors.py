"""
Vault exception classes
"""


class VaultError(Exception):
    """Base exception for credential vault operations"""
    pass


class ValidationError(VaultError):
    """Raised when submitted credential fields are rejected before any write"""
    pass


class CryptoError(VaultError):
    """Raised when encryption, decryption or key decoding fails"""
    pass


class StorageError(VaultError):
    """Raised when the credential database cannot be read or written"""
    pass
