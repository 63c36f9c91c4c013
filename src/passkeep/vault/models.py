"""Credential record types.

``Credential`` mirrors one row of the ``credentials`` table. The password is
only ever held as ciphertext; ``CredentialDetail`` is the decrypted snapshot
handed to a detail/edit view.
"""

import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Credential:
    """A persisted credential with its own encryption key."""

    account: str
    username_or_email: str
    encrypted_password: bytes       # nonce ‖ ciphertext ‖ tag
    key: str                        # base64 of the 32-byte AES key
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=_utcnow)

    def __repr__(self) -> str:
        """Redact key material to prevent accidental logging of secrets."""
        return (
            f"Credential(id={self.id!r}, account={self.account!r}, "
            f"username_or_email={self.username_or_email!r})"
        )

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Credential":
        return cls(
            id=row["id"],
            account=row["account"],
            username_or_email=row["username_or_email"],
            encrypted_password=bytes(row["encrypted_password"]),
            key=row["key"],
            created_at=row["created_at"],
        )

    def to_row(self) -> tuple:
        return (
            self.id,
            self.account,
            self.username_or_email,
            self.encrypted_password,
            self.key,
            self.created_at,
        )


@dataclass(frozen=True)
class CredentialDetail:
    """Decrypted view of one credential for an account detail screen."""

    credential_id: str
    account: str
    username_or_email: str
    password: str

    def __repr__(self) -> str:
        return (
            f"CredentialDetail(credential_id={self.credential_id!r}, "
            f"account={self.account!r}, username_or_email={self.username_or_email!r})"
        )
