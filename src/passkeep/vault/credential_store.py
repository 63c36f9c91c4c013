# Vault - Credential Store
#
# SQLite table of credential records, one AES-256-GCM key per record
# CRUD with the encryption step interposed on the password field
# In-memory cache re-fetched after every mutation
#
# Design:
#   - Per-operation connections via core.db.transaction (WAL mode)
#   - Mutations serialized by threading.Lock
#   - Cache is a tuple swapped whole, so list() never sees a partial update
#   - Edits are delete + recreate in one transaction, which re-keys the record
#   - Change subscribers fired outside the lock

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ..core.db import transaction
from ..core.errors import CryptoError, StorageError, ValidationError
from ..core.event_log import EventLogger, EventSeverity, EventType, get_event_logger
from .encryption import CryptoBox, check_credential_fields, mask_password
from .models import Credential, CredentialDetail

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Tuple[Credential, ...]], None]


class CredentialStore:
    """
    Encrypted credential storage for a password manager screen.

    Usage::

        store = CredentialStore("data/credentials.db")
        record = store.create("GitHub", "me@example.com", "hunter2hunter2")
        for credential in store.list():
            print(credential.account, store.masked_password(credential))
        store.replace(record, "GitHub", "me@example.com", "n3w-passphrase")

    Security:
    - Each password encrypted with AES-256-GCM under its own key
    - The key is stored beside the ciphertext (see vault/encryption.py)
    - Passwords and keys are never written to the event log
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        min_password_length: int = 8,
        mask_glyph: str = "*",
        event_logger: Optional[EventLogger] = None,
    ):
        """
        Open (or create) the credential database and load the cache.

        Args:
            db_path: Path to SQLite file. Defaults to data/credentials.db.
            min_password_length: Shortest password create/replace accept.
            mask_glyph: Placeholder character for masked_password().
            event_logger: Structured logger; defaults to the global one.

        Raises:
            StorageError: If the schema cannot be created or the initial
                          fetch fails.
        """
        self.db_path = Path(db_path) if db_path else Path("data/credentials.db")
        self.min_password_length = min_password_length
        self.mask_glyph = mask_glyph
        self.events = event_logger or get_event_logger()

        self._lock = threading.Lock()
        self._cache: Tuple[Credential, ...] = ()
        self._change_callbacks: List[ChangeCallback] = []

        self._init_database()
        with self._lock:
            self._reload()

        self.events.log_event(
            EventType.STORE_OPENED,
            "Credential store opened",
            details={"db_path": str(self.db_path), "count": len(self._cache)},
        )

    def _init_database(self):
        """Create the database directory and tables if they don't exist."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with transaction(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS credentials (
                        id TEXT PRIMARY KEY,
                        account TEXT NOT NULL,
                        username_or_email TEXT NOT NULL UNIQUE,
                        encrypted_password BLOB NOT NULL,
                        key TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                """)
        except (sqlite3.Error, OSError) as e:
            raise self._storage_error("initialize", e) from e

    # ── Reads ────────────────────────────────────────────────────────

    def list(self) -> Tuple[Credential, ...]:
        """Current cached records, oldest first."""
        return self._cache

    def refresh(self) -> Tuple[Credential, ...]:
        """Re-fetch every record from the database into the cache.

        Raises:
            StorageError: If the fetch fails. The previous cache is kept.
        """
        with self._lock:
            snapshot = self._reload()
        self.events.log_event(
            EventType.STORE_REFRESHED,
            "Credential cache refreshed",
            severity=EventSeverity.DEBUG,
            details={"count": len(snapshot)},
        )
        self._fire_change(snapshot)
        return snapshot

    def get(self, credential_id: str) -> Optional[Credential]:
        """Point lookup by id, straight from the database."""
        try:
            with transaction(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM credentials WHERE id = ?", (credential_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise self._storage_error("get", e) from e
        return Credential.from_row(row) if row else None

    def find_by_account(self, account: str) -> Optional[Credential]:
        """First cached record with this account label, if any."""
        return next((c for c in self._cache if c.account == account), None)

    def password_plaintext(self, record: Credential) -> str:
        """Decrypt a record's password with the key stored beside it.

        Raises:
            CryptoError: If the stored key or ciphertext is unusable.
        """
        try:
            key = CryptoBox.text_to_key(record.key)
            plaintext = CryptoBox.decrypt_text(record.encrypted_password, key)
        except CryptoError as e:
            self.events.log_event(
                EventType.CRYPTO_ERROR,
                f"Failed to decrypt password: {e}",
                severity=EventSeverity.WARNING,
                details={"credential_id": record.id},
            )
            raise

        self.events.log_event(
            EventType.CREDENTIAL_REVEALED,
            f"Password decrypted: {record.account}",
            severity=EventSeverity.DEBUG,
            details={"credential_id": record.id},
        )
        return plaintext

    def masked_password(self, record: Credential) -> str:
        """One placeholder glyph per character of the decrypted password."""
        return mask_password(self.password_plaintext(record), self.mask_glyph)

    def details(self, record: Credential) -> CredentialDetail:
        """Decrypted snapshot of a record for an account detail view."""
        return CredentialDetail(
            credential_id=record.id,
            account=record.account,
            username_or_email=record.username_or_email,
            password=self.password_plaintext(record),
        )

    # ── Mutations ────────────────────────────────────────────────────

    def create(self, account: str, username_or_email: str, password: str) -> Credential:
        """
        Encrypt and store a new credential under a freshly generated key.

        Raises:
            ValidationError: Empty field, short password, or the
                             username/email is already stored.
            StorageError: If the insert or the follow-up fetch fails.
        """
        self._validate(account, username_or_email, password)

        with self._lock:
            try:
                with transaction(self.db_path) as conn:
                    if self._username_taken(conn, username_or_email):
                        raise self._rejected(
                            "Username already exists",
                            username_or_email=username_or_email,
                        )
                    credential = self._seal(account, username_or_email, password)
                    self._insert(conn, credential)
            except sqlite3.IntegrityError as e:
                raise self._rejected(
                    "Username already exists", username_or_email=username_or_email,
                ) from e
            except sqlite3.Error as e:
                raise self._storage_error("create", e) from e
            snapshot = self._reload()

        self.events.log_event(
            EventType.CREDENTIAL_CREATED,
            f"Credential added: {account}",
            details={"credential_id": credential.id},
        )
        self._fire_change(snapshot)
        return credential

    def replace(
        self,
        old: Credential,
        account: str,
        username_or_email: str,
        password: str,
    ) -> Credential:
        """
        Edit a credential by deleting ``old`` and storing a new record.

        The new record always gets a fresh key and id. If some stored record
        already carries exactly this account, username/email and password,
        nothing is written and that record is returned.

        Raises:
            ValidationError: Empty field, short password, or another record
                             already uses the new username/email.
            StorageError: If the delete/insert or the follow-up fetch fails.
        """
        self._validate(account, username_or_email, password)

        with self._lock:
            try:
                with transaction(self.db_path) as conn:
                    existing = self._fetch_all(conn)

                    for record in existing:
                        if self._same_values(record, account, username_or_email, password):
                            logger.debug("Replace of %s is a no-op", old.id)
                            return record

                    for record in existing:
                        if record.id != old.id and record.username_or_email == username_or_email:
                            raise self._rejected(
                                "Username already exists",
                                username_or_email=username_or_email,
                            )

                    conn.execute("DELETE FROM credentials WHERE id = ?", (old.id,))
                    credential = self._seal(account, username_or_email, password)
                    self._insert(conn, credential)
            except sqlite3.IntegrityError as e:
                raise self._rejected(
                    "Username already exists", username_or_email=username_or_email,
                ) from e
            except sqlite3.Error as e:
                raise self._storage_error("replace", e) from e
            snapshot = self._reload()

        self.events.log_event(
            EventType.CREDENTIAL_REPLACED,
            f"Credential replaced: {account}",
            details={"old_id": old.id, "credential_id": credential.id},
        )
        self._fire_change(snapshot)
        return credential

    def delete(self, record: Credential) -> None:
        """Remove a record. Deleting an id that is already gone is a no-op."""
        with self._lock:
            try:
                with transaction(self.db_path) as conn:
                    cursor = conn.execute(
                        "DELETE FROM credentials WHERE id = ?", (record.id,)
                    )
                    removed = cursor.rowcount
            except sqlite3.Error as e:
                raise self._storage_error("delete", e) from e
            snapshot = self._reload()

        self.events.log_event(
            EventType.CREDENTIAL_DELETED,
            "Credential deleted" if removed else "Credential already absent",
            details={"credential_id": record.id},
        )
        self._fire_change(snapshot)

    # ── Callbacks ────────────────────────────────────────────────────

    def on_change(self, callback: ChangeCallback) -> None:
        """Register a subscriber called with the new cache after each swap."""
        with self._lock:
            self._change_callbacks.append(callback)

    def _fire_change(self, snapshot: Tuple[Credential, ...]) -> None:
        """Best-effort delivery to all subscribers."""
        for cb in list(self._change_callbacks):
            try:
                cb(snapshot)
            except Exception:
                logger.warning("Credential change callback failed", exc_info=True)

    # ── Internals ────────────────────────────────────────────────────

    def _validate(self, account: str, username_or_email: str, password: str) -> None:
        is_valid, error_msg = check_credential_fields(
            account, username_or_email, password, min_length=self.min_password_length,
        )
        if not is_valid:
            raise self._rejected(error_msg)

    def _rejected(self, message: str, **details) -> ValidationError:
        self.events.log_event(
            EventType.CREDENTIAL_REJECTED,
            message,
            severity=EventSeverity.WARNING,
            details=details,
        )
        return ValidationError(message)

    def _storage_error(self, operation: str, error: Exception) -> StorageError:
        self.events.log_event(
            EventType.STORAGE_ERROR,
            f"Failed to {operation} credentials: {error}",
            severity=EventSeverity.ERROR,
            details={"operation": operation, "db_path": str(self.db_path)},
        )
        return StorageError(f"Failed to {operation} credentials: {error}")

    def _reload(self) -> Tuple[Credential, ...]:
        """Swap in a fresh snapshot. Caller holds the lock."""
        try:
            with transaction(self.db_path) as conn:
                snapshot = self._fetch_all(conn)
        except sqlite3.Error as e:
            raise self._storage_error("fetch", e) from e
        self._cache = snapshot
        return snapshot

    @staticmethod
    def _fetch_all(conn: sqlite3.Connection) -> Tuple[Credential, ...]:
        rows = conn.execute(
            "SELECT * FROM credentials ORDER BY created_at, rowid"
        ).fetchall()
        return tuple(Credential.from_row(row) for row in rows)

    @staticmethod
    def _username_taken(conn: sqlite3.Connection, username_or_email: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM credentials WHERE username_or_email = ?",
            (username_or_email,),
        ).fetchone()
        return row is not None

    @staticmethod
    def _insert(conn: sqlite3.Connection, credential: Credential) -> None:
        conn.execute("""
            INSERT INTO credentials
            (id, account, username_or_email, encrypted_password, key, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """, credential.to_row())

    @staticmethod
    def _seal(account: str, username_or_email: str, password: str) -> Credential:
        key = CryptoBox.generate_key()
        return Credential(
            account=account,
            username_or_email=username_or_email,
            encrypted_password=CryptoBox.encrypt(password, key),
            key=CryptoBox.key_to_text(key),
        )

    def _same_values(
        self,
        record: Credential,
        account: str,
        username_or_email: str,
        password: str,
    ) -> bool:
        if record.account != account or record.username_or_email != username_or_email:
            return False
        try:
            key = CryptoBox.text_to_key(record.key)
            return CryptoBox.decrypt_text(record.encrypted_password, key) == password
        except CryptoError:
            logger.warning("Stored credential %s cannot be decrypted", record.id)
            return False
