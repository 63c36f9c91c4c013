# Vault - Encryption Service
#
# Per-credential key generation (256-bit, CSPRNG)
# Password encryption (AES-256-GCM, combined nonce ‖ ciphertext ‖ tag)
# Base64 text encoding for keys stored beside their record
#
# Limitation: each record's key lives in the same row as its ciphertext.
# This only keeps the password column unreadable on casual inspection; anyone
# holding the whole database can decrypt every record.

import base64
import binascii
import os
import unicodedata
from typing import Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.errors import CryptoError


class CryptoBox:
    """
    Stateless AES-256-GCM encryption for credential passwords.

    Flow:
    1. generate_key() creates a fresh 256-bit key for a new record
    2. encrypt() seals the password with a unique 96-bit nonce
    3. The combined bytes and key_to_text(key) are stored with the record
    4. decrypt() verifies the tag and returns the plaintext
    """

    KEY_LENGTH = 32  # 256 bits for AES-256
    NONCE_LENGTH = 12  # 96-bit nonce for GCM (recommended)
    TAG_LENGTH = 16  # 128-bit GCM authentication tag

    @staticmethod
    def generate_key() -> bytes:
        """Generate a fresh random 256-bit key."""
        return AESGCM.generate_key(bit_length=CryptoBox.KEY_LENGTH * 8)

    @staticmethod
    def encrypt(plaintext: Union[bytes, str], key: bytes) -> bytes:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Password to encrypt (str is encoded as UTF-8)
            key: 256-bit key from generate_key()

        Returns:
            nonce ‖ ciphertext ‖ tag as one byte string

        Raises:
            CryptoError: If the key is not a valid AES-256 key
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode('utf-8')
        CryptoBox._check_key(key)

        # Generate random nonce (must be unique per encryption)
        nonce = os.urandom(CryptoBox.NONCE_LENGTH)

        try:
            aesgcm = AESGCM(key)
        except (TypeError, ValueError) as e:
            raise CryptoError(f"Encryption key rejected: {e}") from e

        return nonce + aesgcm.encrypt(nonce, plaintext, None)

    @staticmethod
    def decrypt(data: bytes, key: bytes) -> bytes:
        """
        Decrypt a combined AES-256-GCM byte string.

        Args:
            data: nonce ‖ ciphertext ‖ tag, as produced by encrypt()
            key: The key stored with the same record

        Returns:
            Decrypted plaintext bytes

        Raises:
            CryptoError: If the data is malformed, was tampered with,
                         or the key is wrong
        """
        CryptoBox._check_key(key)

        if not isinstance(data, (bytes, bytearray)):
            raise CryptoError("Ciphertext must be bytes")
        if len(data) < CryptoBox.NONCE_LENGTH + CryptoBox.TAG_LENGTH:
            raise CryptoError("Ciphertext is too short to hold nonce and tag")

        nonce = bytes(data[:CryptoBox.NONCE_LENGTH])
        ciphertext = bytes(data[CryptoBox.NONCE_LENGTH:])

        try:
            return AESGCM(key).decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise CryptoError("Authentication failed: wrong key or tampered data") from e
        except (TypeError, ValueError) as e:
            raise CryptoError(f"Decryption failed: {e}") from e

    @staticmethod
    def decrypt_text(data: bytes, key: bytes) -> str:
        """Decrypt and decode as UTF-8."""
        plaintext = CryptoBox.decrypt(data, key)
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise CryptoError("Decrypted password is not valid UTF-8 text") from e

    @staticmethod
    def key_to_text(key: bytes) -> str:
        """
        Encode key material for database storage (standard base64).
        """
        CryptoBox._check_key(key)
        return base64.b64encode(key).decode('ascii')

    @staticmethod
    def text_to_key(text: str) -> bytes:
        """Decode a base64 key from the database."""
        try:
            key = base64.b64decode(text.encode('ascii'), validate=True)
        except (AttributeError, UnicodeEncodeError, binascii.Error) as e:
            raise CryptoError("Stored key is not valid base64") from e

        CryptoBox._check_key(key)
        return key

    @staticmethod
    def _check_key(key: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) != CryptoBox.KEY_LENGTH:
            raise CryptoError(
                f"Key must be {CryptoBox.KEY_LENGTH} bytes for AES-256"
            )


def password_length(password: str) -> int:
    """Character count after NFC normalization.

    Composed forms collapse to one code point. Multi-code-point emoji
    sequences still count per code point.
    """
    return len(unicodedata.normalize("NFC", password))


def check_credential_fields(
    account: str,
    username_or_email: str,
    password: str,
    min_length: int = 8,
) -> Tuple[bool, str]:
    """
    Verify a submitted credential before it is encrypted or stored.

    Requirements:
    - Account, username/email and password all non-empty
    - Password at least ``min_length`` characters (NFC code points, so a
      base letter plus combining accent counts once)

    Returns:
        (is_valid, error_message)
    """
    if not account or not username_or_email or not password:
        return False, "One of the fields are empty"

    if password_length(password) < min_length:
        return False, f"Password must contain at least {min_length} letters"

    return True, ""


def mask_password(plaintext: str, glyph: str = "*") -> str:
    """Replace every character with ``glyph`` so the mask keeps the length."""
    return glyph * password_length(plaintext)
