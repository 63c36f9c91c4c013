# Tests for the per-credential AES-256-GCM encryption service
#
# Coverage:
#   - Key generation (size, uniqueness)
#   - Encrypt/decrypt round trip, str and bytes input
#   - Combined layout: nonce ‖ ciphertext ‖ tag, fresh nonce per call
#   - Tamper detection, wrong key, malformed input
#   - Base64 key text encoding
#   - Field validation and masking helpers

import base64

import pytest

from passkeep.core.errors import CryptoError
from passkeep.vault.encryption import (
    CryptoBox,
    check_credential_fields,
    mask_password,
    password_length,
)


# ── Key Generation ──────────────────────────────────────────────────


class TestGenerateKey:
    def test_key_is_256_bits(self):
        assert len(CryptoBox.generate_key()) == 32

    def test_keys_never_repeat(self):
        keys = {CryptoBox.generate_key() for _ in range(10_000)}
        assert len(keys) == 10_000


# ── Encrypt / Decrypt ───────────────────────────────────────────────


class TestRoundTrip:
    @pytest.mark.parametrize("plaintext", [
        b"password1",
        b"",
        "pässwörd-ü".encode("utf-8"),
        bytes(range(256)),
    ])
    def test_decrypt_returns_plaintext(self, plaintext):
        key = CryptoBox.generate_key()
        assert CryptoBox.decrypt(CryptoBox.encrypt(plaintext, key), key) == plaintext

    def test_str_input_is_utf8_encoded(self):
        key = CryptoBox.generate_key()
        data = CryptoBox.encrypt("correct horse", key)
        assert CryptoBox.decrypt_text(data, key) == "correct horse"

    def test_combined_layout_length(self):
        key = CryptoBox.generate_key()
        data = CryptoBox.encrypt(b"12345678", key)
        assert len(data) == CryptoBox.NONCE_LENGTH + 8 + CryptoBox.TAG_LENGTH

    def test_fresh_nonce_per_call(self):
        key = CryptoBox.generate_key()
        first = CryptoBox.encrypt(b"same plaintext", key)
        second = CryptoBox.encrypt(b"same plaintext", key)
        assert first != second
        assert first[:CryptoBox.NONCE_LENGTH] != second[:CryptoBox.NONCE_LENGTH]


class TestDecryptFailures:
    def test_every_flipped_byte_is_detected(self):
        key = CryptoBox.generate_key()
        data = CryptoBox.encrypt(b"password1", key)
        for i in range(len(data)):
            tampered = bytearray(data)
            tampered[i] ^= 0x01
            with pytest.raises(CryptoError):
                CryptoBox.decrypt(bytes(tampered), key)

    def test_wrong_key(self):
        k1 = CryptoBox.generate_key()
        k2 = CryptoBox.generate_key()
        assert k1 != k2
        data = CryptoBox.encrypt(b"password1", k1)
        with pytest.raises(CryptoError):
            CryptoBox.decrypt(data, k2)

    def test_too_short(self):
        key = CryptoBox.generate_key()
        with pytest.raises(CryptoError):
            CryptoBox.decrypt(b"\x00" * 10, key)

    def test_not_bytes(self):
        key = CryptoBox.generate_key()
        with pytest.raises(CryptoError):
            CryptoBox.decrypt("not bytes", key)

    def test_invalid_utf8_plaintext(self):
        key = CryptoBox.generate_key()
        data = CryptoBox.encrypt(b"\xff\xfe\xfd", key)
        with pytest.raises(CryptoError):
            CryptoBox.decrypt_text(data, key)

    @pytest.mark.parametrize("bad_key", [b"", b"short", b"\x00" * 16, b"\x00" * 33])
    def test_encrypt_rejects_bad_key_size(self, bad_key):
        with pytest.raises(CryptoError):
            CryptoBox.encrypt(b"password1", bad_key)

    def test_decrypt_rejects_bad_key_size(self):
        data = CryptoBox.encrypt(b"password1", CryptoBox.generate_key())
        with pytest.raises(CryptoError):
            CryptoBox.decrypt(data, b"\x00" * 16)


# ── Key Text Encoding ───────────────────────────────────────────────


class TestKeyText:
    def test_standard_base64(self):
        key = CryptoBox.generate_key()
        text = CryptoBox.key_to_text(key)
        assert base64.b64decode(text) == key
        assert CryptoBox.text_to_key(text) == key

    def test_malformed_text(self):
        with pytest.raises(CryptoError):
            CryptoBox.text_to_key("not base64 !!")

    def test_wrong_decoded_length(self):
        with pytest.raises(CryptoError):
            CryptoBox.text_to_key(base64.b64encode(b"sixteen bytes!!!").decode())

    def test_non_ascii_text(self):
        with pytest.raises(CryptoError):
            CryptoBox.text_to_key("ключ")


# ── Validation & Masking ────────────────────────────────────────────


class TestCheckCredentialFields:
    def test_valid(self):
        assert check_credential_fields("GitHub", "me@example.com", "password1") == (True, "")

    @pytest.mark.parametrize("account,user,password", [
        ("", "u", "password1"),
        ("a", "", "password1"),
        ("a", "u", ""),
    ])
    def test_empty_field(self, account, user, password):
        ok, msg = check_credential_fields(account, user, password)
        assert ok is False
        assert msg == "One of the fields are empty"

    def test_seven_characters_rejected(self):
        ok, msg = check_credential_fields("a", "u", "short12")
        assert ok is False
        assert "at least 8" in msg

    def test_eight_characters_accepted(self):
        assert check_credential_fields("a", "u", "exactly8")[0] is True

    def test_combining_accents_count_once(self):
        # four letters, eight code points
        assert check_credential_fields("a", "u", "e\u0301" * 4)[0] is False
        assert check_credential_fields("a", "u", "e\u0301" * 8)[0] is True

    def test_custom_minimum(self):
        assert check_credential_fields("a", "u", "abcd", min_length=4)[0] is True
        assert check_credential_fields("a", "u", "abc", min_length=4)[0] is False


class TestMaskPassword:
    @pytest.mark.parametrize("plaintext", ["", "a", "password1", "pässwörd"])
    def test_one_glyph_per_character(self, plaintext):
        masked = mask_password(plaintext)
        assert len(masked) == len(plaintext)
        assert set(masked) <= {"*"}

    def test_decomposed_accent_is_one_glyph(self):
        assert mask_password("e\u0301") == "*"
        assert password_length("e\u0301") == 1

    def test_custom_glyph(self):
        assert mask_password("abc", "•") == "•••"
