"""
Value Encryption

Optional symmetric encryption of persisted values using Fernet.

The Fernet key is derived from a passphrase (SHA-256, urlsafe base64), so
the same passphrase always opens the same store. Entries written with a
different passphrase, or tampered with, fail to decrypt and are treated
as corrupted by the adapters.
"""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from pitz.errors import StorageCorruptionError


def derive_key(passphrase: str) -> bytes:
    """Fernet key for a passphrase."""
    digest = hashlib.sha256(passphrase.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class ValueCipher:
    """Encrypts and decrypts serialized setting values."""

    def __init__(self, passphrase: str):
        if not passphrase:
            raise ValueError("Encryption passphrase must not be empty")
        self._fernet = Fernet(derive_key(passphrase))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """
        Decrypt a token.

        Raises:
            StorageCorruptionError: If the token is invalid for this key
        """
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, AttributeError) as e:
            raise StorageCorruptionError("Entry could not be decrypted") from e
