"""
Abstract Storage Interface

Defines the contract for all settings storage adapters.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from pitz.errors import StorageCorruptionError
from pitz.types.values import SettingValue, is_setting_value

if TYPE_CHECKING:
    from pitz.storage.encryption import ValueCipher

DEFAULT_PREFIX = "pitz:"


class SettingsStorage(ABC):
    """
    Abstract interface for settings storage adapters.

    All adapters (memory, JSON file, DuckDB) implement this interface.
    Persisted keys are namespaced: the adapter stores ``prefix + key``
    and clear() only touches keys under its own prefix.

    Contract:
        - get() returns None for absent keys and for entries that can no
          longer be decoded (those are purged)
        - set(key, None) is equivalent to delete(key)
        - Failures raise; the settings store wraps them in PersistenceError

    Lifecycle:
        storage = JsonFileStorage("settings.json")
        await storage.initialize()
        # ... operations ...
        await storage.close()

    Or using context manager:
        async with JsonFileStorage("settings.json") as storage:
            await storage.set("audio.volume", 80)
    """

    def __init__(self, prefix: str = DEFAULT_PREFIX, cipher: ValueCipher | None = None):
        self._prefix = prefix
        self._cipher = cipher

    @property
    def prefix(self) -> str:
        """Namespace prepended to every persisted key."""
        return self._prefix

    def full_key(self, key: str) -> str:
        """Persisted form of a setting key."""
        return f"{self._prefix}{key}"

    async def initialize(self) -> None:
        """Prepare the adapter (create files, tables). Idempotent."""

    async def close(self) -> None:
        """Release resources."""

    async def __aenter__(self) -> SettingsStorage:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def encode(self, value: SettingValue) -> str:
        """Serialize a value (JSON, then encrypted if a cipher is set)."""
        raw = json.dumps(value)
        if self._cipher is not None:
            raw = self._cipher.encrypt(raw)
        return raw

    def decode(self, raw: str) -> SettingValue:
        """
        Inverse of encode().

        Raises:
            StorageCorruptionError: If the entry cannot be decrypted, parsed,
                or does not hold a setting value
        """
        if self._cipher is not None:
            raw = self._cipher.decrypt(raw)
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise StorageCorruptionError(f"Malformed entry: {e}") from e
        if not is_setting_value(value):
            raise StorageCorruptionError(f"Entry holds a {type(value).__name__}, not a setting value")
        return value

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def get(self, key: str) -> SettingValue | None:
        """Read a value, or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: SettingValue | None) -> None:
        """Write a value; None deletes the key."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key if present."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every key under this adapter's prefix."""
        ...
