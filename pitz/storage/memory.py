"""
In-Memory Storage

Dict-backed adapter for tests and for stores that should not outlive the
process. Values are kept in their encoded form so the round trip matches
the persistent adapters.
"""

from __future__ import annotations

import logging

from pitz.errors import StorageCorruptionError
from pitz.storage.base import DEFAULT_PREFIX, SettingsStorage
from pitz.storage.encryption import ValueCipher
from pitz.types.values import SettingValue

logger = logging.getLogger(__name__)


class MemoryStorage(SettingsStorage):
    """
    Settings storage held in a plain dict.

    Several adapters with different prefixes may share one backing dict.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        cipher: ValueCipher | None = None,
        data: dict[str, str] | None = None,
    ):
        super().__init__(prefix, cipher)
        self._data: dict[str, str] = data if data is not None else {}

    def __len__(self) -> int:
        return sum(1 for k in self._data if k.startswith(self.prefix))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.full_key(key) in self._data

    async def get(self, key: str) -> SettingValue | None:
        raw = self._data.get(self.full_key(key))
        if raw is None:
            return None
        try:
            return self.decode(raw)
        except StorageCorruptionError as e:
            logger.warning(f"Purging corrupted entry {self.full_key(key)}: {e}")
            del self._data[self.full_key(key)]
            return None

    async def set(self, key: str, value: SettingValue | None) -> None:
        if value is None:
            await self.delete(key)
            return
        self._data[self.full_key(key)] = self.encode(value)

    async def delete(self, key: str) -> None:
        self._data.pop(self.full_key(key), None)

    async def clear(self) -> None:
        for full_key in [k for k in self._data if k.startswith(self.prefix)]:
            del self._data[full_key]
