"""
JSON File Storage

Persists settings in a single JSON document on disk.

Document layout (one flat object, values are encoded entries):
    {
        "pitz:audio.enabled": "true",
        "pitz:audio.volume": "80"
    }

Concurrency:
    Every operation runs in a worker thread (asyncio.to_thread) and holds
    a FileLock on "<path>.lock" for its whole read-modify-write cycle.
    Writes go to a temporary file in the same directory that then
    replaces the document, so readers never see a partial file.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from filelock import FileLock

from pitz.errors import StorageCorruptionError
from pitz.storage.base import DEFAULT_PREFIX, SettingsStorage
from pitz.storage.encryption import ValueCipher
from pitz.types.values import SettingValue

logger = logging.getLogger(__name__)


class JsonFileStorage(SettingsStorage):
    """
    Settings storage backed by a JSON file.

    Corruption handling:
        - A single undecodable entry is purged and reported absent.
        - A document that is not a JSON object is moved aside to
          "<path>.corrupt" for inspection and storage starts empty.
    """

    def __init__(
        self,
        path: Path | str,
        prefix: str = DEFAULT_PREFIX,
        cipher: ValueCipher | None = None,
        lock_timeout: float = 30,
    ):
        super().__init__(prefix, cipher)
        self._path = Path(path).expanduser()
        self._lock = FileLock(f"{self._path}.lock", timeout=lock_timeout)

    @property
    def path(self) -> Path:
        """Location of the JSON document."""
        return self._path

    async def initialize(self) -> None:
        """Create the parent directory."""
        await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)

    # -------------------------------------------------------------------------
    # File access (call with the lock held)
    # -------------------------------------------------------------------------

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        text = self._path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            return self._discard_document(f"not valid JSON: {e}")
        if not isinstance(document, dict):
            return self._discard_document(f"holds a {type(document).__name__}, not an object")
        return document

    def _discard_document(self, reason: str) -> dict[str, Any]:
        aside = self._path.with_name(f"{self._path.name}.corrupt")
        logger.warning(f"Settings file {self._path} is unreadable ({reason}); moving it to {aside}")
        os.replace(self._path, aside)
        return {}

    def _write_document(self, document: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> SettingValue | None:
        full_key = self.full_key(key)

        def _get() -> SettingValue | None:
            with self._lock:
                document = self._read_document()
                raw = document.get(full_key)
                if raw is None:
                    return None
                try:
                    if not isinstance(raw, str):
                        raise StorageCorruptionError(f"Entry is a {type(raw).__name__}")
                    return self.decode(raw)
                except StorageCorruptionError as e:
                    logger.warning(f"Purging corrupted entry {full_key} from {self._path}: {e}")
                    del document[full_key]
                    self._write_document(document)
                    return None

        return await asyncio.to_thread(_get)

    async def set(self, key: str, value: SettingValue | None) -> None:
        if value is None:
            await self.delete(key)
            return

        full_key = self.full_key(key)
        encoded = self.encode(value)

        def _set() -> None:
            with self._lock:
                document = self._read_document()
                document[full_key] = encoded
                self._write_document(document)

        await asyncio.to_thread(_set)

    async def delete(self, key: str) -> None:
        full_key = self.full_key(key)

        def _delete() -> None:
            with self._lock:
                document = self._read_document()
                if full_key in document:
                    del document[full_key]
                    self._write_document(document)

        await asyncio.to_thread(_delete)

    async def clear(self) -> None:
        def _clear() -> None:
            with self._lock:
                document = self._read_document()
                kept = {k: v for k, v in document.items() if not k.startswith(self.prefix)}
                if len(kept) != len(document):
                    self._write_document(kept)

        await asyncio.to_thread(_clear)
