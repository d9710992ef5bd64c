"""
Storage Adapters

Async key/value persistence for setting values.

Modules:
    base: Abstract storage interface
    memory: In-process dict (tests, ephemeral stores)
    json_file: Single JSON document on disk
    duckdb/: Key/value table in an embedded DuckDB database
    encryption: Optional Fernet encryption of persisted values

Design Principles:
    - Zero infrastructure (files and embedded databases only)
    - Namespaced keys (prefix + key), clear() is prefix-scoped
    - Corrupted entries are purged and read as absent
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pitz.storage.base import DEFAULT_PREFIX, SettingsStorage
from pitz.storage.duckdb import DuckDBStorage
from pitz.storage.encryption import ValueCipher
from pitz.storage.json_file import JsonFileStorage
from pitz.storage.memory import MemoryStorage

if TYPE_CHECKING:
    from pitz.config import PitzConfig

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY = Path("~/.pitz")


def create_storage(config: PitzConfig) -> SettingsStorage | None:
    """
    Build the storage adapter selected by a configuration.

    Args:
        config: Configuration naming the backend, prefix, path and
            optional encryption passphrase

    Returns:
        A storage adapter, or None for the "none" backend (values then
        live only in memory and nothing is persisted)

    Raises:
        ValueError: If the backend is unknown
    """
    cipher = ValueCipher(config.encryption_key) if config.encryption_key else None
    backend = config.storage_backend

    if backend == "memory":
        storage: SettingsStorage | None = MemoryStorage(config.storage_prefix, cipher)
    elif backend == "json":
        path = config.storage_path or DEFAULT_DIRECTORY / "settings.json"
        storage = JsonFileStorage(path, config.storage_prefix, cipher)
    elif backend == "duckdb":
        path = config.storage_path or DEFAULT_DIRECTORY / "settings.duckdb"
        storage = DuckDBStorage(path, config.storage_prefix, cipher)
    elif backend == "none":
        storage = None
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    logger.debug(f"Created {backend} storage (encrypted={cipher is not None})")
    return storage


__all__ = [
    "DEFAULT_PREFIX",
    "SettingsStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "DuckDBStorage",
    "ValueCipher",
    "create_storage",
]
