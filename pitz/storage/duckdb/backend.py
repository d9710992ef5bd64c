"""
DuckDB Storage

Key/value table in an embedded DuckDB database.

Table Schema:
    CREATE TABLE pitz_settings (
        key   VARCHAR PRIMARY KEY,  -- prefix + setting key
        value VARCHAR NOT NULL      -- encoded entry
    )
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from pathlib import Path

import duckdb

from pitz.errors import StorageCorruptionError
from pitz.storage.base import DEFAULT_PREFIX, SettingsStorage
from pitz.storage.encryption import ValueCipher
from pitz.types.values import SettingValue

logger = logging.getLogger(__name__)


class DuckDBStorage(SettingsStorage):
    """
    Settings storage in a DuckDB table.

    Thread safety:
        One root connection per adapter; each worker thread gets its own
        cursor through thread-local storage, since DuckDB connections are
        not thread-safe and asyncio.to_thread() may use different threads.
        Write statements are serialized with a lock: concurrent updates of
        the same row from separate cursors conflict in DuckDB.
    """

    @staticmethod
    def _is_valid_table_name(table: str) -> bool:
        """Validate table name contains only safe characters."""
        return bool(re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", table))

    def __init__(
        self,
        path: Path | str | None = None,
        prefix: str = DEFAULT_PREFIX,
        cipher: ValueCipher | None = None,
        table: str = "pitz_settings",
    ):
        super().__init__(prefix, cipher)
        self._path = Path(path).expanduser() if path is not None else None

        # Table name is interpolated into SQL
        if not self._is_valid_table_name(table):
            raise ValueError(
                f"Invalid table name: {table}. "
                "Must start with a letter or underscore and contain only "
                "alphanumeric characters and underscores."
            )
        self._table = table
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._local = threading.local()
        self._init_lock = asyncio.Lock()
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        """Database file, or None for an in-memory database."""
        return self._path

    async def initialize(self) -> None:
        """Open the database and create the settings table."""
        async with self._init_lock:
            if self._conn is not None:
                return

            def _init() -> duckdb.DuckDBPyConnection:
                if self._path is not None:
                    self._path.parent.mkdir(parents=True, exist_ok=True)
                conn = duckdb.connect(str(self._path) if self._path is not None else ":memory:")
                conn.execute(
                    f"CREATE TABLE IF NOT EXISTS {self._table} ("
                    "key VARCHAR PRIMARY KEY, value VARCHAR NOT NULL)"
                )
                return conn

            self._conn = await asyncio.to_thread(_init)
            logger.debug(f"Opened DuckDB settings table {self._table} at {self._path or ':memory:'}")

    async def close(self) -> None:
        """Close the database."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        self._local = threading.local()

    def _get_cursor(self) -> duckdb.DuckDBPyConnection:
        """Get thread-local cursor, creating if needed."""
        if self._conn is None:
            raise RuntimeError("DuckDB storage not initialized. Call initialize() first.")

        cursor = getattr(self._local, "cursor", None)
        if cursor is None:
            cursor = self._conn.cursor()
            self._local.cursor = cursor
        return cursor

    def _execute_write(self, sql: str, params: list[str]) -> None:
        with self._write_lock:
            self._get_cursor().execute(sql, params)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> SettingValue | None:
        full_key = self.full_key(key)

        def _query() -> SettingValue | None:
            cursor = self._get_cursor()
            row = cursor.execute(
                f"SELECT value FROM {self._table} WHERE key = ?", [full_key]
            ).fetchone()
            if not row:
                return None
            try:
                return self.decode(row[0])
            except StorageCorruptionError as e:
                logger.warning(f"Purging corrupted entry {full_key} from {self._table}: {e}")
                self._execute_write(f"DELETE FROM {self._table} WHERE key = ?", [full_key])
                return None

        return await asyncio.to_thread(_query)

    async def set(self, key: str, value: SettingValue | None) -> None:
        if value is None:
            await self.delete(key)
            return

        full_key = self.full_key(key)
        encoded = self.encode(value)

        def _write() -> None:
            self._execute_write(
                f"INSERT OR REPLACE INTO {self._table} VALUES (?, ?)", [full_key, encoded]
            )

        await asyncio.to_thread(_write)

    async def delete(self, key: str) -> None:
        full_key = self.full_key(key)

        def _delete() -> None:
            self._execute_write(f"DELETE FROM {self._table} WHERE key = ?", [full_key])

        await asyncio.to_thread(_delete)

    async def clear(self) -> None:
        def _clear() -> None:
            self._execute_write(
                f"DELETE FROM {self._table} WHERE starts_with(key, ?)", [self.prefix]
            )

        await asyncio.to_thread(_clear)

