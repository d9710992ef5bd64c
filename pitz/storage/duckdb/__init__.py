"""DuckDB-backed settings storage."""

from pitz.storage.duckdb.backend import DuckDBStorage

__all__ = ["DuckDBStorage"]
