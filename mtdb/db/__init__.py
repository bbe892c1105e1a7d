"""
mtdb.db

Database backend abstraction layer for mtdb.

This package provides:

- The closed set of SQL dialects:
      * DatabaseType, Dialect, get_dialect

- A dialect-aware wrapper around a caller-owned DB-API handle:
      * DBConnection

- Helper functions for SQL execution and row mapping:
      * safe_execute
      * safe_fetch_all
      * safe_fetch_one
      * row_to_dict

- Concrete backends used by the Mtdb façade to open handles:
      * SQLiteBackend
      * PostgresBackend

- Schema migration and durability setup:
      * MigrationManager, migrate
      * enable_wal
      * enable_foreign_keys
"""

from .dialect import DatabaseType, Dialect, get_dialect, resolve_dbtype
from .connection import DBConnection
from .backend_base import DBBackend
from .sqlite_backend import SQLiteBackend, enable_foreign_keys
from .postgres_backend import PostgresBackend
from .helpers import (
    safe_execute,
    safe_fetch_all,
    safe_fetch_one,
    row_to_dict,
)
from .migrations import MigrationManager, build_default_manager, migrate
from .wal import enable_wal

__all__ = [
    # Dialects
    "DatabaseType",
    "Dialect",
    "get_dialect",
    "resolve_dbtype",

    # Connection
    "DBConnection",

    # Backends
    "DBBackend",
    "SQLiteBackend",
    "PostgresBackend",

    # Helpers
    "safe_execute",
    "safe_fetch_all",
    "safe_fetch_one",
    "row_to_dict",

    # Schema / durability
    "MigrationManager",
    "build_default_manager",
    "migrate",
    "enable_wal",
    "enable_foreign_keys",
]
