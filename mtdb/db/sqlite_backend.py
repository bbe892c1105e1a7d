"""
SQLite backend for mtdb.

Opens the single-file database the game server keeps next to its
world (auth.sqlite, mod_storage.sqlite).
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from .backend_base import DBBackend
from .dialect import DatabaseType
from ..errors import ForeignKeysDisabledError


class SQLiteBackend(DBBackend):
    """
    Minimal SQLite backend.

    Parameters
    ----------
    db_path : str
        Path to the SQLite database file, or ":memory:".
    """

    dbtype = DatabaseType.SQLITE

    def __init__(self, db_path: str):
        self.path = db_path if db_path == ":memory:" else Path(db_path)

    def connect(self) -> sqlite3.Connection:
        """
        Open a SQLite3 connection with row_factory=dict-like access and
        foreign keys enforced.
        """
        conn = sqlite3.connect(str(self.path))
        conn.row_factory = sqlite3.Row
        enable_foreign_keys(conn)
        return conn


def foreign_keys_enabled(conn: sqlite3.Connection) -> bool:
    return bool(conn.execute("PRAGMA foreign_keys").fetchone()[0])


def enable_foreign_keys(conn: sqlite3.Connection) -> None:
    """
    Turn on foreign key enforcement for this handle.

    The pragma is per connection and silently ignored inside an open
    transaction, so the setting is read back.
    """
    conn.execute("PRAGMA foreign_keys = ON")
    if not foreign_keys_enabled(conn):
        raise ForeignKeysDisabledError(
            "could not enable foreign keys; is the handle inside a transaction?"
        )


def require_foreign_keys(conn: sqlite3.Connection) -> None:
    if not foreign_keys_enabled(conn):
        raise ForeignKeysDisabledError(
            "SQLite handle has foreign keys off; run PRAGMA foreign_keys = ON "
            "or open it through SQLiteBackend"
        )


__all__ = ["SQLiteBackend", "enable_foreign_keys", "foreign_keys_enabled", "require_foreign_keys"]
