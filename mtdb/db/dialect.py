"""
SQL dialects supported by mtdb.

The set of backends is closed: SQLite (sqlite3) and PostgreSQL
(psycopg2). Repository factories and the migrator look up a Dialect by
DatabaseType; the tag is trusted, never guessed from the handle.

Queries are written with ``?`` placeholders and rendered per dialect.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from ..errors import UnsupportedBackendError


class DatabaseType(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


@dataclass(frozen=True)
class Dialect:
    """
    Per-backend SQL syntax. ``returning_id`` selects
    ``INSERT ... RETURNING`` over ``cursor.lastrowid`` for new keys.
    """

    dbtype: DatabaseType
    placeholder: str
    serial_primary_key: str
    binary_type: str
    returning_id: bool
    table_exists_sql: str

    def render(self, query: str) -> str:
        if self.placeholder == "?":
            return query
        return query.replace("?", self.placeholder)

    def like(self, column: str, pattern: str) -> Tuple[str, str]:
        """
        Case-sensitive LIKE clause and its bound parameter.

        SQLite's LIKE folds ASCII case, so the pattern is translated to
        GLOB there. ``%``, ``_`` and backslash escapes mean the same on
        both backends.
        """
        if self.dbtype is DatabaseType.POSTGRES:
            return f"{column} LIKE ?", pattern
        return f"{column} GLOB ?", like_to_glob(pattern)

    def upsert(self, table: str, columns, conflict, update) -> str:
        cols = ", ".join(columns)
        marks = ", ".join("?" for _ in columns)

        if self.dbtype is DatabaseType.SQLITE:
            return f"INSERT OR REPLACE INTO {table} ({cols}) VALUES ({marks})"

        assignments = ", ".join(f"{c} = EXCLUDED.{c}" for c in update)
        return (
            f"INSERT INTO {table} ({cols}) VALUES ({marks}) "
            f"ON CONFLICT ({', '.join(conflict)}) DO UPDATE SET {assignments}"
        )


def like_to_glob(pattern: str) -> str:
    out = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            ch = next(chars, "\\")
            out.append(_glob_literal(ch))
        elif ch == "%":
            out.append("*")
        elif ch == "_":
            out.append("?")
        else:
            out.append(_glob_literal(ch))
    return "".join(out)


def _glob_literal(ch: str) -> str:
    return f"[{ch}]" if ch in "*?[" else ch


SQLITE_DIALECT = Dialect(
    dbtype=DatabaseType.SQLITE,
    placeholder="?",
    serial_primary_key="INTEGER PRIMARY KEY AUTOINCREMENT",
    binary_type="BLOB",
    returning_id=False,
    table_exists_sql="SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
)

POSTGRES_DIALECT = Dialect(
    dbtype=DatabaseType.POSTGRES,
    placeholder="%s",
    serial_primary_key="SERIAL PRIMARY KEY",
    binary_type="BYTEA",
    returning_id=True,
    table_exists_sql=(
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = current_schema() AND table_name = ?"
    ),
)

_DIALECTS: Dict[DatabaseType, Dialect] = {
    DatabaseType.SQLITE: SQLITE_DIALECT,
    DatabaseType.POSTGRES: POSTGRES_DIALECT,
}


def resolve_dbtype(dbtype: Any) -> DatabaseType:
    """
    Normalise a DatabaseType member or its string value; anything else
    raises UnsupportedBackendError.
    """
    if isinstance(dbtype, DatabaseType):
        return dbtype
    try:
        return DatabaseType(dbtype)
    except ValueError:
        raise UnsupportedBackendError(f"Unsupported database type: {dbtype!r}") from None


def get_dialect(dbtype: Any) -> Dialect:
    return _DIALECTS[resolve_dbtype(dbtype)]


__all__ = [
    "DatabaseType",
    "Dialect",
    "SQLITE_DIALECT",
    "POSTGRES_DIALECT",
    "like_to_glob",
    "resolve_dbtype",
    "get_dialect",
]
