"""
DB-backed account repository.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from .models import AuthEntry
from ..db.connection import DBConnection
from ..db.dialect import DatabaseType, resolve_dbtype
from ..db.sqlite_backend import require_foreign_keys
from ..errors import MalformedEntryError


class AuthRepository:
    """
    Database-backed repository for account rows.

    Schema (canonical, SQLite rendering):

        CREATE TABLE IF NOT EXISTS auth (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            name        VARCHAR(32) UNIQUE,
            password    VARCHAR(512),
            last_login  INTEGER NOT NULL DEFAULT 0
        );

    Lookups return None when no row matches. update() and delete() do
    not report whether a row was affected; callers that care must
    look the entry up first.
    """

    dbtype: DatabaseType

    def __init__(self, conn: Any):
        self.db = DBConnection.wrap(conn, self.dbtype)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_username(self, name: str) -> Optional[AuthEntry]:
        with self.db.transaction():
            row = self.db.fetch_one(
                "SELECT id, name, password, last_login FROM auth WHERE name = ?",
                (name,),
            )
        return self._row_to_entry(row) if row else None

    def get_by_id(self, id: int) -> Optional[AuthEntry]:
        with self.db.transaction():
            row = self.db.fetch_one(
                "SELECT id, name, password, last_login FROM auth WHERE id = ?",
                (id,),
            )
        return self._row_to_entry(row) if row else None

    def search(self, name_like: Optional[str] = None, limit: Optional[int] = None) -> List[AuthEntry]:
        """
        Accounts whose name matches a SQL LIKE pattern, ordered by id.
        Matching is case sensitive on every backend.
        """
        query = "SELECT id, name, password, last_login FROM auth"
        params: List[Any] = []
        if name_like is not None:
            clause, pattern = self.db.dialect.like("name", name_like)
            query += f" WHERE {clause}"
            params.append(pattern)
        query += " ORDER BY id"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))

        with self.db.transaction():
            rows = self.db.fetch_all(query, params)
        return [self._row_to_entry(r) for r in rows]

    def count(self) -> int:
        with self.db.transaction():
            row = self.db.fetch_one("SELECT COUNT(*) AS count FROM auth")
        return int(row["count"])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create(self, entry: AuthEntry) -> AuthEntry:
        """
        Insert ``entry`` and write the assigned id back into it.

        Raises UniqueViolationError if the name is taken.
        """
        with self.db.transaction():
            entry.id = self.db.insert_returning_id(
                "INSERT INTO auth (name, password, last_login) VALUES (?, ?, ?)",
                (entry.name, entry.password, entry.last_login),
            )
        return entry

    def update(self, entry: AuthEntry) -> None:
        if entry.id is None:
            raise ValueError("cannot update an AuthEntry that has no id")

        with self.db.transaction():
            self.db.execute(
                "UPDATE auth SET name = ?, password = ?, last_login = ? WHERE id = ?",
                (entry.name, entry.password, entry.last_login, entry.id),
            )

    def delete(self, id: int) -> None:
        with self.db.transaction():
            self.db.execute("DELETE FROM auth WHERE id = ?", (id,))

    # ------------------------------------------------------------------
    # Internal helper
    # ------------------------------------------------------------------

    def _row_to_entry(self, row: Dict[str, Any]) -> AuthEntry:
        if row.get("name") is None:
            raise MalformedEntryError(f"auth row without a name: {row!r}")
        try:
            return AuthEntry(
                id=int(row["id"]),
                name=str(row["name"]),
                password=row["password"] if row["password"] is not None else "",
                last_login=int(row["last_login"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedEntryError(f"invalid auth row {row!r}: {e}") from e


class SQLiteAuthRepository(AuthRepository):
    dbtype = DatabaseType.SQLITE

    def __init__(self, conn: Any):
        super().__init__(conn)
        require_foreign_keys(self.db.raw)


class PostgresAuthRepository(AuthRepository):
    dbtype = DatabaseType.POSTGRES


_REPOSITORIES: Dict[DatabaseType, Type[AuthRepository]] = {
    DatabaseType.SQLITE: SQLiteAuthRepository,
    DatabaseType.POSTGRES: PostgresAuthRepository,
}


def new_auth_repository(conn: Any, dbtype: Any) -> AuthRepository:
    """
    Build the account repository for ``dbtype``.

    Raises UnsupportedBackendError for an unknown tag.
    """
    return _REPOSITORIES[resolve_dbtype(dbtype)](conn)
