"""
DB-backed privilege repository.
"""

from __future__ import annotations

from typing import Any, Dict, List, Type

from .models import PrivilegeEntry
from ..db.connection import DBConnection
from ..db.dialect import DatabaseType, resolve_dbtype
from ..db.sqlite_backend import require_foreign_keys


class PrivilegeRepository:
    """
    Database-backed repository for (account id, privilege) pairs.

    Schema (canonical):

        CREATE TABLE IF NOT EXISTS user_privileges (
            id          INTEGER,
            privilege   VARCHAR(32),
            PRIMARY KEY (id, privilege),
            CONSTRAINT fk_id FOREIGN KEY (id) REFERENCES auth (id) ON DELETE CASCADE
        );
    """

    dbtype: DatabaseType

    def __init__(self, conn: Any):
        self.db = DBConnection.wrap(conn, self.dbtype)

    def get_by_id(self, id: int) -> List[PrivilegeEntry]:
        """
        Every privilege held by account ``id``, in no particular order.
        """
        with self.db.transaction():
            rows = self.db.fetch_all(
                "SELECT id, privilege FROM user_privileges WHERE id = ?",
                (id,),
            )
        return [PrivilegeEntry(id=int(r["id"]), privilege=r["privilege"]) for r in rows]

    def create(self, entry: PrivilegeEntry) -> None:
        """
        Grant a privilege. Raises UniqueViolationError if already granted.
        """
        with self.db.transaction():
            self.db.execute(
                "INSERT INTO user_privileges (id, privilege) VALUES (?, ?)",
                (entry.id, entry.privilege),
            )

    def delete(self, id: int, privilege: str) -> None:
        with self.db.transaction():
            self.db.execute(
                "DELETE FROM user_privileges WHERE id = ? AND privilege = ?",
                (id, privilege),
            )

    def delete_all(self, id: int) -> None:
        """Revoke every privilege of account ``id``."""
        with self.db.transaction():
            self.db.execute("DELETE FROM user_privileges WHERE id = ?", (id,))


class SQLitePrivilegeRepository(PrivilegeRepository):
    dbtype = DatabaseType.SQLITE

    def __init__(self, conn: Any):
        super().__init__(conn)
        require_foreign_keys(self.db.raw)


class PostgresPrivilegeRepository(PrivilegeRepository):
    dbtype = DatabaseType.POSTGRES


_REPOSITORIES: Dict[DatabaseType, Type[PrivilegeRepository]] = {
    DatabaseType.SQLITE: SQLitePrivilegeRepository,
    DatabaseType.POSTGRES: PostgresPrivilegeRepository,
}


def new_privilege_repository(conn: Any, dbtype: Any) -> PrivilegeRepository:
    return _REPOSITORIES[resolve_dbtype(dbtype)](conn)
