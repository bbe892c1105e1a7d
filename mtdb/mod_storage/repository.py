"""
DB-backed mod storage repository.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import psycopg2

from .models import ModStorageEntry
from ..db.connection import DBConnection
from ..db.dialect import DatabaseType, resolve_dbtype
from ..db.helpers import as_bytes
from ..errors import MalformedEntryError


class ModStorageRepository:
    """
    Database-backed repository for mod key/value storage.

    Schema (canonical, SQLite rendering):

        CREATE TABLE IF NOT EXISTS entries (
            modname     TEXT NOT NULL,
            key         BLOB NOT NULL,
            value       BLOB NOT NULL,
            PRIMARY KEY (modname, key)
        );
    """

    dbtype: DatabaseType

    def __init__(self, conn: Any):
        self.db = DBConnection.wrap(conn, self.dbtype)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, modname: str, key: bytes) -> Optional[ModStorageEntry]:
        with self.db.transaction():
            row = self.db.fetch_one(
                "SELECT modname, key, value FROM entries WHERE modname = ? AND key = ?",
                (modname, self._binary(key)),
            )
        return self._row_to_entry(row) if row else None

    def get_keys(self, modname: str) -> List[bytes]:
        with self.db.transaction():
            rows = self.db.fetch_all(
                "SELECT key FROM entries WHERE modname = ?",
                (modname,),
            )
        try:
            return [as_bytes(r["key"]) for r in rows]
        except (KeyError, TypeError) as e:
            raise MalformedEntryError(f"invalid key in {modname!r}: {e}") from e

    def count(self) -> int:
        with self.db.transaction():
            row = self.db.fetch_one("SELECT COUNT(*) AS count FROM entries")
        return int(row["count"])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create(self, entry: ModStorageEntry) -> None:
        """
        Insert a new pair. Raises UniqueViolationError if the key exists.
        """
        with self.db.transaction():
            self.db.execute(
                "INSERT INTO entries (modname, key, value) VALUES (?, ?, ?)",
                (entry.modname, self._binary(entry.key), self._binary(entry.value)),
            )

    def update(self, entry: ModStorageEntry) -> None:
        with self.db.transaction():
            self.db.execute(
                "UPDATE entries SET value = ? WHERE modname = ? AND key = ?",
                (self._binary(entry.value), entry.modname, self._binary(entry.key)),
            )

    def put(self, entry: ModStorageEntry) -> None:
        """
        Insert the pair or overwrite the value of an existing key.
        """
        query = self.db.dialect.upsert(
            "entries",
            columns=("modname", "key", "value"),
            conflict=("modname", "key"),
            update=("value",),
        )
        with self.db.transaction():
            self.db.execute(
                query,
                (entry.modname, self._binary(entry.key), self._binary(entry.value)),
            )

    def delete(self, modname: str, key: bytes) -> None:
        with self.db.transaction():
            self.db.execute(
                "DELETE FROM entries WHERE modname = ? AND key = ?",
                (modname, self._binary(key)),
            )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _binary(self, value: bytes) -> Any:
        # sqlite3 binds bytes as BLOB as-is
        return bytes(value)

    def _row_to_entry(self, row: Dict[str, Any]) -> ModStorageEntry:
        try:
            return ModStorageEntry(
                modname=row["modname"],
                key=as_bytes(row["key"]),
                value=as_bytes(row["value"]),
            )
        except (KeyError, TypeError) as e:
            raise MalformedEntryError(f"invalid mod storage row {row!r}: {e}") from e


class SQLiteModStorageRepository(ModStorageRepository):
    dbtype = DatabaseType.SQLITE


class PostgresModStorageRepository(ModStorageRepository):
    dbtype = DatabaseType.POSTGRES

    def _binary(self, value: bytes) -> Any:
        return psycopg2.Binary(bytes(value))


_REPOSITORIES: Dict[DatabaseType, Type[ModStorageRepository]] = {
    DatabaseType.SQLITE: SQLiteModStorageRepository,
    DatabaseType.POSTGRES: PostgresModStorageRepository,
}


def new_mod_storage_repository(conn: Any, dbtype: Any) -> ModStorageRepository:
    return _REPOSITORIES[resolve_dbtype(dbtype)](conn)
