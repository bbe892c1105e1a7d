"""
Database schema migration manager.

Applied steps are recorded in schema_version, one row per step; the
current version is MAX(version). A run is a single transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Union

from .connection import DBConnection
from .dialect import DatabaseType, Dialect, SQLITE_DIALECT, POSTGRES_DIALECT, resolve_dbtype

logger = logging.getLogger(__name__)

VERSION_TABLE = "schema_version"

VERSION_TABLE_DDL = f"""
CREATE TABLE IF NOT EXISTS {VERSION_TABLE} (
    version      INTEGER NOT NULL,
    applied_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

Statements = Union[str, Sequence[str]]


@dataclass(frozen=True)
class Migration:
    version: int
    description: str
    statements: Mapping[DatabaseType, Sequence[str]]


class MigrationManager:
    """
    Schema migration registry and executor. Steps must be idempotent on
    their own (IF NOT EXISTS).
    """

    def __init__(self):
        self.migrations: Dict[int, Migration] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        version: int,
        *,
        sqlite: Statements,
        postgres: Statements,
        description: str = "",
    ) -> Migration:
        """Register DDL for one positive, unique ``version``."""
        if not isinstance(version, int) or version <= 0:
            raise ValueError(f"migration version must be a positive integer, got {version!r}")
        if version in self.migrations:
            raise ValueError(f"migration version {version} already registered")

        migration = Migration(
            version=version,
            description=description,
            statements={
                DatabaseType.SQLITE: _as_list(sqlite),
                DatabaseType.POSTGRES: _as_list(postgres),
            },
        )
        self.migrations[version] = migration
        return migration

    def get_latest_version(self) -> int:
        """Highest registered version, 0 if none."""
        return max(self.migrations.keys(), default=0)

    def pending(self, current: int) -> List[Migration]:
        return [self.migrations[v] for v in sorted(self.migrations) if v > current]

    # ------------------------------------------------------------------
    # Marker
    # ------------------------------------------------------------------

    def get_current_version(self, conn: Any, dbtype: Any) -> int:
        """
        Read the applied version; 0 when the marker table is absent or empty.
        """
        db = DBConnection.wrap(conn, dbtype)
        with db.transaction():
            return self._read_version(db)

    def check_migrations_needed(self, conn: Any, dbtype: Any) -> bool:
        return self.get_current_version(conn, dbtype) < self.get_latest_version()

    def _read_version(self, db: DBConnection) -> int:
        if not db.table_exists(VERSION_TABLE):
            return 0
        row = db.fetch_one(f"SELECT MAX(version) AS version FROM {VERSION_TABLE}")
        if not row or row["version"] is None:
            return 0
        return int(row["version"])

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def apply_migrations(self, conn: Any, dbtype: Any) -> List[int]:
        """
        Bring the database up to get_latest_version() and return the
        versions applied, in order. Driver errors propagate after rollback.
        """
        dbtype = resolve_dbtype(dbtype)
        db = DBConnection.wrap(conn, dbtype)
        applied: List[int] = []

        with db.transaction():
            if not db.table_exists(VERSION_TABLE):
                db.execute(VERSION_TABLE_DDL)
                current = 0
            else:
                current = self._read_version(db)

            todo = self.pending(current)
            if not todo:
                logger.debug("schema at version %d, nothing to migrate", current)
                return applied

            for migration in todo:
                logger.info(
                    "applying migration %d (%s) on %s",
                    migration.version, migration.description, dbtype.value,
                )
                for statement in migration.statements[dbtype]:
                    db.execute(statement)
                db.execute(
                    f"INSERT INTO {VERSION_TABLE} (version) VALUES (?)",
                    (migration.version,),
                )
                applied.append(migration.version)

        logger.info("schema migrated to version %d", applied[-1])
        return applied


def _as_list(statements: Statements) -> List[str]:
    if isinstance(statements, str):
        return [statements]
    return list(statements)


# ----------------------------------------------------------------------
# Built-in schema
# ----------------------------------------------------------------------

def _auth_ddl(d: Dialect) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS auth (
        id          {d.serial_primary_key},
        name        VARCHAR(32) UNIQUE,
        password    VARCHAR(512),
        last_login  INTEGER NOT NULL DEFAULT 0
    )
    """


def _privileges_ddl(d: Dialect) -> str:
    return """
    CREATE TABLE IF NOT EXISTS user_privileges (
        id          INTEGER,
        privilege   VARCHAR(32),
        PRIMARY KEY (id, privilege),
        CONSTRAINT fk_id FOREIGN KEY (id) REFERENCES auth (id) ON DELETE CASCADE
    )
    """


def _entries_ddl(d: Dialect) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS entries (
        modname     TEXT NOT NULL,
        key         {d.binary_type} NOT NULL,
        value       {d.binary_type} NOT NULL,
        PRIMARY KEY (modname, key)
    )
    """


def build_default_manager() -> MigrationManager:
    """
    The mtdb schema: auth, user_privileges, mod-storage entries.
    """
    mgr = MigrationManager()
    for version, description, ddl in (
        (1, "auth", _auth_ddl),
        (2, "user_privileges", _privileges_ddl),
        (3, "mod storage entries", _entries_ddl),
    ):
        mgr.register(
            version,
            description=description,
            sqlite=ddl(SQLITE_DIALECT),
            postgres=ddl(POSTGRES_DIALECT),
        )
    return mgr


def migrate(conn: Any, dbtype: Any) -> List[int]:
    """
    Converge ``conn`` to the current mtdb schema.
    """
    return build_default_manager().apply_migrations(conn, dbtype)


__all__ = [
    "Migration",
    "MigrationManager",
    "VERSION_TABLE",
    "build_default_manager",
    "migrate",
]
