"""
Core façade for mtdb.

Mtdb is the single, high-level entrypoint for a game server process:
it opens the configured database, converges the schema, applies the
durability settings, and hands out the repositories.

Callers that already own a DB-API handle skip the façade and use
initialize() plus the repository factories directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from .auth import (
    AuthRepository,
    PrivilegeRepository,
    new_auth_repository,
    new_privilege_repository,
)
from .config import MtdbConfig, load_config
from .db import DBBackend, DBConnection, DatabaseType, PostgresBackend, SQLiteBackend, resolve_dbtype
from .db.migrations import migrate
from .db.sqlite_backend import enable_foreign_keys
from .db.wal import enable_wal as _enable_wal
from .errors import UnsupportedBackendError
from .mod_storage import ModStorageRepository, new_mod_storage_repository

logger = logging.getLogger(__name__)


def initialize(conn: Any, dbtype: Any, *, enable_wal: bool = True) -> List[int]:
    """
    Prepare a freshly opened handle: turn on foreign keys (SQLite),
    migrate, then enable WAL (SQLite).

    Returns the migration versions applied by this call.
    """
    if resolve_dbtype(dbtype) is DatabaseType.SQLITE:
        enable_foreign_keys(getattr(conn, "raw", conn))
    applied = migrate(conn, dbtype)
    if enable_wal:
        _enable_wal(conn, dbtype)
    return applied


# ---------------------------------------------------------------------------
# Mtdb façade
# ---------------------------------------------------------------------------

@dataclass
class Mtdb:
    """
    High-level façade over one mtdb database.

    Attributes
    ----------
    config:
        MtdbConfig used to construct this instance.

    conn:
        DBConnection over the handle opened by from_config(). The
        façade owns this handle and closes it in close().

    auth, privileges, mod_storage:
        Repositories bound to ``conn``.
    """

    config: MtdbConfig
    conn: DBConnection
    auth: AuthRepository
    privileges: PrivilegeRepository
    mod_storage: ModStorageRepository

    @property
    def dbtype(self) -> DatabaseType:
        return self.conn.dbtype

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, config: Optional[MtdbConfig] = None) -> "Mtdb":
        """
        Construct an Mtdb instance from an MtdbConfig.

        This:
            - selects the DB backend (sqlite/postgres) and connects,
            - migrates the schema,
            - enables WAL when configured (SQLite only),
            - wires up the repositories.
        """
        cfg = config or load_config()

        if cfg.enable_logging:
            logging.basicConfig(level=logging.INFO)
            logger.info("Initializing mtdb with config: %s", cfg)

        backend = create_backend(cfg)
        raw = backend.connect()
        try:
            initialize(raw, backend.dbtype, enable_wal=cfg.enable_wal)
        except BaseException:
            raw.close()
            raise

        conn = DBConnection(raw, backend.dbtype)
        return cls(
            config=cfg,
            conn=conn,
            auth=new_auth_repository(conn, backend.dbtype),
            privileges=new_privilege_repository(conn, backend.dbtype),
            mod_storage=new_mod_storage_repository(conn, backend.dbtype),
        )

    @classmethod
    def from_env(cls) -> "Mtdb":
        """Construct Mtdb using environment variables."""
        return cls.from_config(load_config())

    def close(self) -> None:
        self.conn.raw.close()

    def __enter__(self) -> "Mtdb":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def create_backend(config: MtdbConfig) -> DBBackend:
    """
    Instantiate the appropriate DB backend for a given configuration.
    """
    name = (config.db_backend or "").lower()

    if name == "sqlite":
        return SQLiteBackend(config.db_uri)

    if name in ("postgres", "postgresql", "psql"):
        return PostgresBackend(config.db_uri)

    raise UnsupportedBackendError(f"Unsupported mtdb backend: {config.db_backend!r}")


__all__ = [
    "Mtdb",
    "initialize",
    "create_backend",
]
