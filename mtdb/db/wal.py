"""
Write-ahead logging for the embedded engine.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import DurabilityError
from .connection import DBConnection
from .dialect import DatabaseType

logger = logging.getLogger(__name__)


def enable_wal(conn: Any, dbtype: Any = DatabaseType.SQLITE) -> None:
    """
    Switch an SQLite database to ``journal_mode=WAL``; no-op on PostgreSQL.
    Raises DurabilityError if the engine reports another mode.
    """
    db = DBConnection.wrap(conn, dbtype)
    if db.dbtype is not DatabaseType.SQLITE:
        return

    row = db.fetch_one("PRAGMA journal_mode=WAL")
    mode = str(next(iter(row.values()))).lower() if row else None
    if mode != "wal":
        raise DurabilityError(f"could not enable write-ahead logging, journal mode is {mode!r}")

    logger.info("SQLite journal mode set to WAL")


__all__ = ["enable_wal"]
