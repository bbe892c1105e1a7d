"""
Unified database connection abstraction for mtdb.

DBConnection wraps a raw DB-API handle owned by the caller and binds it
to a Dialect, so repositories and the migrator can issue ``?``-style
queries against either backend.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from psycopg2.extensions import TRANSACTION_STATUS_IDLE

from . import helpers
from .dialect import DatabaseType, Dialect, get_dialect


class DBConnection:
    """
    Thin wrapper around a raw DB-API 2.0 connection.

    Responsibilities:
        - Render ``?`` placeholders for the target dialect
        - Normalize rows across backends (return Python dicts)
        - Group statements into transactions via transaction()

    Notes:
        - The wrapper does not own the handle. close() is only called by
          whoever opened it (see Mtdb in mtdb.core).
        - Errors are never swallowed; a failed transaction is rolled
          back and the original exception re-raised.
    """

    def __init__(self, raw_conn: Any, dbtype: Any):
        self.raw = raw_conn
        self.dialect: Dialect = get_dialect(dbtype)
        self._depth = 0

    @classmethod
    def wrap(cls, conn: Any, dbtype: Any) -> "DBConnection":
        """
        Return ``conn`` if it is already a DBConnection for ``dbtype``,
        otherwise wrap the raw handle.
        """
        dialect = get_dialect(dbtype)
        if isinstance(conn, DBConnection):
            if conn.dialect is not dialect:
                raise ValueError(
                    f"connection is bound to {conn.dialect.dbtype.value}, not {dialect.dbtype.value}"
                )
            return conn
        return cls(conn, dialect.dbtype)

    @property
    def dbtype(self) -> DatabaseType:
        return self.dialect.dbtype

    # ------------------------------------------------------------------
    # SQL execution wrappers
    # ------------------------------------------------------------------

    def execute(self, query: str, params: Optional[Sequence] = None):
        """
        Execute a single SQL statement.
        Returns the underlying cursor.
        """
        return helpers.safe_execute(self.raw, self.dialect.render(query), params)

    def fetch_all(self, query: str, params: Optional[Sequence] = None) -> List[Dict[str, Any]]:
        """
        Execute a SELECT statement and return a list of dict rows.
        """
        return helpers.safe_fetch_all(self.raw, self.dialect.render(query), params)

    def fetch_one(self, query: str, params: Optional[Sequence] = None) -> Optional[Dict[str, Any]]:
        """
        Execute a SELECT statement and return a single dict row or None.
        """
        return helpers.safe_fetch_one(self.raw, self.dialect.render(query), params)

    def insert_returning_id(self, query: str, params: Sequence, id_column: str = "id") -> int:
        """
        Execute an INSERT and return the surrogate key the backend assigned.
        """
        if not self.dialect.returning_id:
            return self.execute(query, params).lastrowid

        row = self.fetch_one(f"{query} RETURNING {id_column}", params)
        return row[id_column]

    def table_exists(self, table: str) -> bool:
        return self.fetch_one(self.dialect.table_exists_sql, (table,)) is not None

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self.raw.commit()

    def rollback(self) -> None:
        self.raw.rollback()

    @contextmanager
    def transaction(self) -> Iterator["DBConnection"]:
        """
        Run the enclosed statements as one unit.

        If the handle is already inside a transaction the caller owns it:
        the unit becomes a savepoint and the outer transaction is neither
        committed nor rolled back here.

        sqlite3 only opens implicit transactions before DML, so DDL would
        otherwise autocommit statement by statement; an explicit BEGIN is
        issued for a top-level unit.
        """
        if self._in_transaction():
            yield from self._savepoint()
            return

        if self.dbtype is DatabaseType.SQLITE:
            self.raw.execute("BEGIN")
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def _in_transaction(self) -> bool:
        if self.dbtype is DatabaseType.SQLITE:
            return self.raw.in_transaction
        return self.raw.get_transaction_status() != TRANSACTION_STATUS_IDLE

    def _savepoint(self) -> Iterator["DBConnection"]:
        self._depth += 1
        name = f"mtdb_{self._depth}"
        self.execute(f"SAVEPOINT {name}")
        try:
            yield self
        except BaseException:
            self.execute(f"ROLLBACK TO SAVEPOINT {name}")
            self.execute(f"RELEASE SAVEPOINT {name}")
            raise
        finally:
            self._depth -= 1
        self.execute(f"RELEASE SAVEPOINT {name}")


__all__ = ["DBConnection"]
