"""
Shared DB helper utilities.

These wrappers ensure:
    - consistent interfaces across sqlite3 and psycopg2
    - predictable row→dict mapping, whatever row factory the handle uses
    - unique-constraint failures surface as UniqueViolationError

Every other driver error is re-raised unchanged.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from psycopg2 import errorcodes

from ..errors import UniqueViolationError

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Error classification
# ----------------------------------------------------------------------

def is_unique_violation(exc: BaseException) -> bool:
    """
    True if ``exc`` is a driver error for a UNIQUE / PRIMARY KEY clash.
    """
    if isinstance(exc, sqlite3.IntegrityError):
        msg = str(exc)
        return "UNIQUE constraint failed" in msg or "PRIMARY KEY must be unique" in msg

    return getattr(exc, "pgcode", None) == errorcodes.UNIQUE_VIOLATION


# ----------------------------------------------------------------------
# Execution helpers
# ----------------------------------------------------------------------

def safe_execute(conn: Any, query: str, params: Optional[Sequence] = None):
    """
    Execute a single SQL statement.
    Returns the raw cursor.

    Parameters
    ----------
    conn:
        DB-API compatible connection object (sqlite3, psycopg2).
    query:
        SQL string with driver-native placeholders.
    params:
        Optional parameter sequence.

    Raises
    ------
    UniqueViolationError
        The statement violated a unique or primary key constraint.
    """
    logger.debug("execute: %s | %r", query, params)
    cur = conn.cursor()
    try:
        if params:
            cur.execute(query, tuple(params))
        else:
            cur.execute(query)
    except Exception as e:
        if is_unique_violation(e):
            raise UniqueViolationError(str(e)) from e
        raise
    return cur


def safe_fetch_all(conn: Any, query: str, params: Optional[Sequence] = None) -> List[Dict[str, Any]]:
    """
    Execute a SELECT query and return every row as a dict.
    """
    cur = safe_execute(conn, query, params)
    return [row_to_dict(r, cur.description) for r in cur.fetchall()]


def safe_fetch_one(conn: Any, query: str, params: Optional[Sequence] = None) -> Optional[Dict[str, Any]]:
    """
    Execute a SELECT query and return the first row as a dict, or None.
    """
    cur = safe_execute(conn, query, params)
    row = cur.fetchone()
    return row_to_dict(row, cur.description) if row is not None else None


# ----------------------------------------------------------------------
# Row mapping
# ----------------------------------------------------------------------

def row_to_dict(row: Any, description: Optional[Sequence] = None) -> Dict[str, Any]:
    """
    Convert a driver row to a plain dict keyed by column name.

    Handles sqlite3.Row and psycopg2 RealDictRow (both expose keys())
    as well as plain tuples, which are zipped against the cursor
    description.
    """
    if row is None:
        return {}

    if hasattr(row, "keys"):
        return {k: row[k] for k in row.keys()}

    if description is None:
        return dict(enumerate(row))

    return {col[0]: value for col, value in zip(description, row)}


def as_bytes(value: Any) -> bytes:
    """
    Normalise a binary column value.

    psycopg2 returns BYTEA as memoryview; sqlite3 returns bytes for BLOB
    and str for rows written as TEXT by older tools.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (memoryview, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"expected binary column value, got {type(value).__name__}")


__all__ = [
    "is_unique_violation",
    "safe_execute",
    "safe_fetch_all",
    "safe_fetch_one",
    "row_to_dict",
    "as_bytes",
]
