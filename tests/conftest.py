"""
Pytest fixtures for mtdb tests.

Every repository test runs against SQLite. Set MTDB_TEST_POSTGRES_DSN to
a disposable database to run the same tests against PostgreSQL; the
mtdb tables in that database are dropped before each test.
"""

import os
import sqlite3

import pytest

from mtdb.db import DatabaseType, SQLiteBackend, migrate


POSTGRES_DSN = os.getenv("MTDB_TEST_POSTGRES_DSN")


def _reset_postgres(conn) -> None:
    cur = conn.cursor()
    cur.execute("DROP TABLE IF EXISTS caller, user_privileges, auth, entries, schema_version CASCADE")
    conn.commit()


@pytest.fixture
def sqlite_memory():
    """In-memory SQLite handle with foreign keys on, no schema."""
    conn = sqlite3.connect(":memory:")
    conn.execute("PRAGMA foreign_keys = ON")
    yield conn
    conn.close()


@pytest.fixture
def sqlite_file(tmp_path):
    """File-backed SQLite handle opened through SQLiteBackend, no schema."""
    conn = SQLiteBackend(str(tmp_path / "auth.sqlite")).connect()
    yield conn
    conn.close()


@pytest.fixture(params=[DatabaseType.SQLITE, DatabaseType.POSTGRES], ids=["sqlite", "postgres"])
def empty_db(request, tmp_path):
    """
    (handle, dbtype) for an empty database on each backend.
    """
    if request.param is DatabaseType.SQLITE:
        conn = SQLiteBackend(str(tmp_path / "test.sqlite")).connect()
    else:
        if not POSTGRES_DSN:
            pytest.skip("MTDB_TEST_POSTGRES_DSN not set")
        from mtdb.db import PostgresBackend

        conn = PostgresBackend(POSTGRES_DSN).connect()
        _reset_postgres(conn)

    yield conn, request.param
    conn.close()


@pytest.fixture
def db(empty_db):
    """(handle, dbtype) with the mtdb schema applied."""
    conn, dbtype = empty_db
    migrate(conn, dbtype)
    return conn, dbtype
