"""
Privilege repository tests, run on every available backend.
"""

import sqlite3

import psycopg2
import pytest

from mtdb import initialize
from mtdb.auth import (
    AuthEntry,
    PrivilegeEntry,
    SQLitePrivilegeRepository,
    new_auth_repository,
    new_privilege_repository,
)
from mtdb.errors import ForeignKeysDisabledError, UniqueViolationError, UnsupportedBackendError


@pytest.fixture
def repos(db):
    conn, dbtype = db
    return new_auth_repository(conn, dbtype), new_privilege_repository(conn, dbtype)


def _names(entries):
    return {e.privilege for e in entries}


def test_factory(sqlite_memory):
    assert isinstance(new_privilege_repository(sqlite_memory, "sqlite"), SQLitePrivilegeRepository)
    with pytest.raises(UnsupportedBackendError):
        new_privilege_repository(sqlite_memory, "redis")


def test_privilege_lifecycle(repos):
    auth, privs = repos
    auth.create(AuthEntry(name="admin", password="", last_login=0))
    player = auth.create(AuthEntry(name="test", password="", last_login=0))

    privs.create(PrivilegeEntry(id=player.id, privilege="interact"))
    privs.create(PrivilegeEntry(id=player.id, privilege="shout"))
    assert _names(privs.get_by_id(player.id)) == {"interact", "shout"}

    privs.create(PrivilegeEntry(id=player.id, privilege="stuff"))
    entries = privs.get_by_id(player.id)
    assert len(entries) == 3
    assert _names(entries) == {"interact", "shout", "stuff"}
    assert all(e.id == player.id for e in entries)

    privs.delete(player.id, "stuff")
    assert _names(privs.get_by_id(player.id)) == {"interact", "shout"}


def test_no_privileges_is_empty_list(repos):
    auth, privs = repos
    player = auth.create(AuthEntry(name="nobody", password="", last_login=0))
    assert privs.get_by_id(player.id) == []
    assert privs.get_by_id(4242) == []


def test_accounts_are_isolated(repos):
    auth, privs = repos
    a = auth.create(AuthEntry(name="a", password="", last_login=0))
    b = auth.create(AuthEntry(name="b", password="", last_login=0))
    privs.create(PrivilegeEntry(id=a.id, privilege="fly"))
    privs.create(PrivilegeEntry(id=b.id, privilege="fast"))

    assert _names(privs.get_by_id(a.id)) == {"fly"}
    assert _names(privs.get_by_id(b.id)) == {"fast"}


def test_duplicate_pair(repos):
    auth, privs = repos
    player = auth.create(AuthEntry(name="test", password="", last_login=0))
    privs.create(PrivilegeEntry(id=player.id, privilege="interact"))

    with pytest.raises(UniqueViolationError):
        privs.create(PrivilegeEntry(id=player.id, privilege="interact"))
    assert len(privs.get_by_id(player.id)) == 1


def test_delete_absent_is_silent(repos):
    auth, privs = repos
    player = auth.create(AuthEntry(name="test", password="", last_login=0))
    privs.delete(player.id, "never-granted")
    assert privs.get_by_id(player.id) == []


def test_delete_all(repos):
    auth, privs = repos
    player = auth.create(AuthEntry(name="test", password="", last_login=0))
    for name in ("interact", "shout", "fly"):
        privs.create(PrivilegeEntry(id=player.id, privilege=name))

    privs.delete_all(player.id)
    assert privs.get_by_id(player.id) == []


def test_account_delete_cascades(repos):
    auth, privs = repos
    player = auth.create(AuthEntry(name="test", password="", last_login=0))
    privs.create(PrivilegeEntry(id=player.id, privilege="interact"))

    auth.delete(player.id)
    assert privs.get_by_id(player.id) == []


def test_grant_to_missing_account_fails(repos):
    _, privs = repos
    with pytest.raises((sqlite3.IntegrityError, psycopg2.IntegrityError)):
        privs.create(PrivilegeEntry(id=4242, privilege="fly"))
    assert privs.get_by_id(4242) == []


@pytest.fixture
def raw_sqlite():
    """A plain sqlite3 handle, as a game server would open it."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def test_sqlite_handle_without_foreign_keys_is_rejected(raw_sqlite):
    with pytest.raises(ForeignKeysDisabledError):
        new_privilege_repository(raw_sqlite, "sqlite")
    with pytest.raises(ForeignKeysDisabledError):
        new_auth_repository(raw_sqlite, "sqlite")


def test_initialize_enforces_foreign_keys_on_raw_sqlite(raw_sqlite):
    initialize(raw_sqlite, "sqlite", enable_wal=False)
    auth = new_auth_repository(raw_sqlite, "sqlite")
    privs = new_privilege_repository(raw_sqlite, "sqlite")

    with pytest.raises(sqlite3.IntegrityError):
        privs.create(PrivilegeEntry(id=4242, privilege="fly"))

    player = auth.create(AuthEntry(name="test", password="", last_login=0))
    privs.create(PrivilegeEntry(id=player.id, privilege="interact"))
    auth.delete(player.id)
    assert raw_sqlite.execute("SELECT COUNT(*) FROM user_privileges").fetchone()[0] == 0


def test_initialize_inside_open_transaction_fails(raw_sqlite):
    raw_sqlite.execute("CREATE TABLE caller (n INTEGER)")
    raw_sqlite.execute("INSERT INTO caller VALUES (1)")
    assert raw_sqlite.in_transaction

    with pytest.raises(ForeignKeysDisabledError):
        initialize(raw_sqlite, "sqlite", enable_wal=False)
