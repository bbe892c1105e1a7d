"""
Façade, configuration and handle setup.
"""

import pytest

from mtdb import (
    AuthEntry,
    ModStorageEntry,
    Mtdb,
    MtdbConfig,
    PrivilegeEntry,
    create_backend,
    initialize,
    load_config,
)
from mtdb.db import DatabaseType, PostgresBackend, SQLiteBackend
from mtdb.errors import UnsupportedBackendError


class TestConfig:
    def test_defaults(self, monkeypatch):
        for name in ("MTDB_DB_BACKEND", "MTDB_DB_URI", "MTDB_ENABLE_WAL", "MTDB_ENABLE_LOGGING"):
            monkeypatch.delenv(name, raising=False)

        cfg = load_config()
        assert cfg == MtdbConfig()
        assert cfg.db_backend == "sqlite"
        assert cfg.enable_wal is True

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MTDB_DB_BACKEND", "postgres")
        monkeypatch.setenv("MTDB_DB_URI", "postgresql://mt:pw@db/mt")
        monkeypatch.setenv("MTDB_ENABLE_WAL", "off")
        monkeypatch.setenv("MTDB_ENABLE_LOGGING", "Yes")

        cfg = load_config()
        assert cfg.db_backend == "postgres"
        assert cfg.db_uri == "postgresql://mt:pw@db/mt"
        assert cfg.enable_wal is False
        assert cfg.enable_logging is True


class TestCreateBackend:
    def test_sqlite(self, tmp_path):
        backend = create_backend(MtdbConfig(db_backend="sqlite", db_uri=str(tmp_path / "a.sqlite")))
        assert isinstance(backend, SQLiteBackend)
        assert backend.dbtype is DatabaseType.SQLITE

    @pytest.mark.parametrize("name", ["postgres", "PostgreSQL", "psql"])
    def test_postgres_aliases(self, name):
        backend = create_backend(MtdbConfig(db_backend=name, db_uri="postgresql://localhost/mt"))
        assert isinstance(backend, PostgresBackend)

    def test_unknown(self):
        with pytest.raises(UnsupportedBackendError):
            create_backend(MtdbConfig(db_backend="leveldb"))


class TestInitialize:
    def test_migrates_then_enables_wal(self, sqlite_file):
        assert initialize(sqlite_file, DatabaseType.SQLITE) == [1, 2, 3]
        assert sqlite_file.execute("PRAGMA journal_mode").fetchone()[0] == "wal"

        # repeated setup of the same database
        assert initialize(sqlite_file, DatabaseType.SQLITE) == []

    def test_wal_can_be_skipped(self, sqlite_memory):
        assert initialize(sqlite_memory, "sqlite", enable_wal=False) == [1, 2, 3]


class TestMtdb:
    def test_sqlite_roundtrip(self, tmp_path):
        cfg = MtdbConfig(db_backend="sqlite", db_uri=str(tmp_path / "world.sqlite"))

        with Mtdb.from_config(cfg) as mtdb:
            assert mtdb.dbtype is DatabaseType.SQLITE
            player = mtdb.auth.create(AuthEntry(name="singleplayer", password="", last_login=10))
            mtdb.privileges.create(PrivilegeEntry(id=player.id, privilege="interact"))
            mtdb.mod_storage.put(ModStorageEntry(modname="mymod", key=b"k", value=b"v"))

        with Mtdb.from_config(cfg) as mtdb:
            assert mtdb.auth.get_by_username("singleplayer").id == player.id
            assert [p.privilege for p in mtdb.privileges.get_by_id(player.id)] == ["interact"]
            assert mtdb.mod_storage.get("mymod", b"k").value == b"v"

    def test_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MTDB_DB_BACKEND", "sqlite")
        monkeypatch.setenv("MTDB_DB_URI", str(tmp_path / "env.sqlite"))
        monkeypatch.setenv("MTDB_ENABLE_WAL", "1")

        mtdb = Mtdb.from_env()
        try:
            assert mtdb.auth.count() == 0
            assert mtdb.conn.raw.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        finally:
            mtdb.close()

    def test_in_memory_without_wal(self):
        mtdb = Mtdb.from_config(MtdbConfig(db_uri=":memory:", enable_wal=False))
        try:
            assert mtdb.mod_storage.count() == 0
        finally:
            mtdb.close()
