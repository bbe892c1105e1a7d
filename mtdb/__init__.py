"""
mtdb

Persistence layer for a multiplayer game server: accounts, privileges
and mod key/value storage on SQLite or PostgreSQL.

Submodules include:
    - db/           dialects, connection wrapper, backends, migrations, WAL
    - auth/         accounts and privileges
    - mod_storage/  mod key/value entries

The root package re-exports the pieces most callers need.
"""

from .config import MtdbConfig, load_config
from .core import Mtdb, create_backend, initialize
from .db import DatabaseType, enable_wal, migrate
from .auth import (
    AuthEntry,
    PrivilegeEntry,
    new_auth_repository,
    new_privilege_repository,
)
from .mod_storage import ModStorageEntry, new_mod_storage_repository
from .errors import (
    MtdbError,
    UnsupportedBackendError,
    UniqueViolationError,
    DurabilityError,
    MalformedEntryError,
    ForeignKeysDisabledError,
)

__all__ = [
    "MtdbConfig",
    "load_config",
    "Mtdb",
    "create_backend",
    "initialize",
    "DatabaseType",
    "enable_wal",
    "migrate",
    "AuthEntry",
    "PrivilegeEntry",
    "new_auth_repository",
    "new_privilege_repository",
    "ModStorageEntry",
    "new_mod_storage_repository",
    "MtdbError",
    "UnsupportedBackendError",
    "UniqueViolationError",
    "DurabilityError",
    "MalformedEntryError",
    "ForeignKeysDisabledError",
]
