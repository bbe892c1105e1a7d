"""
mtdb - Mod storage package.

Key/value storage for server mods, kept in the ``entries`` table.
"""

from .models import ModStorageEntry
from .repository import (
    ModStorageRepository,
    SQLiteModStorageRepository,
    PostgresModStorageRepository,
    new_mod_storage_repository,
)

__all__ = [
    "ModStorageEntry",
    "ModStorageRepository",
    "SQLiteModStorageRepository",
    "PostgresModStorageRepository",
    "new_mod_storage_repository",
]
