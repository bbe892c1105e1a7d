"""
mtdb - Auth package.

This package provides:
    - Data model records (AuthEntry, PrivilegeEntry)
    - Repositories over the auth database, one class per backend:
          * SQLiteAuthRepository / PostgresAuthRepository
          * SQLitePrivilegeRepository / PostgresPrivilegeRepository
    - Factories picking the class for a DatabaseType:
          * new_auth_repository
          * new_privilege_repository
"""

from .models import AuthEntry, PrivilegeEntry
from .auth_repository import (
    AuthRepository,
    SQLiteAuthRepository,
    PostgresAuthRepository,
    new_auth_repository,
)
from .privilege_repository import (
    PrivilegeRepository,
    SQLitePrivilegeRepository,
    PostgresPrivilegeRepository,
    new_privilege_repository,
)

__all__ = [
    # Data model records
    "AuthEntry",
    "PrivilegeEntry",

    # Repositories
    "AuthRepository",
    "SQLiteAuthRepository",
    "PostgresAuthRepository",
    "PrivilegeRepository",
    "SQLitePrivilegeRepository",
    "PostgresPrivilegeRepository",

    # Factories
    "new_auth_repository",
    "new_privilege_repository",
]
