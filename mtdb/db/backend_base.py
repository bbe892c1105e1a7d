"""
Backend base interface for mtdb.

A backend knows how to open a raw DB-API handle for one DatabaseType.
Repositories and the migrator never open handles themselves; only the
Mtdb façade (mtdb.core) goes through a backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .dialect import DatabaseType


class DBBackend(ABC):
    """
    Abstract base class for an mtdb backend.

    Concrete subclasses may define any constructor signature they want
    (e.g. SQLiteBackend(db_path), PostgresBackend(dsn)).
    """

    dbtype: DatabaseType

    @abstractmethod
    def connect(self) -> Any:
        """
        Acquire and return a new raw DB-API 2.0 connection.
        """
        raise NotImplementedError


__all__ = ["DBBackend"]
