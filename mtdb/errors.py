"""
Exception types raised by mtdb.

Driver failures (sqlite3.Error, psycopg2.Error) are NOT wrapped: they
propagate with their original type. The classes below cover the cases
callers need to recognise without inspecting driver internals.
"""

from __future__ import annotations


class MtdbError(Exception):
    """Base class for all mtdb errors."""


class UnsupportedBackendError(MtdbError, ValueError):
    """The database type tag is not one mtdb implements."""


class UniqueViolationError(MtdbError):
    """
    A create collided with an existing natural key (username,
    privilege pair, mod-storage key).

    The driver exception is available as ``__cause__``.
    """


class DurabilityError(MtdbError):
    """The embedded engine refused to switch to write-ahead logging."""


class MalformedEntryError(MtdbError):
    """A stored row could not be turned into an entry record."""


class ForeignKeysDisabledError(MtdbError):
    """A SQLite handle does not enforce foreign keys."""


__all__ = [
    "MtdbError",
    "UnsupportedBackendError",
    "UniqueViolationError",
    "DurabilityError",
    "MalformedEntryError",
    "ForeignKeysDisabledError",
]
