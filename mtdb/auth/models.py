from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# ----------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------

@dataclass
class AuthEntry:
    """
    One account row.

    ``id`` stays None until a successful create writes the
    backend-assigned key back into the instance. ``password`` is stored
    verbatim; the game server's own format is
    ``#1#<salt>#<verifier>`` but nothing here parses it.
    """

    name: str
    password: str
    last_login: int = 0
    id: Optional[int] = None


# ----------------------------------------------------------------------
# Privilege
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class PrivilegeEntry:
    id: int
    privilege: str
