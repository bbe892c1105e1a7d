from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ModStorageEntry:
    """
    One key/value pair owned by a mod. Keys and values are opaque bytes.
    """

    modname: str
    key: bytes
    value: bytes
