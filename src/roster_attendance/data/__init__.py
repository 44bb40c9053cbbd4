from .database import Database
from .repository import (
    ChangeListener,
    InMemoryRosterRepository,
    RosterRepository,
    SQLiteRosterRepository,
    roster_key,
)

__all__ = [
    "ChangeListener",
    "Database",
    "InMemoryRosterRepository",
    "RosterRepository",
    "SQLiteRosterRepository",
    "roster_key",
]
