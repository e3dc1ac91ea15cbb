"""
Persistence adapters.

Ports live in `recall.db.ports`; the SQL adapter needs an initialized
database (see `init_db`).
"""

from recall.db.memory import InMemoryCardStore, InMemoryStreakStore
from recall.db.ports import CardStore, StreakStore

__all__ = [
    "CardStore",
    "StreakStore",
    "InMemoryCardStore",
    "InMemoryStreakStore",
]
