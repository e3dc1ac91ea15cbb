"""
Ports (interfaces) for card and streak persistence.

The scheduler never persists anything itself; callers load cards through a
CardStore, mutate them, and commit them back with save_card().

Implementations:
    - InMemoryCardStore / InMemoryStreakStore: process memory, used by tests.
    - SqlCardStore / SqlStreakStore: SQLAlchemy-backed.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from recall.core.models import Card, CardSet, StreakState


class CardStore(Protocol):
    """Load and save cards and card sets by identifier."""

    def get_card(self, card_id: UUID) -> Card:
        """
        Fetch a single card.

        Raises:
            CardNotFoundError: Unknown id.
        """
        ...

    def get_set(self, set_id: UUID) -> CardSet:
        """
        Fetch a set with its current cards (any order).

        Raises:
            CardSetNotFoundError: Unknown id.
        """
        ...

    def list_sets(self) -> list[CardSet]:
        """All sets, each with its cards."""
        ...

    def add_set(self, card_set: CardSet) -> CardSet: ...

    def add_card(self, card: Card, set_id: UUID) -> Card:
        """
        Add a card to an existing set.

        Raises:
            CardSetNotFoundError: Unknown set id.
        """
        ...

    def save_card(self, card: Card) -> None:
        """Persist the card's scheduling fields."""
        ...


class StreakStore(Protocol):
    """Load and save the single streak record."""

    def load(self) -> StreakState: ...

    def save(self, state: StreakState) -> None: ...

    def clear(self) -> None: ...
