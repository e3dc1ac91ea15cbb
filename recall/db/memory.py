"""In-memory stores for tests and throwaway sessions."""

from __future__ import annotations

import copy
import threading
from uuid import UUID

from recall.core.exceptions import CardNotFoundError, CardSetNotFoundError
from recall.core.models import Card, CardSet, StreakState


class InMemoryCardStore:
    """
    Dictionary-backed CardStore.

    Returned objects are copies so callers must save_card() to commit,
    the same as with the SQL store.
    """

    def __init__(self, card_sets: list[CardSet] | None = None):
        self._lock = threading.Lock()
        self._sets: dict[UUID, CardSet] = {}
        self._cards: dict[UUID, Card] = {}
        for card_set in card_sets or []:
            self.add_set(card_set)

    def get_card(self, card_id: UUID) -> Card:
        with self._lock:
            card = self._cards.get(card_id)
            if card is None:
                raise CardNotFoundError(card_id)
            return copy.deepcopy(card)

    def get_set(self, set_id: UUID) -> CardSet:
        with self._lock:
            if set_id not in self._sets:
                raise CardSetNotFoundError(set_id)
            return self._snapshot(self._sets[set_id])

    def list_sets(self) -> list[CardSet]:
        with self._lock:
            return [self._snapshot(card_set) for card_set in self._sets.values()]

    def add_set(self, card_set: CardSet) -> CardSet:
        with self._lock:
            stored = CardSet(
                topic=card_set.topic,
                tag=card_set.tag,
                id=card_set.id,
                created_at=card_set.created_at,
            )
            self._sets[stored.id] = stored
            for card in card_set.cards:
                card.set_id = stored.id
                self._cards[card.id] = copy.deepcopy(card)
        return card_set

    def add_card(self, card: Card, set_id: UUID) -> Card:
        with self._lock:
            if set_id not in self._sets:
                raise CardSetNotFoundError(set_id)
            card.set_id = set_id
            self._cards[card.id] = copy.deepcopy(card)
        return card

    def save_card(self, card: Card) -> None:
        with self._lock:
            if card.id not in self._cards:
                raise CardNotFoundError(card.id)
            self._cards[card.id] = copy.deepcopy(card)

    def _snapshot(self, card_set: CardSet) -> CardSet:
        cards = [copy.deepcopy(c) for c in self._cards.values() if c.set_id == card_set.id]
        return CardSet(
            topic=card_set.topic,
            tag=card_set.tag,
            id=card_set.id,
            created_at=card_set.created_at,
            cards=cards,
        )


class InMemoryStreakStore:
    """Holds one StreakState in memory."""

    def __init__(self, state: StreakState | None = None):
        self._state = state or StreakState()

    def load(self) -> StreakState:
        return copy.copy(self._state)

    def save(self, state: StreakState) -> None:
        self._state = copy.copy(state)

    def clear(self) -> None:
        self._state = StreakState()
