"""Exceptions raised at the store boundary."""

from __future__ import annotations

from uuid import UUID


class RecallError(Exception):
    """Base class for errors surfaced to callers."""


class CardNotFoundError(RecallError):
    """Raised when a card id is not known to the store."""

    def __init__(self, card_id: UUID | str):
        self.card_id = card_id
        super().__init__(f"Card not found: {card_id}")


class CardSetNotFoundError(RecallError):
    """Raised when a card set id is not known to the store."""

    def __init__(self, set_id: UUID | str):
        self.set_id = set_id
        super().__init__(f"Card set not found: {set_id}")
