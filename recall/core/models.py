"""
Domain models for flashcard scheduling.

Plain dataclasses with no I/O. Cards reference their set by identifier only;
a CardSet contains its cards but cards never point back at the set object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from recall.core.mastery import MasteryLevel, mastery_progress

DEFAULT_EASE_FACTOR = 2.5


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Grade(str, Enum):
    """Self-assessment submitted after a review."""

    AGAIN = "again"  # failed to recall
    GOOD = "good"  # recalled with effort
    EASY = "easy"  # effortless recall

    @property
    def display_name(self) -> str:
        return self.value.title()

    @property
    def description(self) -> str:
        return {
            Grade.AGAIN: "I didn't recall this. Show it again soon.",
            Grade.GOOD: "I recalled it with effort. Normal interval.",
            Grade.EASY: "Perfect recall! Extend the interval.",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            Grade.AGAIN: "red",
            Grade.GOOD: "blue",
            Grade.EASY: "green",
        }[self]


@dataclass
class Card:
    """
    A single reviewable flashcard.

    Only the scheduling fields are touched by the review scheduler; front/back
    and tags are carried for display.
    """

    front: str = ""
    back: str = ""
    id: UUID = field(default_factory=uuid4)
    set_id: UUID | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    # Scheduling state
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    next_review_at: datetime | None = None  # defaults to created_at
    review_count: int = 0
    again_count: int = 0
    good_count: int = 0
    easy_count: int = 0
    last_reviewed_at: datetime | None = None

    def __post_init__(self):
        if self.next_review_at is None:
            self.next_review_at = self.created_at

    def is_due(self, now: datetime | None = None) -> bool:
        """Whether the card should be reviewed at `now`."""
        return self.next_review_at <= (now or _utcnow())

    @property
    def is_new(self) -> bool:
        """Never reviewed."""
        return self.review_count == 0

    @property
    def success_rate(self) -> float:
        """Share of Good + Easy ratings (0 when never reviewed)."""
        if self.review_count <= 0:
            return 0.0
        return (self.good_count + self.easy_count) / self.review_count

    @property
    def mastery_level(self) -> MasteryLevel:
        return MasteryLevel.for_card(self.review_count, self.ease_factor)

    @property
    def mastery_progress(self) -> float:
        return mastery_progress(self.review_count, self.ease_factor)


@dataclass
class CardSet:
    """A named, ordered collection of cards grouped by topic."""

    topic: str
    tag: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    cards: list[Card] = field(default_factory=list)

    @property
    def card_count(self) -> int:
        return len(self.cards)

    def due_count(self, now: datetime | None = None) -> int:
        now = now or _utcnow()
        return sum(1 for card in self.cards if card.is_due(now))

    @property
    def new_count(self) -> int:
        return sum(1 for card in self.cards if card.is_new)

    @property
    def success_rate(self) -> float:
        """Mean success rate across member cards."""
        if not self.cards:
            return 0.0
        return sum(card.success_rate for card in self.cards) / len(self.cards)

    @property
    def total_reviews(self) -> int:
        return sum(card.review_count for card in self.cards)

    @property
    def average_ease(self) -> float:
        if not self.cards:
            return DEFAULT_EASE_FACTOR
        return sum(card.ease_factor for card in self.cards) / len(self.cards)

    @property
    def last_reviewed_at(self) -> datetime | None:
        reviewed = [card.last_reviewed_at for card in self.cards if card.last_reviewed_at]
        return max(reviewed) if reviewed else None

    def add_card(self, card: Card) -> Card:
        card.set_id = self.id
        self.cards.append(card)
        return card

    def due_cards(self, now: datetime | None = None) -> list[Card]:
        """Due cards, earliest due first."""
        now = now or _utcnow()
        return sorted(
            (card for card in self.cards if card.is_due(now)),
            key=lambda c: c.next_review_at,
        )

    def new_cards(self) -> list[Card]:
        """Never-reviewed cards, oldest first."""
        return sorted(
            (card for card in self.cards if card.is_new),
            key=lambda c: c.created_at,
        )


@dataclass
class StreakState:
    """Persisted consecutive-day study streak."""

    current_streak: int = 0
    last_study_day: date | None = None
    longest_streak: int = 0
