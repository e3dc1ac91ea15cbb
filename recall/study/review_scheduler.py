"""
Review Scheduler - SM-2 spaced repetition.

Decides when every card is next reviewed:
1. Again - relearn in 10 minutes, ease drops by 0.2
2. Good  - 1 day, then 6 days, then interval x ease
3. Easy  - 4 days, then interval x ease x 1.3, ease rises by 0.15

The first two successful reviews use fixed intervals so a freshly
initialized ease factor is not trusted before the learner has recalled
the card twice.

Also builds review queues and study sessions from card sets.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from recall.core.clock import Clock, SystemClock
from recall.core.models import Card, CardSet, Grade

# =============================================================================
# SM-2 CONSTANTS
# =============================================================================

MINIMUM_EASE_FACTOR = 1.3
MAXIMUM_EASE_FACTOR = 3.0
AGAIN_EASE_PENALTY = 0.2
EASY_EASE_BONUS = 0.15
EASY_INTERVAL_BONUS = 1.3

FIRST_GOOD_INTERVAL = 1  # days
SECOND_GOOD_INTERVAL = 6  # days
FIRST_EASY_INTERVAL = 4  # days
MAXIMUM_INTERVAL_DAYS = 36500  # keeps due dates representable
RELEARN_DELAY = timedelta(minutes=10)

SECONDS_PER_CARD = 30


@dataclass(frozen=True)
class SetStatistics:
    """Aggregate numbers for one card set."""

    total_cards: int = 0
    due_cards: int = 0
    new_cards: int = 0
    average_success_rate: float = 0.0
    total_reviews: int = 0


@dataclass(frozen=True)
class _Schedule:
    """Outcome of applying a grade to (interval, ease)."""

    interval_days: int
    ease_factor: float
    next_review_at: datetime


def _clamp_ease(ease_factor: float) -> float:
    return min(MAXIMUM_EASE_FACTOR, max(MINIMUM_EASE_FACTOR, ease_factor))


class ReviewScheduler:
    """
    SM-2 variant scheduler.

    Stateless apart from its clock and random source; safe to share across
    threads as long as the same card is not graded concurrently.

    Args:
        clock: Time source (defaults to the host's local zone)
        rng: Random source used to shuffle study sessions
    """

    def __init__(self, clock: Clock | None = None, rng: random.Random | None = None):
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()

    # -------------------------------------------------------------------------
    # Grading
    # -------------------------------------------------------------------------

    def grade_card(self, card: Card, grade: Grade) -> None:
        """
        Apply a review grade to a card in place.

        Updates interval, ease factor, due date, counters and last-reviewed
        time. The card is not persisted; the caller commits it.
        """
        now = self.clock.now()
        schedule = self._schedule(card, grade, now)

        card.interval_days = schedule.interval_days
        card.ease_factor = schedule.ease_factor
        card.next_review_at = schedule.next_review_at
        card.last_reviewed_at = now
        card.review_count += 1
        if grade is Grade.AGAIN:
            card.again_count += 1
        elif grade is Grade.GOOD:
            card.good_count += 1
        else:
            card.easy_count += 1

        logger.debug(
            "Graded card {} {}: interval={}d ease={:.2f} next={}",
            card.id,
            grade.value,
            card.interval_days,
            card.ease_factor,
            card.next_review_at.isoformat(),
        )

    def estimate_next_review_at(self, card: Card, grade: Grade) -> datetime:
        """When `grade_card(card, grade)` would schedule the card, without mutating it."""
        return self._schedule(card, grade, self.clock.now()).next_review_at

    def estimate_next_intervals(self, card: Card) -> dict[Grade, datetime]:
        """Due date each grade would produce, for answer-button previews."""
        now = self.clock.now()
        return {grade: self._schedule(card, grade, now).next_review_at for grade in Grade}

    def _schedule(self, card: Card, grade: Grade, now: datetime) -> _Schedule:
        """Shared arithmetic for grading and estimation."""
        interval = max(0, int(card.interval_days))
        ease = _clamp_ease(card.ease_factor)

        if grade is Grade.AGAIN:
            return _Schedule(
                interval_days=0,
                ease_factor=max(MINIMUM_EASE_FACTOR, ease - AGAIN_EASE_PENALTY),
                next_review_at=now + RELEARN_DELAY,
            )

        if grade is Grade.GOOD:
            if interval == 0:
                interval = FIRST_GOOD_INTERVAL
            elif interval == 1:
                interval = SECOND_GOOD_INTERVAL
            else:
                interval = math.ceil(interval * ease)
        else:
            if interval == 0:
                interval = FIRST_EASY_INTERVAL
            else:
                interval = math.ceil(interval * ease * EASY_INTERVAL_BONUS)
            ease = min(MAXIMUM_EASE_FACTOR, ease + EASY_EASE_BONUS)

        interval = min(interval, MAXIMUM_INTERVAL_DAYS)
        return _Schedule(
            interval_days=interval,
            ease_factor=ease,
            next_review_at=now + timedelta(days=interval),
        )

    # -------------------------------------------------------------------------
    # Queues and sessions
    # -------------------------------------------------------------------------

    def daily_review_queue(self, card_sets: Iterable[CardSet]) -> list[Card]:
        """
        All due cards across `card_sets`, earliest due first.

        Ties keep the order in which cards were encountered.
        """
        now = self.clock.now()
        due = [card for card_set in card_sets for card in card_set.cards if card.is_due(now)]
        return sorted(due, key=lambda c: c.next_review_at)

    def study_session(
        self,
        card_set: CardSet,
        max_new: int = 5,
        max_review: int = 20,
    ) -> list[Card]:
        """
        Build a study session mixing new and due review cards.

        Selects up to `max_new` new cards (oldest first) and up to
        `max_review` due, previously reviewed cards (earliest due first),
        then shuffles the presentation order.
        """
        now = self.clock.now()

        new_cards = card_set.new_cards()[: max(0, max_new)]
        review_cards = [card for card in card_set.due_cards(now) if not card.is_new]
        review_cards = review_cards[: max(0, max_review)]

        session = new_cards + review_cards
        self.rng.shuffle(session)

        logger.debug(
            "Study session for set {}: {} new, {} review",
            card_set.id,
            len(new_cards),
            len(review_cards),
        )
        return session

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def estimate_daily_study_minutes(self, card_sets: Iterable[CardSet]) -> int:
        """Minutes needed for today's queue at 30 seconds per card."""
        return estimate_study_minutes(len(self.daily_review_queue(card_sets)))

    def set_statistics(self, card_set: CardSet) -> SetStatistics:
        """Totals for a single set; all zero for an empty set."""
        if not card_set.cards:
            return SetStatistics()

        now = self.clock.now()
        return SetStatistics(
            total_cards=card_set.card_count,
            due_cards=card_set.due_count(now),
            new_cards=card_set.new_count,
            average_success_rate=card_set.success_rate,
            total_reviews=card_set.total_reviews,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def estimate_study_minutes(card_count: int) -> int:
    """Whole minutes to review `card_count` cards, rounded down."""
    return (card_count * SECONDS_PER_CARD) // 60
