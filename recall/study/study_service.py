"""
Study Service - the review loop as callers use it.

Ties the pieces together in the order they must run:
1. Load the card from the store
2. Grade it with the ReviewScheduler
3. Commit it back to the store
4. Invalidate the cached aggregates it feeds
5. Record the streak once a session is finished
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from loguru import logger

from recall.config import Settings, get_settings
from recall.core.models import Card, CardSet, Grade
from recall.db.ports import CardStore
from recall.study.review_scheduler import ReviewScheduler
from recall.study.statistics_service import StatisticsService
from recall.study.streak_tracker import StreakTracker


class StudyService:
    """
    Facade over scheduling, statistics and streaks for one learner.

    Usage:
        service = StudyService(store, scheduler, statistics, streaks)
        session = service.start_session(set_id)
        for card in session:
            service.grade_card_by_id(card.id, Grade.GOOD)
        service.complete_session()
    """

    def __init__(
        self,
        store: CardStore,
        scheduler: ReviewScheduler,
        statistics: StatisticsService,
        streaks: StreakTracker,
        settings: Settings | None = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.statistics = statistics
        self.streaks = streaks
        self.settings = settings or get_settings()

    def card_sets(self, set_ids: list[UUID] | None = None) -> list[CardSet]:
        """Requested sets, or every set when `set_ids` is empty."""
        if set_ids:
            return [self.store.get_set(set_id) for set_id in set_ids]
        return self.store.list_sets()

    def start_session(
        self,
        set_id: UUID,
        max_new: int | None = None,
        max_review: int | None = None,
    ) -> list[Card]:
        """Shuffled mix of new and due cards from one set."""
        card_set = self.store.get_set(set_id)
        return self.scheduler.study_session(
            card_set,
            max_new=self.settings.default_max_new if max_new is None else max_new,
            max_review=self.settings.default_max_review if max_review is None else max_review,
        )

    def grade_card(self, card: Card, grade: Grade) -> Card:
        """
        Grade an already-loaded card, commit it and invalidate aggregates.

        A failed save is logged, not retried or rolled back: the in-memory
        card keeps its new scheduling state either way.
        """
        self.scheduler.grade_card(card, grade)
        try:
            self.store.save_card(card)
        except Exception as e:
            logger.error(f"Failed to save card {card.id} after grading: {e}")
        self.statistics.invalidate_for_card(card)
        return card

    def grade_card_by_id(self, card_id: UUID, grade: Grade) -> Card:
        """
        Load, grade and commit a card.

        Raises:
            CardNotFoundError: Unknown card id.
        """
        return self.grade_card(self.store.get_card(card_id), grade)

    def complete_session(self, now: datetime | None = None) -> int:
        """Record today's study session; returns the current streak."""
        return self.streaks.record_completion(now)
