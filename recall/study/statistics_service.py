"""
Statistics Service - cached aggregate queries over card sets.

Every query is answered through the CacheService: the scheduler walks the
cards only on a miss or after the entry's TTL. Grading a card must be
followed by invalidate_for_card() so the next read sees the new state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from loguru import logger

from recall.cache.cache_service import (
    DAILY_QUEUE_PREFIX,
    DUE_COUNT_PREFIX,
    FORECAST_PREFIX,
    PROFICIENCY_PREFIX,
    CacheService,
    daily_queue_key,
    due_count_key,
    forecast_key,
    proficiency_key,
    set_stats_key,
)
from recall.config import Settings, get_settings
from recall.core.clock import Clock
from recall.core.mastery import MasteryLevel
from recall.core.models import Card, CardSet
from recall.study.review_scheduler import ReviewScheduler, SetStatistics, estimate_study_minutes


@dataclass(frozen=True)
class TopicProficiency:
    """Average success rate of one set."""

    topic: str
    proficiency: float  # 0.0 to 1.0
    card_count: int
    mastered_count: int


@dataclass(frozen=True)
class DueForecastDay:
    """Cards falling due on one calendar day."""

    day_offset: int
    day: date
    count: int
    is_today: bool


@dataclass(frozen=True)
class Milestone:
    """An achievement and whether it has been reached."""

    title: str
    description: str
    is_achieved: bool


class StatisticsService:
    """
    Aggregate queries (due counts, queues, forecasts) backed by the cache.

    Args:
        scheduler: Supplies due/new predicates and queue ordering
        cache: Shared cache instance
        settings: Source of TTLs (defaults to get_settings())
    """

    def __init__(
        self,
        scheduler: ReviewScheduler,
        cache: CacheService,
        settings: Settings | None = None,
    ):
        self.scheduler = scheduler
        self.cache = cache
        self.settings = settings or get_settings()

    @property
    def clock(self) -> Clock:
        return self.scheduler.clock

    def _today(self) -> date:
        return self.clock.calendar_day(self.clock.now())

    # -------------------------------------------------------------------------
    # Due cards
    # -------------------------------------------------------------------------

    def due_count(self, card_sets: Sequence[CardSet]) -> int:
        """Total cards due now across `card_sets`."""

        def compute() -> int:
            now = self.clock.now()
            return sum(card_set.due_count(now) for card_set in card_sets)

        return self.cache.get_or_compute(
            due_count_key(s.id for s in card_sets),
            self.settings.due_count_ttl_seconds,
            compute,
        )

    def daily_review_queue(self, card_sets: Sequence[CardSet]) -> list[Card]:
        """Today's review queue, earliest due first. The list is the caller's own copy."""
        queue = self.cache.get_or_compute(
            daily_queue_key(self._today(), (s.id for s in card_sets)),
            self.settings.daily_queue_ttl_seconds,
            lambda: tuple(self.scheduler.daily_review_queue(card_sets)),
        )
        return list(queue)

    def estimate_daily_study_minutes(self, card_sets: Sequence[CardSet]) -> int:
        return estimate_study_minutes(len(self.daily_review_queue(card_sets)))

    # -------------------------------------------------------------------------
    # Per-set and per-topic statistics
    # -------------------------------------------------------------------------

    def set_statistics(self, card_set: CardSet) -> SetStatistics:
        return self.cache.get_or_compute(
            set_stats_key(card_set.id),
            self.settings.set_stats_ttl_seconds,
            lambda: self.scheduler.set_statistics(card_set),
        )

    def topic_proficiencies(self, card_sets: Sequence[CardSet]) -> list[TopicProficiency]:
        """Per-set proficiency, strongest topic first."""

        def compute() -> tuple[TopicProficiency, ...]:
            proficiencies = [
                TopicProficiency(
                    topic=card_set.topic,
                    proficiency=self.scheduler.set_statistics(card_set).average_success_rate,
                    card_count=card_set.card_count,
                    mastered_count=sum(
                        1 for card in card_set.cards if card.mastery_level is MasteryLevel.MASTERED
                    ),
                )
                for card_set in card_sets
            ]
            return tuple(sorted(proficiencies, key=lambda p: p.proficiency, reverse=True))

        return list(
            self.cache.get_or_compute(
                proficiency_key(s.id for s in card_sets),
                self.settings.forecast_ttl_seconds,
                compute,
            )
        )

    def due_forecast(self, card_sets: Sequence[CardSet], days: int = 7) -> list[DueForecastDay]:
        """
        Number of cards falling due on each of the next `days` calendar days.

        A card counts toward the day whose [start, next start) window contains
        its next_review_at; overdue cards are not counted.
        """
        today = self._today()

        def compute() -> tuple[DueForecastDay, ...]:
            cards = [card for card_set in card_sets for card in card_set.cards]
            forecast = []
            for offset in range(max(0, days)):
                day = today + timedelta(days=offset)
                start = self.clock.start_of_day(day)
                end = self.clock.start_of_day(day + timedelta(days=1))
                count = sum(1 for card in cards if start <= card.next_review_at < end)
                forecast.append(
                    DueForecastDay(day_offset=offset, day=day, count=count, is_today=offset == 0)
                )
            return tuple(forecast)

        return list(
            self.cache.get_or_compute(
                forecast_key(today, (s.id for s in card_sets), days),
                self.settings.forecast_ttl_seconds,
                compute,
            )
        )

    def mastery_distribution(self, card_sets: Sequence[CardSet]) -> dict[MasteryLevel, int]:
        distribution = {level: 0 for level in MasteryLevel}
        for card_set in card_sets:
            for card in card_set.cards:
                distribution[card.mastery_level] += 1
        return distribution

    def milestones(self, card_sets: Sequence[CardSet], current_streak: int) -> list[Milestone]:
        cards = [card for card_set in card_sets for card in card_set.cards]
        total_reviews = sum(card.review_count for card in cards)
        mastered = sum(1 for card in cards if card.mastery_level is MasteryLevel.MASTERED)

        return [
            Milestone("First Review", "Complete your first review session", total_reviews > 0),
            Milestone("Week Streak", "Study for 7 days in a row", current_streak >= 7),
            Milestone("100 Cards", "Create or generate 100 flashcards", len(cards) >= 100),
            Milestone("Master 50", "Achieve mastery on 50 cards", mastered >= 50),
            Milestone("1000 Reviews", "Complete 1000 card reviews", total_reviews >= 1000),
            Milestone("Month Streak", "Study for 30 days in a row", current_streak >= 30),
        ]

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def invalidate_for_card(self, card: Card) -> None:
        """Drop every cached aggregate the card contributes to."""
        if card.set_id is not None:
            self.cache.invalidate(set_stats_key(card.set_id))
        removed = sum(
            self.cache.invalidate_prefix(prefix)
            for prefix in (DUE_COUNT_PREFIX, DAILY_QUEUE_PREFIX, FORECAST_PREFIX, PROFICIENCY_PREFIX)
        )
        logger.debug("Invalidated aggregates for card {} ({} entries)", card.id, removed)
