"""
Unit tests for StudyService against the in-memory stores.

Tests:
- grade -> commit -> invalidate ordering
- Save failures are logged, not raised
- Unknown ids raise store errors
- Session defaults come from settings
"""

from uuid import uuid4

import pytest
from loguru import logger

from recall.core.exceptions import CardNotFoundError, CardSetNotFoundError
from recall.core.models import Grade
from recall.db.memory import InMemoryCardStore, InMemoryStreakStore
from recall.study.statistics_service import StatisticsService
from recall.study.streak_tracker import StreakTracker
from recall.study.study_service import StudyService


@pytest.fixture
def store(make_set):
    return InMemoryCardStore([make_set("Biology", new=6, due=25, future=3)])


@pytest.fixture
def service(store, scheduler, cache, settings, clock):
    return StudyService(
        store=store,
        scheduler=scheduler,
        statistics=StatisticsService(scheduler, cache, settings),
        streaks=StreakTracker(InMemoryStreakStore(), clock),
        settings=settings,
    )


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(handler_id)


class TestGrading:
    def test_grade_by_id_commits_to_store(self, service, store):
        card_id = store.list_sets()[0].new_cards()[0].id

        service.grade_card_by_id(card_id, Grade.GOOD)

        saved = store.get_card(card_id)
        assert saved.review_count == 1
        assert saved.interval_days == 1

    def test_grading_refreshes_due_count(self, service, store):
        sets = store.list_sets()
        before = service.statistics.due_count(sets)

        service.grade_card_by_id(sets[0].new_cards()[0].id, Grade.EASY)

        assert service.statistics.due_count(store.list_sets()) == before - 1

    def test_unknown_card_raises(self, service):
        with pytest.raises(CardNotFoundError):
            service.grade_card_by_id(uuid4(), Grade.GOOD)

    def test_save_failure_is_logged_and_card_keeps_state(self, service, store, monkeypatch, log_messages):
        card = store.get_card(store.list_sets()[0].new_cards()[0].id)

        def broken_save(_card):
            raise OSError("disk full")

        monkeypatch.setattr(store, "save_card", broken_save)

        graded = service.grade_card(card, Grade.GOOD)

        assert graded.review_count == 1
        assert any("Failed to save card" in m and "disk full" in m for m in log_messages)

    def test_unsaved_grade_is_not_visible_to_store(self, service, store):
        card_id = store.list_sets()[0].new_cards()[0].id
        card = store.get_card(card_id)

        service.scheduler.grade_card(card, Grade.GOOD)

        assert store.get_card(card_id).review_count == 0


class TestSessions:
    def test_defaults_from_settings(self, service, store, settings):
        set_id = store.list_sets()[0].id

        session = service.start_session(set_id)

        assert sum(1 for c in session if c.is_new) == settings.default_max_new
        assert sum(1 for c in session if not c.is_new) == settings.default_max_review

    def test_explicit_limits(self, service, store):
        session = service.start_session(store.list_sets()[0].id, max_new=1, max_review=2)

        assert len(session) == 3

    def test_unknown_set_raises(self, service):
        with pytest.raises(CardSetNotFoundError):
            service.start_session(uuid4())

    def test_card_sets_filter(self, service, store):
        set_id = store.list_sets()[0].id

        assert [s.id for s in service.card_sets([set_id])] == [set_id]
        assert len(service.card_sets()) == 1

    def test_complete_session_records_streak(self, service, clock):
        assert service.complete_session() == 1
        clock.advance(days=1)
        assert service.complete_session() == 2
