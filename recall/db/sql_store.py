"""
SQLAlchemy-backed card and streak stores.

Rows are converted to domain dataclasses on the way out, so nothing outside
this module holds a live ORM object. SQLite drops timezone info, so
timestamps are written as UTC and re-tagged as UTC when read back.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from recall.core.exceptions import CardNotFoundError, CardSetNotFoundError
from recall.core.models import Card, CardSet, StreakState
from recall.db.database import get_session_factory, session_scope
from recall.db.models import CardRow, CardSetRow, StudyStreakRow


def _to_utc(moment: datetime | None) -> datetime | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _row_to_card(row: CardRow) -> Card:
    return Card(
        id=row.id,
        set_id=row.set_id,
        front=row.front,
        back=row.back,
        tags=list(row.tags or []),
        created_at=_to_utc(row.created_at),
        ease_factor=row.ease_factor,
        interval_days=row.interval_days,
        next_review_at=_to_utc(row.next_review_at),
        review_count=row.review_count,
        again_count=row.again_count,
        good_count=row.good_count,
        easy_count=row.easy_count,
        last_reviewed_at=_to_utc(row.last_reviewed_at),
    )


def _row_to_set(row: CardSetRow) -> CardSet:
    return CardSet(
        id=row.id,
        topic=row.topic,
        tag=row.tag,
        created_at=_to_utc(row.created_at),
        cards=[_row_to_card(card_row) for card_row in row.cards],
    )


def _apply_scheduling(row: CardRow, card: Card) -> None:
    row.ease_factor = card.ease_factor
    row.interval_days = card.interval_days
    row.next_review_at = _to_utc(card.next_review_at)
    row.review_count = card.review_count
    row.again_count = card.again_count
    row.good_count = card.good_count
    row.easy_count = card.easy_count
    row.last_reviewed_at = _to_utc(card.last_reviewed_at)


def _card_to_row(card: Card, set_id: UUID) -> CardRow:
    row = CardRow(
        id=card.id,
        set_id=set_id,
        front=card.front,
        back=card.back,
        tags=list(card.tags),
        created_at=_to_utc(card.created_at),
    )
    _apply_scheduling(row, card)
    return row


class SqlCardStore:
    """CardStore over any SQLAlchemy engine."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._factory = session_factory or get_session_factory()

    def get_card(self, card_id: UUID) -> Card:
        with session_scope(self._factory) as session:
            row = session.get(CardRow, card_id)
            if row is None:
                raise CardNotFoundError(card_id)
            return _row_to_card(row)

    def get_set(self, set_id: UUID) -> CardSet:
        with session_scope(self._factory) as session:
            row = session.scalars(
                select(CardSetRow)
                .where(CardSetRow.id == set_id)
                .options(selectinload(CardSetRow.cards))
            ).first()
            if row is None:
                raise CardSetNotFoundError(set_id)
            return _row_to_set(row)

    def list_sets(self) -> list[CardSet]:
        with session_scope(self._factory) as session:
            rows = session.scalars(
                select(CardSetRow)
                .options(selectinload(CardSetRow.cards))
                .order_by(CardSetRow.created_at)
            ).all()
            return [_row_to_set(row) for row in rows]

    def find_set_by_topic(self, topic: str) -> CardSet | None:
        """Case-insensitive topic lookup."""
        for card_set in self.list_sets():
            if card_set.topic.strip().lower() == topic.strip().lower():
                return card_set
        return None

    def add_set(self, card_set: CardSet) -> CardSet:
        with session_scope(self._factory) as session:
            row = CardSetRow(
                id=card_set.id,
                topic=card_set.topic,
                tag=card_set.tag,
                created_at=_to_utc(card_set.created_at),
            )
            session.add(row)
            for card in card_set.cards:
                card.set_id = card_set.id
                session.add(_card_to_row(card, card_set.id))
        logger.debug("Stored card set {} ({} cards)", card_set.id, len(card_set.cards))
        return card_set

    def add_card(self, card: Card, set_id: UUID) -> Card:
        with session_scope(self._factory) as session:
            if session.get(CardSetRow, set_id) is None:
                raise CardSetNotFoundError(set_id)
            card.set_id = set_id
            session.add(_card_to_row(card, set_id))
        return card

    def save_card(self, card: Card) -> None:
        with session_scope(self._factory) as session:
            row = session.get(CardRow, card.id)
            if row is None:
                raise CardNotFoundError(card.id)
            _apply_scheduling(row, card)


class SqlStreakStore:
    """StreakStore persisted as a single row."""

    _ROW_ID = 1

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self._factory = session_factory or get_session_factory()

    def load(self) -> StreakState:
        with session_scope(self._factory) as session:
            row = session.get(StudyStreakRow, self._ROW_ID)
            if row is None:
                return StreakState()
            return StreakState(
                current_streak=row.current_streak,
                last_study_day=row.last_study_day,
                longest_streak=row.longest_streak,
            )

    def save(self, state: StreakState) -> None:
        with session_scope(self._factory) as session:
            row = session.get(StudyStreakRow, self._ROW_ID)
            if row is None:
                row = StudyStreakRow(id=self._ROW_ID)
                session.add(row)
            row.current_streak = state.current_streak
            row.last_study_day = state.last_study_day
            row.longest_streak = state.longest_streak

    def clear(self) -> None:
        with session_scope(self._factory) as session:
            row = session.get(StudyStreakRow, self._ROW_ID)
            if row is not None:
                session.delete(row)
