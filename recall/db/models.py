"""
Table models for persisted scheduling state.

Card rows hold the full scheduling state so a card can be reloaded and
graded without touching its set. Timestamps are stored in UTC.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import JSON, Date, DateTime, Float, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class CardSetRow(Base):
    """A topic-grouped collection of cards."""

    __tablename__ = "card_sets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    tag: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    cards: Mapped[list[CardRow]] = relationship(
        back_populates="card_set", cascade="all, delete-orphan", order_by="CardRow.created_at"
    )


class CardRow(Base):
    """A flashcard and its SM-2 scheduling state."""

    __tablename__ = "cards"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    set_id: Mapped[UUID | None] = mapped_column(ForeignKey("card_sets.id"), index=True)
    front: Mapped[str] = mapped_column(Text, default="")
    back: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Scheduling
    ease_factor: Mapped[float] = mapped_column(Float, default=2.5)
    interval_days: Mapped[int] = mapped_column(Integer, default=0)
    next_review_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    review_count: Mapped[int] = mapped_column(Integer, default=0)
    again_count: Mapped[int] = mapped_column(Integer, default=0)
    good_count: Mapped[int] = mapped_column(Integer, default=0)
    easy_count: Mapped[int] = mapped_column(Integer, default=0)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    card_set: Mapped[CardSetRow | None] = relationship(back_populates="cards")


class StudyStreakRow(Base):
    """Single-row table holding the study streak."""

    __tablename__ = "study_streak"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_study_day: Mapped[date | None] = mapped_column(Date)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
