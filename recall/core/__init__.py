"""
Core Module - Shared domain models and interfaces.

Components:
- models: Card, CardSet, Grade, StreakState
- mastery: Card mastery levels (MasteryLevel)
- clock: Clock / calendar abstraction (SystemClock, FixedClock)
- exceptions: Store-boundary errors

Design Principle:
Study, cache and storage modules import from recall.core rather than
redefining shared concepts.
"""

from recall.core.clock import Clock, FixedClock, SystemClock
from recall.core.exceptions import CardNotFoundError, CardSetNotFoundError, RecallError
from recall.core.mastery import MasteryLevel, format_progress_bar, mastery_progress
from recall.core.models import Card, CardSet, Grade, StreakState

__all__ = [
    # Models
    "Card",
    "CardSet",
    "Grade",
    "StreakState",
    # Mastery
    "MasteryLevel",
    "mastery_progress",
    "format_progress_bar",
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    # Errors
    "RecallError",
    "CardNotFoundError",
    "CardSetNotFoundError",
]
