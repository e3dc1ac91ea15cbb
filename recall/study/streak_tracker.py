"""
Streak Tracker - consecutive-day study streaks.

One event drives everything: a completed study session. Days are calendar
days in the clock's timezone, so a session at 23:59 and one at 00:01 count
as two consecutive days.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from recall.core.clock import Clock, SystemClock
from recall.core.models import StreakState
from recall.db.ports import StreakStore


class StreakTracker:
    """
    Maintains current and longest study streaks.

    Usage:
        tracker = StreakTracker(InMemoryStreakStore())
        tracker.record_completion()
    """

    def __init__(self, store: StreakStore, clock: Clock | None = None):
        self.store = store
        self.clock = clock or SystemClock()

    def record_completion(self, now: datetime | None = None) -> int:
        """
        Record a completed study session.

        Same day keeps the streak, the next day extends it, anything else
        (a gap of two or more days, or a day earlier than the last recorded
        one) starts over at 1.

        Returns:
            Updated current streak
        """
        today = self.clock.calendar_day(now or self.clock.now())
        state = self.store.load()
        previous = state.current_streak

        if state.last_study_day is None:
            current = 1
        elif state.last_study_day == today:
            current = state.current_streak
        elif (today - state.last_study_day).days == 1:
            current = state.current_streak + 1
        else:
            current = 1

        updated = StreakState(
            current_streak=current,
            last_study_day=today,
            longest_streak=max(state.longest_streak, current),
        )
        self.store.save(updated)

        if current != previous:
            logger.info(
                "Study streak {} -> {} (longest {})",
                previous,
                current,
                updated.longest_streak,
            )
        return current

    def current_streak(self) -> int:
        return self.store.load().current_streak

    def longest_streak(self) -> int:
        return self.store.load().longest_streak

    def reset(self) -> None:
        """Forget all streak history."""
        self.store.clear()
        logger.info("Study streak reset")
