"""
Clock and calendar abstraction.

Everything that needs "now" or "which calendar day is this" goes through a
Clock so scheduling and streaks agree on a single timezone, and so tests can
pin time without monkeypatching datetime.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of wall-clock time and calendar-day arithmetic."""

    def now(self) -> datetime: ...

    def calendar_day(self, moment: datetime | None = None) -> date: ...

    def start_of_day(self, day: date) -> datetime: ...


class SystemClock:
    """
    Real clock bound to one timezone.

    Args:
        tz: IANA zone name ("Europe/Berlin"), a tzinfo, or None for the
            host's local zone. The local zone is resolved on every call so
            daylight-saving changes apply in long-running processes.
    """

    def __init__(self, tz: str | tzinfo | None = None):
        if isinstance(tz, str):
            tz = ZoneInfo(tz)
        self.tz = tz

    def _localize(self, moment: datetime) -> datetime:
        """Attach the clock's zone to a naive moment."""
        if self.tz is None:
            return moment.astimezone()
        return moment.replace(tzinfo=self.tz)

    def now(self) -> datetime:
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)

    def calendar_day(self, moment: datetime | None = None) -> date:
        moment = moment or self.now()
        if moment.tzinfo is None:
            moment = self._localize(moment)
        if self.tz is None:
            return moment.astimezone().date()
        return moment.astimezone(self.tz).date()

    def start_of_day(self, day: date) -> datetime:
        return self._localize(datetime.combine(day, time.min))


class FixedClock(SystemClock):
    """
    Settable clock for tests and simulations.

    Usage:
        clock = FixedClock(datetime(2025, 1, 1, 9, 0, tzinfo=UTC))
        clock.advance(days=1)
    """

    def __init__(self, moment: datetime | None = None, tz: str | tzinfo | None = UTC):
        super().__init__(tz)
        self._now = moment or datetime(2025, 1, 1, 12, 0)
        if self._now.tzinfo is None:
            self._now = self._localize(self._now)

    def now(self) -> datetime:
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment if moment.tzinfo else self._localize(moment)

    def advance(self, **kwargs: float) -> datetime:
        """Move time forward by a timedelta built from kwargs."""
        self._now = self._now + timedelta(**kwargs)
        return self._now
