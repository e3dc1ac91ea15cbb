"""
Service Factory
Wires stores, scheduler, cache and streaks from Settings.
"""

from __future__ import annotations

from recall.cache.cache_service import CacheService
from recall.config import Settings, get_settings
from recall.core.clock import Clock, SystemClock
from recall.study.review_scheduler import ReviewScheduler
from recall.study.statistics_service import StatisticsService
from recall.study.streak_tracker import StreakTracker
from recall.study.study_service import StudyService


def build_study_service(
    settings: Settings | None = None,
    clock: Clock | None = None,
    cache: CacheService | None = None,
) -> StudyService:
    """
    Returns a StudyService backed by the SQL stores at `settings.database_url`.

    Tables are created if missing.
    """
    from recall.db.database import create_db_engine, get_session_factory, init_db
    from recall.db.sql_store import SqlCardStore, SqlStreakStore

    settings = settings or get_settings()
    clock = clock or SystemClock(settings.timezone)

    engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    init_db(engine)
    factory = get_session_factory(engine)

    scheduler = ReviewScheduler(clock=clock)
    statistics = StatisticsService(scheduler, cache or CacheService(), settings)
    streaks = StreakTracker(SqlStreakStore(factory), clock)

    return StudyService(
        store=SqlCardStore(factory),
        scheduler=scheduler,
        statistics=statistics,
        streaks=streaks,
        settings=settings,
    )
