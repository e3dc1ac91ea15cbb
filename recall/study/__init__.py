"""
Study Module.

Provides:
- SM-2 review scheduling (ReviewScheduler)
- Study streak tracking (StreakTracker)
- Cached aggregate statistics (StatisticsService)
- The review loop facade (StudyService)
"""

from recall.study.review_scheduler import ReviewScheduler, SetStatistics
from recall.study.statistics_service import (
    DueForecastDay,
    Milestone,
    StatisticsService,
    TopicProficiency,
)
from recall.study.streak_tracker import StreakTracker
from recall.study.study_service import StudyService

__all__ = [
    "ReviewScheduler",
    "SetStatistics",
    "StreakTracker",
    "StatisticsService",
    "TopicProficiency",
    "DueForecastDay",
    "Milestone",
    "StudyService",
]
