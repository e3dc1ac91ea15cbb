"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from recall.cache.cache_service import CacheService  # noqa: E402
from recall.config import Settings  # noqa: E402
from recall.core.clock import FixedClock  # noqa: E402
from recall.core.models import Card, CardSet  # noqa: E402
from recall.study.review_scheduler import ReviewScheduler  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite, no external services)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class ManualTimer:
    """Monotonic time source the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    """Clock pinned to 2025-03-10 09:00 UTC."""
    return FixedClock(datetime(2025, 3, 10, 9, 0, tzinfo=UTC))


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def cache(timer):
    return CacheService(clock=timer)


@pytest.fixture
def settings():
    """Settings with the documented defaults, ignoring any local .env."""
    return Settings(_env_file=None)


@pytest.fixture
def scheduler(clock):
    """Scheduler with a seeded shuffle."""
    return ReviewScheduler(clock=clock, rng=random.Random(42))


@pytest.fixture
def make_card(clock):
    """Build cards timestamped against the test clock."""

    def _make(front="What is the powerhouse of the cell?", back="Mitochondria", **kwargs):
        kwargs.setdefault("created_at", clock.now())
        return Card(front=front, back=back, **kwargs)

    return _make


@pytest.fixture
def make_set(clock, make_card):
    """Build a set of `new` new cards and `due` previously reviewed due cards."""

    def _make(topic="Biology", new=0, due=0, future=0):
        card_set = CardSet(topic=topic, created_at=clock.now())
        for i in range(new):
            card_set.add_card(
                make_card(front=f"{topic} new {i}", created_at=clock.now() - timedelta(minutes=new - i))
            )
        for i in range(due):
            card_set.add_card(
                make_card(
                    front=f"{topic} due {i}",
                    interval_days=1,
                    review_count=1,
                    good_count=1,
                    last_reviewed_at=clock.now() - timedelta(days=1),
                    next_review_at=clock.now() - timedelta(hours=due - i),
                )
            )
        for i in range(future):
            card_set.add_card(
                make_card(
                    front=f"{topic} future {i}",
                    interval_days=6,
                    review_count=2,
                    good_count=2,
                    last_reviewed_at=clock.now() - timedelta(days=1),
                    next_review_at=clock.now() + timedelta(days=i + 1),
                )
            )
        return card_set

    return _make
