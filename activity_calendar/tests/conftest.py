"""
Shared fixtures for activity calendar tests.

The clock is frozen on 2024-06-15 so "current month" is June 2024
(month 5) in every test unless a test moves it.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional
from unittest.mock import AsyncMock

import pytest

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import (
    ActivityId,
    Calories,
    DateTime,
    Distance,
    Duration,
)
from activity_calendar.domain.cache.models import CacheSettings
from activity_calendar.domain.cache.ports import IActivitySource
from activity_calendar.domain.shared.clock import FixedClock
from activity_calendar.infrastructure.cache.monthly_activity_cache import MonthlyActivityCache
from activity_calendar.infrastructure.storage.in_memory_store import InMemoryKeyValueStore

ActivityFactory = Callable[..., Activity]


# ═══════════════════════════════════════════════════════════
# CLOCK FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def fixed_now() -> datetime:
    """Frozen "now": Saturday 15 June 2024, noon."""
    return datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def clock(fixed_now: datetime) -> FixedClock:
    """Clock frozen at fixed_now."""
    return FixedClock(fixed_now)


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def make_activity() -> ActivityFactory:
    """Factory building activities with sensible defaults."""

    def _make(
        activity_id: str = "a1",
        day: date = date(2024, 5, 10),
        sport_code: int = 1,
        km: float = 5.0,
        minutes: float = 30.0,
        calories: float = 300.0,
        hour: int = 8,
        name: Optional[str] = None,
    ) -> Activity:
        return Activity(
            id=ActivityId(activity_id),
            name=name or f"Activity {activity_id}",
            sport_type=SportType.from_code(sport_code),
            start_time=DateTime.from_datetime(
                datetime(day.year, day.month, day.day) + timedelta(hours=hour)
            ),
            duration=Duration.from_minutes(minutes),
            distance=Distance.from_kilometers(km),
            calories=Calories(calories),
        )

    return _make


@pytest.fixture
def sample_activities(make_activity: ActivityFactory) -> list[Activity]:
    """5 km / 30 min / 300 cal and 10 km / 60 min / 600 cal on D1, 3 km / 20 min / 200 cal on D2."""
    d1 = date(2024, 5, 10)
    d2 = date(2024, 5, 12)
    return [
        make_activity("a1", day=d1, km=5, minutes=30, calories=300),
        make_activity("a2", day=d1, km=10, minutes=60, calories=600, hour=18),
        make_activity("a3", day=d2, km=3, minutes=20, calories=200),
    ]


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def mock_source() -> AsyncMock:
    """Remote activity source returning no activities."""
    source = AsyncMock(spec=IActivitySource)
    source.fetch_activities.return_value = []
    return source


@pytest.fixture
def cache_settings() -> CacheSettings:
    """Default cache settings (30 days, 50 months)."""
    return CacheSettings()


@pytest.fixture
def monthly_cache(
    store: InMemoryKeyValueStore,
    mock_source: AsyncMock,
    clock: FixedClock,
    cache_settings: CacheSettings,
) -> MonthlyActivityCache:
    """Monthly cache over the in-memory store and mock source."""
    return MonthlyActivityCache(
        store=store,
        source=mock_source,
        clock=clock,
        settings=cache_settings,
    )
