"""
Statistics domain models.

Aggregates derived from a list of activities. Never persisted: always
recomputed on demand from a month's activity list.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import Calories, Distance, Duration
from activity_calendar.domain.grid.grid_builder import days_in_month


class InsightPolarity(str, Enum):
    """Tone of an insight message."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class PeriodType(str, Enum):
    """Granularity of a statistics period."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class TrendDirection(str, Enum):
    """Direction of a metric between two periods."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class TimePeriod:
    """Inclusive date range statistics are computed for.

    Example:
        >>> period = TimePeriod.for_month(2024, 1)
        >>> period.end
        datetime.date(2024, 2, 29)
    """

    start: date
    end: date
    type: PeriodType = PeriodType.MONTH

    @classmethod
    def for_month(cls, year: int, month: int) -> "TimePeriod":
        """Period covering a 0-based month."""
        return cls(
            start=date(year, month + 1, 1),
            end=date(year, month + 1, days_in_month(year, month)),
            type=PeriodType.MONTH,
        )

    @classmethod
    def for_year(cls, year: int) -> "TimePeriod":
        return cls(start=date(year, 1, 1), end=date(year, 12, 31), type=PeriodType.YEAR)


@dataclass(frozen=True)
class MonthlyTotals:
    """Sums over a list of activities."""

    total_activities: int
    total_distance: Distance
    total_duration: Duration
    total_calories: Calories
    active_days: int

    @classmethod
    def empty(cls) -> "MonthlyTotals":
        return cls(0, Distance.zero(), Duration.zero(), Calories.zero(), 0)


@dataclass(frozen=True)
class ActivityAverages:
    """Per-activity averages and activities per active day."""

    average_distance: Distance
    average_duration: Duration
    average_calories: Calories
    average_activities_per_day: float


@dataclass(frozen=True)
class MonthlyStats:
    """Overall statistics for a period."""

    total_activities: int
    total_distance: Distance
    total_duration: Duration
    total_calories: Calories
    active_days: int

    @classmethod
    def from_totals(cls, totals: MonthlyTotals) -> "MonthlyStats":
        return cls(
            total_activities=totals.total_activities,
            total_distance=totals.total_distance,
            total_duration=totals.total_duration,
            total_calories=totals.total_calories,
            active_days=totals.active_days,
        )

    @property
    def average_distance(self) -> Distance:
        return Distance(self.total_distance.meters / max(self.total_activities, 1))

    @property
    def average_duration(self) -> Duration:
        return Duration(self.total_duration.seconds / max(self.total_activities, 1))


@dataclass(frozen=True)
class SportStats:
    """Statistics for one sport code."""

    sport_type: SportType
    activity_count: int
    total_distance: Distance
    total_duration: Duration
    total_calories: Calories

    @property
    def average_distance(self) -> Distance:
        return Distance(self.total_distance.meters / max(self.activity_count, 1))

    @property
    def average_duration(self) -> Duration:
        return Duration(self.total_duration.seconds / max(self.activity_count, 1))

    @property
    def average_calories(self) -> Calories:
        return Calories(self.total_calories.value / max(self.activity_count, 1))


@dataclass(frozen=True)
class Insight:
    """Qualitative remark derived from totals."""

    message: str
    polarity: InsightPolarity


@dataclass(frozen=True)
class Trend:
    """Change of a metric against the previous period."""

    metric: str
    direction: TrendDirection
    percentage: float
    description: str


@dataclass(frozen=True)
class Statistics:
    """Everything computed for one period."""

    activities: Tuple[Activity, ...]
    monthly_stats: MonthlyStats
    sport_stats: Tuple[SportStats, ...]
    insights: Tuple[Insight, ...]
    averages: ActivityAverages
    period: Optional[TimePeriod] = None
    trends: Tuple[Trend, ...] = field(default=())

    def sport_stats_for(self, sport_type: SportType) -> Optional[SportStats]:
        for stats in self.sport_stats:
            if stats.sport_type.code == sport_type.code:
                return stats
        return None

    def most_active_day(self) -> Optional[date]:
        """Date with the most activities; first encountered wins ties."""
        if not self.activities:
            return None
        counts = Counter(activity.calendar_date for activity in self.activities)
        return counts.most_common(1)[0][0]

    def most_popular_sport(self) -> Optional[SportType]:
        if not self.sport_stats:
            return None
        return max(self.sport_stats, key=lambda stats: stats.activity_count).sport_type
