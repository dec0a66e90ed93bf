"""Activity entity.

One recorded sport session. Built once when mapping a remote record or
a cache hit and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import (
    ActivityId,
    Calories,
    DateTime,
    Distance,
    Duration,
    Pace,
)


@dataclass(frozen=True)
class Activity:
    """Single sport session.

    Attributes:
        id: Activity identifier
        name: Display name
        sport_type: Resolved sport type
        start_time: Start instant
        duration: Moving/workout time
        distance: Covered distance
        calories: Energy expenditure
        device: Recording device name
        average_heart_rate: Average heart rate in bpm
        average_speed: Average speed as reported by the source

    Example:
        >>> activity = Activity(
        ...     id=ActivityId("a1"),
        ...     name="Morning Run",
        ...     sport_type=SportType.running(),
        ...     start_time=DateTime.from_components(2024, 5, 1),
        ...     duration=Duration.from_minutes(30),
        ...     distance=Distance.from_kilometers(6),
        ...     calories=Calories(350),
        ... )
        >>> str(activity.calculate_pace())
        '5:00 min/km'
    """

    id: ActivityId
    name: str
    sport_type: SportType
    start_time: DateTime
    duration: Duration
    distance: Distance
    calories: Calories
    device: Optional[str] = None
    average_heart_rate: Optional[float] = None
    average_speed: Optional[float] = None

    @property
    def calendar_date(self) -> date:
        """Local calendar date of the start time."""
        return self.start_time.to_date()

    def is_on_date(self, day: date) -> bool:
        return self.calendar_date == day

    def is_same_day(self, other: "Activity") -> bool:
        return self.start_time.is_same_day(other.start_time)

    def is_same_type(self, other: "Activity") -> bool:
        return self.sport_type.code == other.sport_type.code

    def has_valid_distance(self) -> bool:
        return self.distance.meters > 0

    def calculate_pace(self) -> Pace:
        """Minutes per kilometer, zero when no distance was covered."""
        if not self.has_valid_distance():
            return Pace(0)
        return Pace(self.duration.to_minutes() / self.distance.to_kilometers())

    def is_recent(self, days: float, now: datetime) -> bool:
        start = self.start_time.to_datetime()
        if (start.tzinfo is None) != (now.tzinfo is None):
            start = start.replace(tzinfo=now.tzinfo)
        return (now - start).total_seconds() / 86400 <= days
